from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Generator
from typing import Any

from loguru import logger

from app.auth.errors import AuthTimeoutError, SenderDroppedError
from app.auth.handoff import Handoff
from app.schemas.auth import TokenResponse

__all__ = ("AuthProcess",)


class AuthProcess:
    """Wait for the token of one login, bounded by a deadline.

    Await it once to get the `TokenResponse`. The deadline always wins: a token
    observed after it has passed still raises `AuthTimeoutError`.

    Raises:
        AuthTimeoutError: If the deadline passes before a token is delivered.
        SenderDroppedError: If the pending request was discarded without a token.
    """

    def __init__(
        self,
        *,
        deadline: float,
        handoff: Handoff[TokenResponse],
        state: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.deadline = deadline
        self.state = state
        """Kept for diagnostics only"""
        self._handoff = handoff
        self._clock = clock
        self._awaited = False

    def __repr__(self) -> str:
        return f"<AuthProcess state={self.state[:8]}... deadline={self.deadline:.1f}>"

    def __await__(self) -> Generator[Any, None, TokenResponse]:
        return self.wait().__await__()

    @property
    def expired(self) -> bool:
        return self._clock() > self.deadline

    async def wait(self) -> TokenResponse:
        if self._awaited:
            msg = "An AuthProcess can only be awaited once"
            raise RuntimeError(msg)
        self._awaited = True

        if self.expired:
            self._handoff.drop_receiver()
            raise AuthTimeoutError

        try:
            # Cancelling the receive drops the receiver, so late deliveries are rejected
            async with asyncio.timeout(self.deadline - self._clock()):
                token = await self._handoff.receive()
        except TimeoutError:
            logger.debug(f"{self!r} timed out")
            raise AuthTimeoutError from None
        except SenderDroppedError:
            # The sweeper closes requests whose deadline passed
            if self.expired:
                raise AuthTimeoutError from None
            raise

        if self.expired:
            raise AuthTimeoutError
        return token
