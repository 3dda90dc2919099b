from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

from app.auth.handoff import Handoff
from app.schemas.auth import TokenResponse

__all__ = ("PendingAuthRequest", "PendingRegistry")


@dataclass(kw_only=True)
class PendingAuthRequest:
    """A login waiting for the Google redirect."""

    handoff: Handoff[TokenResponse] = field(repr=False)
    username: str
    """Name of the member logging in, shown on the success page"""
    guild_image_source: str
    """Icon URL of the guild, may be empty"""
    deadline: float
    """Clock value after which the login is abandoned"""


class PendingRegistry:
    """Logins waiting for their callback, keyed by OAuth2 state token.

    Mutations are serialized by a lock. Lookups never suspend, so on a single
    event loop they always observe a map that is not being modified.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._pending: dict[str, PendingAuthRequest] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, state: object) -> bool:
        return state in self._pending

    def get(self, state: str) -> PendingAuthRequest | None:
        return self._pending.get(state)

    async def insert(self, state: str, request: PendingAuthRequest) -> None:
        async with self._lock:
            # States come from a CSPRNG, a collision means a bug upstream
            assert state not in self._pending, "OAuth2 state collision"
            self._pending[state] = request

    async def remove(self, state: str) -> PendingAuthRequest | None:
        """Claim the request for `state`, None if unknown or already claimed."""
        async with self._lock:
            return self._pending.pop(state, None)

    async def sweep(self, now: float | None = None) -> int:
        """Evict requests whose deadline has passed and return how many were evicted."""
        now = self._clock() if now is None else now
        async with self._lock:
            expired = [state for state, req in self._pending.items() if req.deadline < now]
            for state in expired:
                self._pending.pop(state).handoff.close()

        if expired:
            logger.debug(f"Evicted {len(expired)} expired pending auth requests")
        return len(expired)

    async def run_sweeper(self, interval: float) -> None:
        """Sweep expired requests every `interval` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.sweep()
