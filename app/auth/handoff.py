import asyncio

from app.auth.errors import SenderDroppedError

__all__ = ("Handoff",)


class Handoff[T]:
    """A single-use, single-value channel between a sender and one receiver.

    Must be created while an event loop is running.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    @property
    def closed(self) -> bool:
        """Whether the channel can no longer accept a value."""
        return self._future.done()

    @property
    def receiver_dropped(self) -> bool:
        return self._future.cancelled()

    def send(self, value: T) -> bool:
        """Deliver `value`, return False if it was rejected.

        A value is rejected once a value was sent, the sender was closed or the
        receiver stopped listening.
        """
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def close(self) -> None:
        """Drop the sender without a value."""
        if not self._future.done():
            self._future.set_exception(SenderDroppedError())
            # Mark the exception as retrieved, the receiver may be long gone
            self._future.exception()

    def drop_receiver(self) -> None:
        if not self._future.done():
            self._future.cancel()

    async def receive(self) -> T:
        """Wait for the value.

        Cancelling the waiting task drops the receiver.

        Raises:
            SenderDroppedError: If the sender was closed without a value.
        """
        return await self._future
