import asyncio

import pytest

from app.auth.errors import SenderDroppedError
from app.auth.handoff import Handoff


@pytest.mark.asyncio
async def test_send_then_receive() -> None:
    handoff: Handoff[str] = Handoff()

    assert handoff.send("token") is True
    assert await handoff.receive() == "token"


@pytest.mark.asyncio
async def test_second_send_is_rejected() -> None:
    handoff: Handoff[str] = Handoff()
    handoff.send("first")

    assert handoff.send("second") is False
    assert await handoff.receive() == "first"


@pytest.mark.asyncio
async def test_close_wakes_receiver_with_sender_dropped() -> None:
    handoff: Handoff[str] = Handoff()
    receiver = asyncio.create_task(handoff.receive())
    await asyncio.sleep(0)

    handoff.close()

    with pytest.raises(SenderDroppedError):
        await receiver
    assert handoff.send("late") is False


@pytest.mark.asyncio
async def test_send_after_receiver_dropped_is_rejected() -> None:
    handoff: Handoff[str] = Handoff()

    handoff.drop_receiver()

    assert handoff.receiver_dropped
    assert handoff.send("token") is False


@pytest.mark.asyncio
async def test_cancelled_receiver_drops_the_channel() -> None:
    handoff: Handoff[str] = Handoff()
    receiver = asyncio.create_task(handoff.receive())
    await asyncio.sleep(0)

    receiver.cancel()
    with pytest.raises(asyncio.CancelledError):
        await receiver

    assert handoff.closed
    assert handoff.send("token") is False
