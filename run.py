import asyncio
import contextlib

import uvicorn
from loguru import logger

from app.auth.google import GoogleAuth
from app.auth.registry import PendingRegistry
from app.core.config import settings
from app.core.db import create_tables, engine
from app.main import create_app
from app.utils.logging import setup_logging
from bot.main import SMPBot


async def main() -> None:
    setup_logging("smp_link.log")
    if settings.is_dev:
        await create_tables()

    # Shared by the bot, which starts logins, and the server, which completes them
    registry = PendingRegistry()
    auth = GoogleAuth.from_settings(settings, registry)

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(auth), host=settings.host, port=settings.port, log_config=None
        )
    )
    bot = SMPBot(auth)

    tasks = {
        asyncio.create_task(server.serve(), name="server"),
        asyncio.create_task(bot.start(settings.discord_bot_token), name="bot"),
        asyncio.create_task(
            registry.run_sweeper(settings.auth_sweep_interval_seconds), name="sweeper"
        ),
    }
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            logger.info(f"{task.get_name()} stopped")
            task.result()
    finally:
        server.should_exit = True
        await bot.close()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await engine.dispose()


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt, asyncio.CancelledError):
        asyncio.run(main())
