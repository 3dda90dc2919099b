import anyio
import discord
from discord.ext import commands
from loguru import logger

from app.auth.google import GoogleAuth
from app.core.config import settings
from bot.command_tree import CommandTree

COGS_PATH = anyio.Path(__file__).parent / "cogs"


class SMPBot(commands.Bot):
    def __init__(self, auth: GoogleAuth) -> None:
        intents = discord.Intents.default()
        intents.members = True
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            tree_cls=CommandTree,
        )
        self.auth = auth

    async def _load_cogs(self) -> None:
        async for file in COGS_PATH.iterdir():
            if file.suffix == ".py":
                cog_name = f"bot.cogs.{file.stem}"
                await self.load_extension(cog_name)
                logger.info(f"Loaded cog: {cog_name}")

        await self.load_extension("jishaku")

    async def _sync_commands(self) -> None:
        if settings.discord_dev_guild_id is None:
            synced = await self.tree.sync()
        else:
            guild = discord.Object(settings.discord_dev_guild_id)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
        logger.info(f"Synced {len(synced)} application commands")

    async def setup_hook(self) -> None:
        await self._load_cogs()
        await self._sync_commands()

    async def on_ready(self) -> None:
        assert self.user is not None
        logger.info(f"{self.user.name} is ready!")
