from typing import TYPE_CHECKING

import discord

if TYPE_CHECKING:
    from bot.main import SMPBot

type Interaction = discord.Interaction[SMPBot]
