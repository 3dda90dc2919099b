import discord
from discord import ui

from bot.types import Interaction
from bot.utils.error_handler import error_handler

__all__ = ("Button", "Select", "View")


class Button[V: View](ui.Button):
    view: V


class Select[V: View](ui.Select):
    view: V


class View(ui.View):
    message: discord.Message | discord.WebhookMessage | None = None

    def __init__(self, *, author_id: int | None = None, timeout: float | None = 180.0) -> None:
        super().__init__(timeout=timeout)
        self.author_id = author_id

    async def interaction_check(self, i: Interaction) -> bool:
        if self.author_id is None or i.user.id == self.author_id:
            return True
        await i.response.send_message("This is not for you.", ephemeral=True)
        return False

    def disable_items(self) -> None:
        for item in self.children:
            if isinstance(item, ui.Button | ui.Select):
                item.disabled = True

    async def on_timeout(self) -> None:
        self.disable_items()
        if self.message is not None:
            await self.message.edit(view=self)

    async def on_error(self, i: Interaction, error: Exception, _item: ui.Item) -> None:
        return await error_handler(i, error)
