from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import discord
from discord import ButtonStyle

from app.core.constants import LOGIN_BUTTON_ID, LOGOUT_BUTTON_ID
from bot import ui
from bot.types import Interaction

if TYPE_CHECKING:
    from bot.cogs.verification import VerificationCog

__all__ = ("ChoiceView", "ConfirmView", "LinkView", "VerificationPanel")


class LoginButton(ui.Button["VerificationPanel"]):
    def __init__(self) -> None:
        super().__init__(style=ButtonStyle.success, label="Login", custom_id=LOGIN_BUTTON_ID)

    async def callback(self, i: Interaction) -> None:
        await self.view.cog.login(i)


class LogoutButton(ui.Button["VerificationPanel"]):
    def __init__(self) -> None:
        super().__init__(style=ButtonStyle.danger, label="Logout", custom_id=LOGOUT_BUTTON_ID)

    async def callback(self, i: Interaction) -> None:
        await self.view.cog.logout(i)


class VerificationPanel(ui.View):
    """The persistent login/logout panel posted by `/setup message`."""

    def __init__(self, cog: VerificationCog) -> None:
        super().__init__(timeout=None)
        self.cog = cog
        self.add_item(LoginButton())
        self.add_item(LogoutButton())


class LinkView(ui.View):
    def __init__(self, *, label: str, url: str) -> None:
        super().__init__(timeout=None)
        self.add_item(discord.ui.Button(style=ButtonStyle.link, label=label, url=url))


class ChoiceSelect(ui.Select["ChoiceView"]):
    async def callback(self, i: Interaction) -> None:
        await i.response.defer()
        self.view.choice = self.values[0]
        self.view.stop()


class ChoiceView(ui.View):
    """Ask the author to pick one option, `choice` stays None on timeout."""

    def __init__(
        self,
        *,
        author_id: int,
        placeholder: str,
        options: Sequence[tuple[str, str]],
        timeout: float,
    ) -> None:
        super().__init__(author_id=author_id, timeout=timeout)
        self.choice: str | None = None
        self.add_item(
            ChoiceSelect(
                placeholder=placeholder,
                options=[
                    discord.SelectOption(label=label, value=value) for label, value in options
                ],
            )
        )


class ConfirmButton(ui.Button["ConfirmView"]):
    async def callback(self, i: Interaction) -> None:
        await i.response.defer()
        self.view.confirmed = True
        self.view.stop()


class ConfirmView(ui.View):
    def __init__(self, *, author_id: int, label: str, timeout: float) -> None:
        super().__init__(author_id=author_id, timeout=timeout)
        self.confirmed = False
        self.add_item(ConfirmButton(style=ButtonStyle.danger, label=label))
