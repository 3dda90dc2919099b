import uuid

from discord import Interaction, app_commands
from loguru import logger

from app.auth.errors import AuthTimeoutError
from app.core.exceptions import UserFacingError


def _describe(e: Exception) -> str | None:
    """The message shown for expected errors, None for internal ones."""
    match e:
        case UserFacingError():
            return e.message
        case AuthTimeoutError():
            return "You didn't finish the authentication process in time, please try again."
        case app_commands.MissingPermissions():
            return f"You are missing the following permissions: {', '.join(e.missing_permissions)}"
        case app_commands.BotMissingPermissions():
            return (
                "The bot is missing the following permissions: "
                f"{', '.join(e.missing_permissions)}"
            )
        case app_commands.NoPrivateMessage():
            return "This command can only be used in a server."
        case app_commands.CommandOnCooldown():
            return f"You can use this command again in {e.retry_after:.0f} seconds."
        case _:
            return None


async def error_handler(i: Interaction, error: Exception) -> None:
    e = error.original if isinstance(error, app_commands.CommandInvokeError) else error

    message = _describe(e)
    if message is None:
        correlation_id = str(uuid.uuid4())
        logger.opt(exception=e).error(
            f"[{correlation_id}] {i.user.name} ({i.user.id}) interaction failed"
        )
        message = (
            "An internal error occurred. If this error persists please contact "
            f"the developers with the following code: `{correlation_id}`"
        )

    if not i.response.is_done():
        await i.response.send_message(message, ephemeral=True)
    else:
        await i.followup.send(message, ephemeral=True)
