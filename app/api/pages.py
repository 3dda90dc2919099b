from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from app.core.config import settings

router = APIRouter(tags=["pages"])


@router.get("/discord")
async def discord_redirect() -> RedirectResponse:
    """Redirect to the support Discord server."""
    return RedirectResponse(f"https://discord.gg/{settings.discord_invite_code}")
