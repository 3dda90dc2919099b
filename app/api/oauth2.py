from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from loguru import logger

from app.auth.errors import AuthError, UnknownStateError
from app.auth.google import GoogleAuth
from app.schemas.auth import TokenResponse
from app.utils.pages import render_auth_success, render_error

router = APIRouter(tags=["oauth2"])


def get_auth(request: Request) -> GoogleAuth:
    return request.app.state.auth


@router.get("/oauth2", response_class=HTMLResponse)
async def oauth2_callback(
    code: str, state: str, auth: Annotated[GoogleAuth, Depends(get_auth)]
) -> HTMLResponse:
    """Receive the Google redirect and hand the token to the waiting login."""
    try:
        pending = await auth.claim(state)
    except UnknownStateError as e:
        # Replayed, expired or forged, all rejected the same way
        logger.warning("OAuth2 callback with an unknown state")
        return HTMLResponse(
            render_error(f"{e}, please login again."),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    token: TokenResponse | None = None
    try:
        token = await auth.exchange(code)
    except AuthError:
        correlation_id = str(uuid.uuid4())
        logger.exception(f"[{correlation_id}] Could not get the OAuth2 token of {pending.username}")
        return HTMLResponse(
            render_error("Could not link your Google account, please login again.", correlation_id),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    finally:
        # The request is claimed, the waiting login cannot succeed anymore
        if token is None:
            pending.handoff.close()

    auth.deliver(pending, token)
    return HTMLResponse(render_auth_success(pending.username, pending.guild_image_source))
