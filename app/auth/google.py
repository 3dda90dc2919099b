from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

import httpx
from loguru import logger
from pydantic import ValidationError

from app.auth.errors import (
    FetchError,
    MalformedResponseError,
    NonOkResponseError,
    UnknownStateError,
)
from app.auth.handoff import Handoff
from app.auth.process import AuthProcess
from app.auth.registry import PendingAuthRequest, PendingRegistry
from app.core import constants
from app.core.config import Config
from app.schemas.auth import GoogleUserMetadata, TokenResponse

__all__ = ("GoogleAuth",)


def _client() -> httpx.AsyncClient:
    # Following redirects would open the exchange up to SSRF
    return httpx.AsyncClient(follow_redirects=False, timeout=10)


class GoogleAuth:
    """Hands out Google authorization URLs and resolves them into tokens.

    One instance is shared by the bot, which starts logins, and the web server,
    which receives the OAuth2 callbacks.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        server_url: str,
        registry: PendingRegistry,
        timeout: float = 5 * 60,
        auth_endpoint: str = constants.GOOGLE_AUTH_ENDPOINT,
        token_endpoint: str = constants.GOOGLE_TOKEN_ENDPOINT,
        revoke_endpoint: str = constants.GOOGLE_REVOKE_ENDPOINT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not client_id or not client_secret:
            msg = "Google OAuth2 client id and secret must be set"
            raise ValueError(msg)
        if not server_url:
            msg = "The server URL must be set to build the OAuth2 redirect URI"
            raise ValueError(msg)

        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_uri = f"https://{server_url.removeprefix('https://').rstrip('/')}/oauth2"
        self.registry = registry
        self.timeout = timeout
        self.auth_endpoint = auth_endpoint
        self.token_endpoint = token_endpoint
        self.revoke_endpoint = revoke_endpoint
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Config, registry: PendingRegistry) -> GoogleAuth:
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            server_url=settings.server_url,
            registry=registry,
            timeout=settings.auth_timeout_seconds,
            auth_endpoint=settings.google_auth_endpoint,
            token_endpoint=settings.google_token_endpoint,
            revoke_endpoint=settings.google_revoke_endpoint,
        )

    def authorization_url(self, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": f"{constants.SCOPE_USER_INFO_EMAIL} {constants.SCOPE_USER_INFO_PROFILE}",
            "state": state,
        }
        return f"{self.auth_endpoint}?{urlencode(params)}"

    async def start(self, username: str, guild_image_source: str) -> tuple[str, AuthProcess]:
        """Queue a new login.

        Returns:
            The URL to show to the user and the process to await for the token.
        """
        state = secrets.token_urlsafe(32)
        handoff: Handoff[TokenResponse] = Handoff()
        deadline = self._clock() + self.timeout

        await self.registry.insert(
            state,
            PendingAuthRequest(
                handoff=handoff,
                username=username,
                guild_image_source=guild_image_source,
                deadline=deadline,
            ),
        )
        logger.debug(f"Queued OAuth2 login for {username}")

        process = AuthProcess(deadline=deadline, handoff=handoff, state=state, clock=self._clock)
        return self.authorization_url(state), process

    async def exchange(self, code: str) -> TokenResponse:
        """Exchange an authorization code for a token.

        Raises:
            FetchError: If Google could not be reached.
            NonOkResponseError: If Google rejected the code.
            MalformedResponseError: If the token response could not be parsed.
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self.redirect_uri,
        }

        async with _client() as client:
            try:
                resp = await client.post(
                    self.token_endpoint,
                    data=data,
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as e:
                msg = f"Could not fetch the Google token endpoint: {e}"
                raise FetchError(msg) from e

        if not resp.is_success:
            logger.error(f"Google token exchange failed: {resp.status_code} {resp.text}")
            raise NonOkResponseError(resp.status_code)

        try:
            return TokenResponse.model_validate_json(resp.content)
        except ValidationError as e:
            msg = "The token response could not be parsed"
            raise MalformedResponseError(msg) from e

    async def claim(self, state: str) -> PendingAuthRequest:
        """Take the pending login of `state` out of the registry.

        Raises:
            UnknownStateError: If the state was never queued, already claimed or
                evicted after its deadline.
        """
        request = await self.registry.remove(state)
        if request is None:
            raise UnknownStateError(state)
        return request

    def deliver(self, request: PendingAuthRequest, token: TokenResponse) -> bool:
        """Hand `token` to the login waiting on `request`."""
        if request.handoff.send(token):
            return True

        # The member stopped waiting (timeout or abandoned interaction)
        logger.warning(f"Could not deliver the token of {request.username}, receiver dropped")
        return False

    async def query_user_metadata(self, token: TokenResponse) -> GoogleUserMetadata:
        """Query Google for the user's email and full name.

        Raises:
            FetchError: If Google could not be reached.
            NonOkResponseError: If Google did not answer with `200 OK`.
            MalformedResponseError: If a required field is missing.
        """
        async with _client() as client:
            try:
                resp = await client.get(
                    constants.GOOGLE_PEOPLE_API_ENDPOINT,
                    params={"personFields": "names,emailAddresses"},
                    headers={"Authorization": f"Bearer {token.access_token}"},
                )
            except httpx.HTTPError as e:
                msg = f"Could not fetch the Google People API: {e}"
                raise FetchError(msg) from e

        if resp.status_code != httpx.codes.OK:
            logger.error(f"Google People API failed: {resp.status_code} {resp.text}")
            raise NonOkResponseError(resp.status_code)

        try:
            body: Any = resp.json()
        except ValueError as e:
            msg = "The People API response is not valid JSON"
            raise MalformedResponseError(msg) from e

        try:
            mail = body["emailAddresses"][0]["value"]
            first_name = body["names"][0]["givenName"]
            last_name = body["names"][0]["familyName"]
        except (KeyError, IndexError, TypeError) as e:
            msg = f"The People API response is missing {e}"
            raise MalformedResponseError(msg) from e

        if not all(isinstance(v, str) for v in (mail, first_name, last_name)):
            msg = "The People API response has non string fields"
            raise MalformedResponseError(msg)

        return GoogleUserMetadata(mail=mail, first_name=first_name, last_name=last_name)

    async def revoke(self, token: TokenResponse) -> None:
        """Revoke a token we no longer need, failures are only logged."""
        async with _client() as client:
            try:
                resp = await client.post(
                    self.revoke_endpoint, data={"token": token.access_token}
                )
            except httpx.HTTPError as e:
                logger.warning(f"Could not revoke Google token: {e}")
                return

        if not resp.is_success:
            logger.warning(f"Google token revocation failed: {resp.status_code}")
