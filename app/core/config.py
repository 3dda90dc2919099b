from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

from app.core import constants


class Config(BaseSettings):
    db_url: str
    env: Literal["prod", "dev"] = "prod"

    # Web server
    host: str = "127.0.0.1"
    port: int = 3011
    server_url: str
    """Public hostname of the OAuth2 callback server, e.g. `smp-link.example.com`"""

    # Discord
    discord_bot_token: str
    discord_dev_guild_id: int | None = None
    discord_invite_code: str = ""

    # Google OAuth2
    google_client_id: str
    google_client_secret: str
    google_auth_endpoint: str = constants.GOOGLE_AUTH_ENDPOINT
    google_token_endpoint: str = constants.GOOGLE_TOKEN_ENDPOINT
    google_revoke_endpoint: str = constants.GOOGLE_REVOKE_ENDPOINT

    # Timeouts
    auth_timeout_seconds: float = 5 * 60  # 5 minutes
    auth_sweep_interval_seconds: float = 60
    component_timeout_seconds: float = 60

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


load_dotenv()
settings = Config()  # pyright: ignore[reportCallIssue]
