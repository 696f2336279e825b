"""Server configuration, read from the environment (and `.env`) via pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "::1"})


class Settings(BaseSettings):
    """Bookmark API settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database holding the key-value table
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Identity provider. JWT_SECRET selects HS256 shared-secret validation,
    # otherwise tokens are checked against the Auth0 JWKS.
    auth0_domain: str = Field(default="", validation_alias="AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="AUTH0_AUDIENCE")
    jwt_secret: str = Field(default="", validation_alias="JWT_SECRET")

    # Serves every request as a fixed local user; see validate_dev_mode_security
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # Comma-separated; "*" allows any origin
    cors_origins_str: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # Mount point for all routes, e.g. "/make-server"
    route_prefix: str = Field(default="", validation_alias="ROUTE_PREFIX")

    max_title_length: int = Field(default=500, validation_alias="MAX_TITLE_LENGTH")
    max_url_length: int = Field(default=2048, validation_alias="MAX_URL_LENGTH")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """Refuse DEV_MODE unless the database is SQLite or on this machine."""
        if self.dev_mode and not _is_local_database(self.database_url):
            raise ValueError(
                "DEV_MODE cannot be enabled with a non-local database: it serves "
                "every request as a fixed development user.",
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    @property
    def auth0_issuer(self) -> str:
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        return f"{self.auth0_issuer}.well-known/jwks.json"


def _is_local_database(url: str) -> bool:
    if url.startswith("sqlite"):
        return True
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return False
    return hostname.lower() in _LOCAL_HOSTS


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
