from functools import lru_cache
from typing import List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    Settings are frozen: build them once at startup and pass them around.
    """

    # Database
    database_url: str = "postgresql://localhost/shortlinks"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30  # seconds to wait for a pooled connection
    auto_create_schema: bool = True

    # Server
    bind_address: str = "0.0.0.0:3000"
    cors_allow_origins: List[str] = ["*"]

    # Redirects
    default_redirect_url: str = "https://example.com"
    permanent_redirects: bool = False  # 308 instead of 302
    links_csv_path: str = "links.csv"

    # Click accounting
    click_drain_timeout: float = 5.0  # seconds to wait for pending increments on shutdown
    click_max_concurrency: int = 2  # keep below db_pool_size

    # Logging
    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def host(self) -> str:
        return self._split_bind_address()[0]

    @property
    def port(self) -> int:
        return self._split_bind_address()[1]

    def _split_bind_address(self) -> Tuple[str, int]:
        host, sep, port = self.bind_address.rpartition(":")
        if not sep or not host:
            raise ValueError(f"BIND_ADDRESS must look like host:port, got {self.bind_address!r}")
        try:
            return host.strip("[]"), int(port)
        except ValueError:
            raise ValueError(f"Invalid port in BIND_ADDRESS: {self.bind_address!r}") from None

    @property
    def async_database_url(self) -> str:
        """
        DATABASE_URL with an async driver selected.

        Plain postgresql:// and sqlite:// URLs get asyncpg and aiosqlite.
        URLs that already name a driver (postgresql+asyncpg://...) are kept as-is.
        """
        url = self.database_url
        for prefix, replacement in (
            ("postgresql://", "postgresql+asyncpg://"),
            ("postgres://", "postgresql+asyncpg://"),
            ("sqlite://", "sqlite+aiosqlite://"),
        ):
            if url.startswith(prefix):
                return replacement + url[len(prefix):]
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")

    @property
    def redirect_status_code(self) -> int:
        return 308 if self.permanent_redirects else 302


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    return Settings()
