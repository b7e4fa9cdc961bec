"""
Application Settings

All runtime configuration is read from environment variables
(or a .env file) through pydantic-settings.

Create a .env file with:
- SUPABASE_URL=https://xxx.supabase.co
- SUPABASE_SERVICE_KEY=your-service-role-key
- VNNOX_AK=your-access-key
- VNNOX_AS=your-access-secret
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Supabase (database + auth)
    supabase_url: str = ""
    supabase_service_key: str = ""

    # VNNOX device API
    vnnox_ak: str = ""
    vnnox_as: str = ""
    vnnox_api_url: str = "https://api.vnnox.com"

    # Monitoring loop
    poll_interval_s: float = 30.0
    request_timeout_s: float = 30.0
    schedule_timezone: str = "UTC"

    # API
    environment: str = "development"
    allowed_origins: str = ""  # comma-separated

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def supabase_key(self) -> str:
        """Get the Supabase key (from SUPABASE_SERVICE_KEY env var)."""
        return self.supabase_service_key

    @property
    def origins(self) -> list[str]:
        """CORS origins, with local dev servers added outside production."""
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        if self.environment == "development" or not origins:
            origins.extend([
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            ])
        return origins

    def require_supabase(self) -> None:
        if not self.supabase_url or not self.supabase_key:
            raise ConfigError(
                "Supabase credentials not configured. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_KEY in .env file."
            )

    def require_vnnox(self) -> None:
        if not self.vnnox_ak or not self.vnnox_as:
            raise ConfigError(
                "VNNOX credentials not configured. "
                "Set VNNOX_AK and VNNOX_AS in .env file."
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
