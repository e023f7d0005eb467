"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with LIFEBOARD_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: The Supabase keys split into two roles. The anon key is public and
rides along with every per-user request; the service key bypasses row-level
security and is only handed to the admin client (profile upserts).
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via LIFEBOARD_* env vars."""

    # Supabase
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    supabase_service_key: str = ""

    # Redis (rate limit counters only)
    redis_url: str = "redis://localhost:6379/0"

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    api_version: str = "v1"
    log_level: str = "info"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting (fixed window per client IP)
    rate_limit_window_seconds: int = 900
    rate_limit_max_requests: int = 100
    auth_rate_limit_max_requests: int = 5  # OTP endpoints

    model_config = {"env_prefix": "LIFEBOARD_"}

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @model_validator(mode="after")
    def validate_supabase_settings(self):
        """Refuse to boot a deployed instance without provider credentials."""
        if self.environment not in ("development", "test"):
            missing = [
                name
                for name in ("supabase_url", "supabase_anon_key", "supabase_service_key")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    "Missing Supabase configuration outside development: "
                    + ", ".join(f"LIFEBOARD_{name.upper()}" for name in missing)
                )
        return self


# Singleton — import this everywhere
settings = Settings()
