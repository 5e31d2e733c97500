"""
Prova Monitorada Backend - Application Configuration
=====================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and exposes a process-wide `settings` object
       that create_app() uses unless it is handed an explicit Settings.
When:  Resolved once at import; components receive it through their
       constructors and never read os.environ themselves.

Environment variables:
    PORT                    Listen port (default 3000)
    HOST                    Bind address (default 0.0.0.0)
    NODE_ENV                Environment label; "production" hides error detail
    LOG_LEVEL               DEBUG, INFO, WARNING, ERROR or CRITICAL
    RATE_LIMIT_WINDOW       Rate-limit window in seconds (default 900)
    RATE_LIMIT_MAX          Requests per client per window (default 100)
    JSON_BODY_LIMIT         Max JSON body in bytes (default 10MB)
    URLENCODED_BODY_LIMIT   Max urlencoded body in bytes (default 100KB)
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Attributes are grouped by
    concern.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # What: Deployment environment label, reported by /health
    # Only the exact value "production" switches error responses to the
    # generic message.
    node_env: str = Field(default="development")

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("node_env")
    @classmethod
    def validate_node_env(cls, v: str) -> str:
        # An empty NODE_ENV behaves like an unset one
        return v or "development"

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Origins admitted by exact comparison
    cors_allowed_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5500",
            "http://127.0.0.1:5500",
            "https://prova-monitorada-frontend.vercel.app",
        ]
    )

    # What: Origins admitted when they end with one of these suffixes
    # (preview deployments on Vercel and Railway)
    cors_allowed_suffixes: List[str] = Field(
        default=[".vercel.app", ".railway.app"]
    )

    # ── Body Parsing ──────────────────────────────────────────────────────
    json_body_limit: int = Field(default=10 * 1024 * 1024, ge=1)
    urlencoded_body_limit: int = Field(default=100 * 1024, ge=1)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # What: Per-IP fixed window (15 minutes, 100 requests)
    rate_limit_window: int = Field(default=15 * 60, ge=1)  # seconds
    rate_limit_max: int = Field(default=100, ge=1)
    rate_limit_message: str = Field(
        default="Muitas requisições, tente novamente mais tarde."
    )

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # NODE_ENV and node_env both work
    }


# Process-wide instance, resolved once at startup
settings = Settings()
