"""Application configuration using Pydantic Settings."""

import json
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from gbr_reserve.tax.year_config import DEFAULT_TAX_YEAR, TAX_YEAR_CONFIGS

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Error Tracking
    sentry_dsn: str | None = None
    """Sentry DSN for error tracking. Optional."""

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode (verbose calculation tracing)."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Calculation defaults
    tax_year: int = DEFAULT_TAX_YEAR
    """Tax year used when a request does not name one."""

    default_safety_margin: Decimal = Decimal("0.05")
    """Safety margin applied when a partnership profile omits it."""

    # NoDecode prevents pydantic-settings from forcing JSON parsing at the
    # env-source layer, so we can accept either JSON arrays or CSV strings.
    cors_origins: Annotated[list[str], NoDecode] = DEFAULT_CORS_ORIGINS
    """Origins allowed to call the API from a browser."""

    @field_validator("tax_year")
    @classmethod
    def validate_tax_year(cls, value: int) -> int:
        """Reject tax years without a constant table."""
        if value not in TAX_YEAR_CONFIGS:
            raise ValueError(
                f"TAX_YEAR must be one of {sorted(TAX_YEAR_CONFIGS)}, got {value}"
            )
        return value

    @field_validator("default_safety_margin")
    @classmethod
    def validate_safety_margin(cls, value: Decimal) -> Decimal:
        """Safety margin is a fraction, never negative."""
        if value < 0:
            raise ValueError(
                f"DEFAULT_SAFETY_MARGIN must be >= 0, got {value}"
            )
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> list[str]:
        """Parse allowed origins from JSON array, CSV, or list."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_CORS_ORIGINS.copy()

            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None

            if isinstance(decoded, list):
                return _normalize_origins(decoded)
            if isinstance(decoded, str):
                text = decoded
            elif decoded is not None:
                raise ValueError(
                    "CORS_ORIGINS must be a JSON array or comma-separated string."
                )

            # Fallback: comma-separated values
            return _normalize_origins(item.strip() for item in text.split(","))

        if isinstance(value, (list, tuple, set)):
            return _normalize_origins(value)

        raise ValueError("CORS_ORIGINS must be a string, list, tuple, or set.")


def _normalize_origins(values: Iterable[object]) -> list[str]:
    """Normalize and dedupe origins while preserving declaration order."""
    normalized: list[str] = []
    seen: set[str] = set()
    for raw_item in values:
        item = str(raw_item).strip().strip("'").strip('"').rstrip("/")
        if not item or item in seen:
            continue
        normalized.append(item)
        seen.add(item)

    if not normalized:
        return DEFAULT_CORS_ORIGINS.copy()
    return normalized


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        f"TAX_YEAR must be one of {sorted(TAX_YEAR_CONFIGS)}.",
        "Allowed values for CORS_ORIGINS are:",
        '  1) ["http://localhost:3000","http://127.0.0.1:3000"]',
        "  2) http://localhost:3000,http://127.0.0.1:3000",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
