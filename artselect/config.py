"""
Runtime settings for artselect.

Settings come from the process environment (optionally seeded from a
.env file by ``load_env``) and may be overridden by CLI flags.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_API_URL = "https://api.artic.edu/api/v1/artworks"
DEFAULT_PAGE_SIZE = 10
DEFAULT_TIMEOUT = 15.0
DEFAULT_FIELDS = (
    "id",
    "title",
    "place_of_origin",
    "artist_display",
    "inscriptions",
    "date_start",
    "date_end",
)
DEFAULT_DB_PATH = "data/selections.db"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = DEFAULT_TIMEOUT
    fields: Tuple[str, ...] = field(default=DEFAULT_FIELDS)
    log_level: str = "INFO"
    db_path: Path = Path(DEFAULT_DB_PATH)

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "db_path" in changes:
            changes["db_path"] = Path(changes["db_path"])
        if "log_level" in changes:
            changes["log_level"] = _parse_log_level("log_level", changes["log_level"])
        if "page_size" in changes:
            changes["page_size"] = _parse_positive_int("page_size", str(changes["page_size"]))
        if "timeout" in changes:
            changes["timeout"] = _parse_timeout("timeout", str(changes["timeout"]))
        return replace(self, **changes)


def _parse_positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _parse_timeout(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _parse_log_level(name: str, raw: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def _parse_fields(raw: str) -> Tuple[str, ...]:
    fields = [f.strip() for f in raw.split(",") if f.strip()]
    # The identity field is always needed for selection bookkeeping
    if "id" not in fields:
        fields.insert(0, "id")
    return tuple(fields)


def load_settings(environ: Optional[dict] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Settings with defaults for anything unset

    Raises:
        ValueError: If a numeric or enumerated variable is malformed
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    if env.get("ARTSELECT_API_URL"):
        settings = replace(settings, api_url=env["ARTSELECT_API_URL"].strip())
    if env.get("ARTSELECT_PAGE_SIZE"):
        settings = replace(
            settings,
            page_size=_parse_positive_int("ARTSELECT_PAGE_SIZE", env["ARTSELECT_PAGE_SIZE"]),
        )
    if env.get("ARTSELECT_TIMEOUT"):
        settings = replace(
            settings,
            timeout=_parse_timeout("ARTSELECT_TIMEOUT", env["ARTSELECT_TIMEOUT"]),
        )
    if env.get("ARTSELECT_FIELDS"):
        settings = replace(settings, fields=_parse_fields(env["ARTSELECT_FIELDS"]))
    if env.get("ARTSELECT_LOG_LEVEL"):
        settings = replace(
            settings,
            log_level=_parse_log_level("ARTSELECT_LOG_LEVEL", env["ARTSELECT_LOG_LEVEL"]),
        )
    if env.get("ARTSELECT_DB"):
        settings = replace(settings, db_path=Path(env["ARTSELECT_DB"]))

    return settings
