"""Centralised settings for the OG parser.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).  A JSON config file
(the ``config/config.json`` layout used by older deployments) can be layered
on top with :func:`load_settings`.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

from ogparser.exceptions import BootstrapError

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

DEFAULT_USER_AGENT = "@bateszi OG parser"

# tumblr serves a GDPR consent wall to anything that isn't a known crawler.
DEFAULT_USER_AGENT_OVERRIDES = {"tumblr.com": "Baiduspider"}


def parse_overrides(raw: str) -> dict[str, str]:
    """Parse ``"host=value,host=value"`` into a host-suffix lookup table.

    Blank entries are ignored; hosts are lower-cased.

    Raises:
        ValueError: If an entry has no ``=`` separator.
    """
    table: dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        host, sep, value = entry.partition("=")
        if not sep or not host.strip():
            raise ValueError(f"Invalid user-agent override {entry!r}")
        table[host.strip().lower()] = value.strip()
    return table


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------

def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def _as_path(value: Any) -> Path:
    return Path(_as_str(value))


def _as_number(cast: Callable[[Any], Any], *, positive: bool = False) -> Callable[[Any], Any]:
    def convert(value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        number = cast(value)
        if positive and not number > 0:
            raise ValueError(f"expected a positive number, got {value!r}")
        return number

    return convert


def _as_overrides(value: Any) -> dict[str, str]:
    if isinstance(value, str):
        return parse_overrides(value)
    if not isinstance(value, dict):
        raise TypeError(f"expected an object, got {type(value).__name__}")
    return {str(k).lower(): str(v) for k, v in value.items()}


# field name -> (environment variable, built-in default, converter)
_FIELDS: dict[str, tuple[str, Any, Callable[[Any], Any]]] = {
    "db_path": ("OGPARSER_DB_PATH", Path.home() / ".ogparser" / "ogparser.db", _as_path),
    "solr_url": ("SOLR_URL", "", _as_str),
    "index_timeout": ("INDEX_TIMEOUT", 10.0, _as_number(float, positive=True)),
    "fetch_timeout": ("FETCH_TIMEOUT", 10.0, _as_number(float, positive=True)),
    "user_agent": ("USER_AGENT", DEFAULT_USER_AGENT, _as_str),
    "user_agent_overrides": ("USER_AGENT_OVERRIDES", DEFAULT_USER_AGENT_OVERRIDES, _as_overrides),
    "max_concurrent_fetches": ("MAX_CONCURRENT_FETCHES", 0, _as_number(int)),
    "scrape_window_minutes": ("SCRAPE_WINDOW_MINUTES", 60, _as_number(int, positive=True)),
    "schedule_interval": ("SCHEDULE_INTERVAL", 420.0, _as_number(float, positive=True)),
    "log_level": ("LOG_LEVEL", "INFO", _as_str),
}


def _default(name: str) -> Any:
    value = _FIELDS[name][1]
    return dict(value) if isinstance(value, dict) else value


def _from_env(name: str) -> Any:
    env_var, _, convert = _FIELDS[name]
    raw = os.environ.get(env_var)
    if raw is None:
        return _default(name)
    try:
        return convert(raw)
    except (TypeError, ValueError) as exc:
        raise BootstrapError(
            f"invalid environment configuration: {env_var}={raw!r}: {exc}"
        ) from exc


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Primary store
    # ------------------------------------------------------------------
    db_path: Path = field(default_factory=lambda: _from_env("db_path"))

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Search index
    # ------------------------------------------------------------------
    solr_url: str = field(default_factory=lambda: _from_env("solr_url"))
    index_timeout: float = field(default_factory=lambda: _from_env("index_timeout"))

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    fetch_timeout: float = field(default_factory=lambda: _from_env("fetch_timeout"))
    user_agent: str = field(default_factory=lambda: _from_env("user_agent"))
    user_agent_overrides: dict[str, str] = field(
        default_factory=lambda: _from_env("user_agent_overrides")
    )
    # 0 means one worker per item in the batch.
    max_concurrent_fetches: int = field(
        default_factory=lambda: _from_env("max_concurrent_fetches")
    )

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    scrape_window_minutes: int = field(
        default_factory=lambda: _from_env("scrape_window_minutes")
    )
    schedule_interval: float = field(default_factory=lambda: _from_env("schedule_interval"))

    log_level: str = field(default_factory=lambda: _from_env("log_level"))

    @property
    def worker_limit(self) -> Optional[int]:
        """Concurrency cap for the fetch pool, or ``None`` for one per item."""
        return self.max_concurrent_fetches if self.max_concurrent_fetches > 0 else None


def _set_from_file(target: Settings, name: str, key: str, value: Any) -> None:
    try:
        setattr(target, name, _FIELDS[name][2](value))
    except (TypeError, ValueError) as exc:
        raise BootstrapError(f"invalid value for config key {key!r}: {exc}") from exc


def _apply_file_values(target: Settings, data: dict[str, Any]) -> None:
    """Copy recognised keys from a parsed JSON config onto *target*.

    Values are converted to the field's type; anything that does not
    convert is a :class:`BootstrapError`.
    """
    db = data.get("db") or {}
    if not isinstance(db, dict):
        raise BootstrapError("config key 'db' must be an object")
    if "path" in db:
        _set_from_file(target, "db_path", "db.path", db["path"])

    if "solr" in data:
        _set_from_file(target, "solr_url", "solr", data["solr"])

    known = {f.name for f in fields(Settings)}
    for key, value in data.items():
        if key in ("db", "solr"):
            continue
        if key not in known:
            raise BootstrapError(f"unknown config key {key!r}")
        _set_from_file(target, key, key, value)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Build a :class:`Settings`, optionally layering a JSON config file on top.

    The file mirrors the historical ``config/config.json`` shape::

        {"db": {"path": "/var/lib/ogparser.db"}, "solr": "http://solr:8983/solr/posts"}

    Any other top-level key must name a :class:`Settings` field.

    Raises:
        BootstrapError: If the file cannot be read or parsed, a value has
            the wrong type, or the environment holds an invalid value.
    """
    result = Settings()

    if config_path is None:
        return result

    try:
        raw = Path(config_path).read_text(encoding="utf-8")
    except OSError as exc:
        raise BootstrapError(f"reading config file {config_path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BootstrapError(f"parsing json from config file {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise BootstrapError(f"config file {config_path} must hold a JSON object")

    _apply_file_values(result, data)
    return result


def _default_settings() -> Settings:
    """Build the import-time singleton.

    A bad environment value falls back to the built-in defaults here, so
    importing the package never fails; :func:`load_settings` raises it as a
    :class:`BootstrapError` when a run starts.
    """
    try:
        return Settings()
    except BootstrapError:
        return Settings(**{name: _default(name) for name in _FIELDS})


# Module-level singleton, import this everywhere:
#   from ogparser.config import settings
settings = _default_settings()
