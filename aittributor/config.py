import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .breadcrumbs import DEFAULT_RECENCY_SECS
from .timebox import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

_FALSY = ("0", "false", "no", "off")
_TRUTHY = ("1", "true", "yes", "on")


def _parse_timeout(value: object, source: str) -> float:
    """Return a positive number of seconds, or the default with a warning."""
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        timeout = 0.0
    if isinstance(value, bool) or not 0 < timeout < float("inf"):
        logger.warning(f"Ignoring invalid {source}: {value!r}")
        return DEFAULT_TIMEOUT
    return timeout


def _parse_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value.strip().lower() in _TRUTHY:
            return True
        if value.strip().lower() in _FALSY:
            return False
    logger.warning(f"Ignoring invalid boolean in config: {value!r}")
    return default


@dataclass
class Config:
    """Runtime settings for the hook."""

    timeout: float = DEFAULT_TIMEOUT
    breadcrumbs: bool = True
    recency_hours: float = DEFAULT_RECENCY_SECS / 3600
    debug: bool = False

    @property
    def recency_secs(self) -> float:
        return self.recency_hours * 3600

    @classmethod
    def from_dict(cls, doc: dict) -> "Config":
        known = {f.name for f in fields(cls)}
        unknown = set(doc) - known
        if unknown:
            logger.warning(f"Unknown keys in config: {sorted(unknown)}")
        return cls(
            timeout=_parse_timeout(doc.get("timeout", DEFAULT_TIMEOUT), "timeout"),
            breadcrumbs=_parse_bool(doc.get("breadcrumbs", True), True),
            recency_hours=float(doc.get("recency_hours", DEFAULT_RECENCY_SECS / 3600)),
            debug=_parse_bool(doc.get("debug", False), False),
        )


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "aittributor" / "config.toml"


def _load_config_doc(path: Path) -> dict:
    # a hook must not write to $HOME, so a missing file is not created
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            return tomlkit.load(f).unwrap()
    except (OSError, TOMLKitError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return {}


def _apply_env(config: Config, environ: dict[str, str]) -> Config:
    if (timeout := environ.get("AITTRIBUTOR_TIMEOUT")) is not None:
        config.timeout = _parse_timeout(timeout, "AITTRIBUTOR_TIMEOUT")
    if (breadcrumbs := environ.get("AITTRIBUTOR_BREADCRUMBS")) is not None:
        config.breadcrumbs = breadcrumbs.strip().lower() not in _FALSY
    if (debug := environ.get("AITTRIBUTOR_DEBUG")) is not None:
        config.debug = debug.strip().lower() not in _FALSY + ("",)
    return config


def load_config(
    path: Path | None = None, environ: dict[str, str] | None = None
) -> Config:
    """Load the user config file, then apply environment overrides."""
    if path is None:
        try:
            path = default_config_path()
        except RuntimeError:
            path = None
    doc = _load_config_doc(path) if path else {}
    try:
        config = Config.from_dict(doc)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid config at {path}: {e}")
        config = Config()
    return _apply_env(config, dict(os.environ) if environ is None else environ)
