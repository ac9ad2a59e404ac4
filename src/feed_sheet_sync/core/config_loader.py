"""Loading of the per-feed configuration document."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..exceptions import ConfigError
from ..models.column_spec import DEFAULT_COLUMNS, columns_from_list
from ..models.config import SyncConfig

logger = logging.getLogger(__name__)

ENV_REFERENCE = re.compile(r"^\$[A-Z0-9_]+$")

REQUIRED_KEYS = ("feedUrl", "sheetId", "sheetName")

# config key -> (environment fallback, default)
NUMERIC_SETTINGS = {
    "chunkRows": ("CHUNK_ROWS", 1500),
    "writeRetries": ("WRITE_RETRIES", 3),
    "retryDelayMs": ("RETRY_DELAY_MS", 2000),
}


def resolve_env(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """
    Replace a ``$UPPER_SNAKE_CASE`` string with the environment variable it names.

    Any other value is returned unchanged.

    Raises:
        ConfigError: If the referenced variable is not set
    """
    if not isinstance(value, str) or not ENV_REFERENCE.match(value):
        return value

    env = os.environ if environ is None else environ
    resolved = env.get(value[1:])
    if resolved is None:
        raise ConfigError(f"Env var {value} is not set")
    return resolved


def deep_resolve(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Apply :func:`resolve_env` to every scalar of a nested dict/list structure."""
    if isinstance(value, list):
        return [deep_resolve(item, environ) for item in value]
    if isinstance(value, dict):
        return {key: deep_resolve(item, environ) for key, item in value.items()}
    return resolve_env(value, environ)


def _positive_int(key: str, raw: Dict[str, Any], env: Mapping[str, str]) -> int:
    env_name, default = NUMERIC_SETTINGS[key]
    value = raw.get(key) or env.get(env_name) or default
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        raise ConfigError(f"Config value {key}={value!r} is not a number")
    if number <= 0:
        raise ConfigError(f"Config value {key} must be positive, got {number}")
    return number


def config_from_dict(raw: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Validate a raw configuration mapping and build a SyncConfig.

    Args:
        raw: Parsed configuration document
        environ: Environment used for ``$VAR`` references and fallbacks

    Returns:
        Immutable SyncConfig

    Raises:
        ConfigError: If required keys are missing or values are invalid
    """
    if not isinstance(raw, dict):
        raise ConfigError("Configuration document must be a mapping")

    env = os.environ if environ is None else environ
    cfg = deep_resolve(raw, env)

    for key in REQUIRED_KEYS:
        if not cfg.get(key):
            raise ConfigError(f"Config missing {key}")

    columns = columns_from_list(cfg["columns"]) if cfg.get("columns") else DEFAULT_COLUMNS

    try:
        fetch_timeout = float(cfg.get("fetchTimeout") or 60)
    except (TypeError, ValueError):
        raise ConfigError(f"Config value fetchTimeout={cfg.get('fetchTimeout')!r} is not a number")

    return SyncConfig(
        feed_url=str(cfg["feedUrl"]),
        sheet_id=str(cfg["sheetId"]),
        sheet_name=str(cfg["sheetName"]),
        meta_sheet_name=str(cfg.get("metaSheetName") or ""),
        chunk_rows=_positive_int("chunkRows", cfg, env),
        write_retries=_positive_int("writeRetries", cfg, env),
        retry_delay_ms=_positive_int("retryDelayMs", cfg, env),
        columns=columns,
        name=str(cfg["name"]) if cfg.get("name") else None,
        fetch_timeout=fetch_timeout,
        timezone=str(cfg.get("timezone") or env.get("TIMEZONE") or "UTC"),
    )


def load_config(config_path: Union[str, Path], environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """Load configuration from a JSON or YAML file."""
    if not config_path:
        raise ConfigError("Pass config path: feed-sheet-sync config/feed.json")

    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse configuration file {path}: {e}") from e

    logger.info(f"Loaded configuration from {path}")
    return config_from_dict(raw, environ)
