from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

_SUPPORTED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _bool_from_env(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "y", "t", "on"}:
        return True
    if value in {"0", "false", "no", "n", "f", "off"}:
        return False
    raise ValueError(f"Invalid boolean value '{value}'")


def _parse_optional_int(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value '{raw}'") from exc


def _normalise_log_level(value: str | None) -> str:
    if value is None or value.strip() == "":
        return "WARNING"
    value = value.strip().upper()
    if value not in _SUPPORTED_LOG_LEVELS:
        raise ValueError(
            f"Unsupported log level '{value}'. Expected one of {sorted(_SUPPORTED_LOG_LEVELS)}."
        )
    return value


@dataclass(frozen=True)
class RuntimeConfig:
    log_level: str
    profile: bool
    seed: int | None


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("vptree")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)


@lru_cache(maxsize=None)
def runtime_config() -> RuntimeConfig:
    config = RuntimeConfig(
        log_level=_normalise_log_level(os.getenv("VPTREE_LOG_LEVEL")),
        profile=_bool_from_env(os.getenv("VPTREE_PROFILE"), default=False),
        seed=_parse_optional_int(os.getenv("VPTREE_SEED")),
    )
    _configure_logging(config.log_level)
    return config


def reset_runtime_config_cache() -> None:
    runtime_config.cache_clear()


def load_benchmark_config(path: str | Path) -> Dict[str, Any]:
    """Read a YAML mapping of benchmark options (keys match CLI flag names)."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Benchmark config {path} must be a mapping, got {type(data).__name__}")
    return {str(key).replace("-", "_"): value for key, value in data.items()}
