"""
Engine configuration.

Values come from keyword overrides first, then TALENTMATCH_* environment
variables (a .env file is loaded by the CLI), then the defaults below.
"""

import math
import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional

from .location import DEFAULT_MAX_DISTANCE_KM
from .logger import get_logger
from .scoring import Weights

logger = get_logger()

ENV_PREFIX = "TALENTMATCH_"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Raised when a configuration value cannot be parsed."""
    pass


@dataclass(frozen=True)
class EngineConfig:
    weights: Weights = field(default_factory=Weights)
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM
    fuzzy_skills: bool = True
    max_workers: int = 1
    parallel_threshold: int = 500
    log_level: str = "INFO"

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {raw!r}")
    return value


def _parse_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} must be >= 1, got {value}")
    return value


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_level(name: str, raw: str) -> str:
    value = raw.strip().upper()
    if value not in LOG_LEVELS:
        raise ConfigError(f"{name} must be one of {sorted(LOG_LEVELS)}, got {raw!r}")
    return value


def _read(env: Mapping[str, str], key: str, parse: Callable[[str, str], Any]) -> Optional[Any]:
    name = ENV_PREFIX + key
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    return parse(name, raw)


def load_config(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> EngineConfig:
    """
    Build an EngineConfig from the environment.

    Args:
        env: Mapping to read from (default: os.environ)
        **overrides: EngineConfig fields that win over the environment.
            None values are ignored.

    Raises:
        ConfigError: On unparseable values or a negative distance
    """
    env = os.environ if env is None else env
    defaults = EngineConfig()

    weight_values: Dict[str, float] = {}
    for dim in ("skill", "location", "experience"):
        value = _read(env, f"WEIGHT_{dim.upper()}", _parse_float)
        if value is not None:
            weight_values[dim] = value

    from_env: Dict[str, Any] = {
        "weights": Weights.from_dict(weight_values) if weight_values else None,
        "max_distance_km": _read(env, "MAX_DISTANCE_KM", _parse_float),
        "fuzzy_skills": _read(env, "FUZZY_SKILLS", _parse_bool),
        "max_workers": _read(env, "MAX_WORKERS", _parse_int),
        "parallel_threshold": _read(env, "PARALLEL_THRESHOLD", _parse_int),
        "log_level": _read(env, "LOG_LEVEL", _parse_level),
    }
    config = defaults.with_overrides(**from_env).with_overrides(**overrides)

    if config.max_distance_km < 0:
        raise ConfigError(f"max_distance_km must be >= 0, got {config.max_distance_km}")
    if config.max_workers < 1:
        raise ConfigError(f"max_workers must be >= 1, got {config.max_workers}")
    if abs(config.weights.total() - 1.0) > 1e-6:
        logger.warning("Score weights do not sum to 1.0", total=round(config.weights.total(), 4))
    return config
