"""Configuration management for netsweep."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .exceptions import ValidationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class SweepConfig:
    """ICMP sweep configuration."""

    timeout: float = 5.0  # per-probe receive deadline in seconds
    max_workers: int | None = None  # None = one worker per target
    strict_match: bool = False
    payload: bytes = b"T"
    recv_buffer: int = 1500


@dataclass
class Config:
    """Main configuration for netsweep."""

    sweep: SweepConfig = field(default_factory=SweepConfig)
    verbose: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build configuration from NETSWEEP_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        if "NETSWEEP_TIMEOUT" in env:
            config.sweep.timeout = _parse_float("NETSWEEP_TIMEOUT", env["NETSWEEP_TIMEOUT"])
        if "NETSWEEP_MAX_WORKERS" in env:
            config.sweep.max_workers = _parse_workers(env["NETSWEEP_MAX_WORKERS"])
        if "NETSWEEP_STRICT_MATCH" in env:
            config.sweep.strict_match = _parse_bool(
                "NETSWEEP_STRICT_MATCH", env["NETSWEEP_STRICT_MATCH"]
            )
        if "NETSWEEP_VERBOSE" in env:
            config.verbose = _parse_bool("NETSWEEP_VERBOSE", env["NETSWEEP_VERBOSE"])

        return config


def _parse_float(name: str, value: str) -> float:
    try:
        result = float(value)
    except ValueError as e:
        raise ValidationError(f"Invalid value for {name}: {value}", str(e)) from e
    if result <= 0:
        raise ValidationError(f"{name} must be positive: {value}")
    return result


def _parse_workers(value: str) -> int | None:
    value = value.strip()
    if not value or value.lower() == "none":
        return None
    try:
        workers = int(value)
    except ValueError as e:
        raise ValidationError(f"Invalid value for NETSWEEP_MAX_WORKERS: {value}", str(e)) from e
    if workers < 1:
        raise ValidationError(f"NETSWEEP_MAX_WORKERS must be at least 1: {value}")
    return workers


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid boolean for {name}: {value}")


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
