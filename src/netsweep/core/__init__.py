"""Core module - configuration, exceptions, and utilities."""

from .config import Config, SweepConfig, get_config, set_config
from .exceptions import (
    InvalidAddressError,
    NetSweepError,
    PermissionError,
    TransportError,
    ValidationError,
)
from .utils import (
    get_interfaces,
    interface_range,
    parse_ip_range,
    validate_ip,
)

__all__ = [
    "Config",
    "SweepConfig",
    "get_config",
    "set_config",
    "NetSweepError",
    "ValidationError",
    "InvalidAddressError",
    "TransportError",
    "PermissionError",
    "validate_ip",
    "parse_ip_range",
    "get_interfaces",
    "interface_range",
]
