"""Utility functions for netsweep."""

from ipaddress import IPv4Address, IPv4Network, ip_address

import psutil

from .exceptions import InvalidAddressError, ValidationError


def validate_ip(ip_str: str) -> IPv4Address:
    """Validate and parse an IPv4 address string."""
    if not isinstance(ip_str, str):
        raise InvalidAddressError(ip_str, "expected dotted-decimal text")
    try:
        ip = ip_address(ip_str.strip())
    except ValueError as e:
        raise InvalidAddressError(ip_str, str(e)) from e
    if ip.version == 6:
        raise InvalidAddressError(ip_str, "IPv6 addresses are not supported")
    return ip


def parse_ip_range(range_str: str) -> tuple[str, str]:
    """Parse a range string such as '192.168.1.1-192.168.1.254'.

    A reversed range is returned unchanged; it simply enumerates no targets.
    """
    parts = range_str.split("-")
    if len(parts) != 2:
        raise ValidationError(f"Invalid IP range format: {range_str}", "expected START-END")

    start, end = (str(validate_ip(part)) for part in parts)
    return start, end


def get_interfaces() -> dict[str, dict[str, str | int | bool | None]]:
    """Get available network interfaces with their addresses."""
    interfaces: dict[str, dict[str, str | int | bool | None]] = {}
    stats = psutil.net_if_stats()

    for name, addrs in psutil.net_if_addrs().items():
        interface_info: dict[str, str | int | bool | None] = {
            "ipv4": None,
            "netmask": None,
            "mac": None,
        }

        for addr in addrs:
            if addr.family.name == "AF_INET" and interface_info["ipv4"] is None:
                interface_info["ipv4"] = addr.address
                interface_info["netmask"] = addr.netmask
            elif addr.family.name in ("AF_PACKET", "AF_LINK"):
                interface_info["mac"] = addr.address

        stat = stats.get(name)
        interface_info["is_up"] = stat.isup if stat else None

        interfaces[name] = interface_info

    return interfaces


def interface_range(name: str) -> tuple[str, str]:
    """Return the first and last address of an interface's IPv4 subnet."""
    interfaces = get_interfaces()
    if name not in interfaces:
        raise ValidationError(f"Unknown interface: {name}")

    info = interfaces[name]
    if not info.get("ipv4") or not info.get("netmask"):
        raise ValidationError(f"No valid IPv4 address found for interface {name}")

    try:
        net = IPv4Network(f"{info['ipv4']}/{info['netmask']}", strict=False)
    except ValueError as e:
        raise ValidationError(f"Invalid address on interface {name}", str(e)) from e

    return str(net.network_address), str(net.broadcast_address)
