#!/usr/bin/env python3
"""Check that this machine can run a netsweep sweep."""

from __future__ import annotations

import argparse
import platform
import sys

Check = tuple[str, bool, str]


def _check_python_version() -> Check:
    ok = sys.version_info[:2] >= (3, 11)
    return "python_version", ok, f"{platform.python_version()} (requires >= 3.11)"


def _check_imports() -> list[Check]:
    results = []
    for module in ["netsweep", "scapy", "psutil", "click", "rich"]:
        try:
            __import__(module)
            results.append((f"import:{module}", True, "ok"))
        except ImportError as exc:
            results.append((f"import:{module}", False, str(exc)))
    return results


def _check_env_config() -> Check:
    from netsweep.core.config import Config
    from netsweep.core.exceptions import NetSweepError

    try:
        sweep = Config.from_env().sweep
    except NetSweepError as exc:
        return "env_config", False, str(exc)
    return "env_config", True, f"timeout={sweep.timeout}s strict_match={sweep.strict_match}"


def _check_interfaces() -> Check:
    from netsweep.core.utils import get_interfaces

    usable = [name for name, info in get_interfaces().items() if info.get("ipv4") and info.get("is_up")]
    if not usable:
        return "ipv4_interfaces", False, "no interface is up with an IPv4 address"
    return "ipv4_interfaces", True, ", ".join(usable)


def _check_raw_socket() -> Check:
    from netsweep.core.exceptions import TransportError
    from netsweep.discovery.icmp_socket import ProbeSocket

    try:
        ProbeSocket.open(timeout=1.0).close()
    except TransportError as exc:
        return "raw_icmp_socket", False, str(exc)
    return "raw_icmp_socket", True, "ok"


def run_checks(include_socket: bool = True) -> list[Check]:
    results = [_check_python_version()]
    results.extend(_check_imports())
    if all(ok for name, ok, _ in results if name == "import:netsweep"):
        results.append(_check_env_config())
        results.append(_check_interfaces())
        if include_socket:
            results.append(_check_raw_socket())
    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Environment checks for netsweep.")
    parser.add_argument("--no-socket", action="store_true", help="Skip raw socket check")
    args = parser.parse_args(argv)

    results = run_checks(include_socket=not args.no_socket)
    for name, ok, detail in results:
        print(f"{'OK' if ok else 'FAIL':4} {name:16} {detail}")
    return 0 if all(ok for _, ok, _ in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
