"""Host discovery - address ranges, ICMP probing, and sweep orchestration."""

from .addressing import AddressRange, decode, encode
from .icmp_probe import ProbeOutcome, ProbeStatus, ReplyRouter, ping_target
from .icmp_socket import ProbeRequest, ProbeSocket
from .results import DiscoverySet, sort_addresses
from .sweep import SweepResult, icmp_sweep

__all__ = [
    "AddressRange",
    "encode",
    "decode",
    "ProbeRequest",
    "ProbeSocket",
    "ProbeOutcome",
    "ProbeStatus",
    "ReplyRouter",
    "ping_target",
    "DiscoverySet",
    "sort_addresses",
    "SweepResult",
    "icmp_sweep",
]
