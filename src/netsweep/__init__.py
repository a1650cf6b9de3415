"""netsweep - ICMP host discovery across IPv4 address ranges."""

__version__ = "0.1.0"
__author__ = "netsweep contributors"

__all__ = [
    "__version__",
    "__author__",
]
