"""Thread-safe accumulation and numeric ordering of discovered hosts."""

import logging
import threading
from collections.abc import Iterable

from .addressing import encode

logger = logging.getLogger(__name__)


class DiscoverySet:
    """Deduplicating set of responding addresses.

    Insertion order is kept for logging only; callers sort the snapshot.
    """

    def __init__(self) -> None:
        self._seen: dict[str, None] = {}
        self._lock = threading.Lock()

    def insert(self, address: str) -> bool:
        """Add an address; return False if it was already present."""
        with self._lock:
            if address in self._seen:
                return False
            self._seen[address] = None
        logger.info("Found IP: %s", address)
        return True

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._seen)

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._seen


def sort_addresses(addresses: Iterable[str]) -> list[str]:
    """Sort addresses by 32-bit value, so 2.0.0.1 precedes 10.0.0.1."""
    return sorted(addresses, key=encode)
