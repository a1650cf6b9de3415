"""Concurrent ICMP sweep of an IPv4 address range."""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from functools import partial

from ..core.config import get_config
from ..core.exceptions import ValidationError
from .addressing import AddressRange, decode, encode
from .icmp_probe import ProbeOutcome, ProbeStatus, ReplyRouter, ping_target
from .icmp_socket import ProbeRequest, ProbeSocket
from .results import DiscoverySet, sort_addresses

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Result of a complete sweep."""

    start: str
    end: str
    hosts: list[str]
    probed: int
    errors: int
    start_time: datetime
    end_time: datetime

    @property
    def count(self) -> int:
        return len(self.hosts)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict:
        return {
            "range": {"start": self.start, "end": self.end},
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_seconds": self.duration,
            "summary": {
                "probed": self.probed,
                "alive": self.count,
                "errors": self.errors,
            },
            "hosts": self.hosts,
        }


def _as_address(value: str | int) -> int:
    return value if isinstance(value, int) else encode(value)


def icmp_sweep(
    start: str | int,
    end: str | int,
    timeout: float | None = None,
    max_workers: int | None = None,
    strict_match: bool | None = None,
    socket_factory: Callable[[float], ProbeSocket] | None = None,
    on_discovered: Callable[[str], None] | None = None,
) -> SweepResult:
    """
    Probe every address in [start, end] and collect the ones that reply.

    Args:
        start: First address (dotted-decimal or integer)
        end: Last address, inclusive; a range with end < start is empty
        timeout: Reply deadline per probe in seconds
        max_workers: Concurrency cap (default: one worker per target)
        strict_match: Route replies by identifier/sequence instead of
            crediting whichever echo reply a probe reads next
        socket_factory: Opens the shared probe socket given the timeout
        on_discovered: Called once for each newly discovered address

    Returns:
        SweepResult with the discovered hosts in numeric order
    """
    config = get_config()
    if timeout is None:
        timeout = config.sweep.timeout
    if max_workers is None:
        max_workers = config.sweep.max_workers
    if strict_match is None:
        strict_match = config.sweep.strict_match
    if socket_factory is None:
        socket_factory = partial(ProbeSocket.open, recv_buffer=config.sweep.recv_buffer)

    if timeout <= 0:
        raise ValidationError(f"Timeout must be positive: {timeout}")
    if max_workers is not None and max_workers < 1:
        raise ValidationError(f"max_workers must be at least 1: {max_workers}")

    targets = AddressRange(_as_address(start), _as_address(end))
    discovered = DiscoverySet()
    errors = 0
    start_time = datetime.now()

    if not targets:
        logger.info("Range %s is empty, nothing to probe", targets)
        return SweepResult(
            start=decode(targets.start),
            end=decode(targets.end),
            hosts=[],
            probed=0,
            errors=0,
            start_time=start_time,
            end_time=datetime.now(),
        )

    logger.info("Starting scan of %s (%d targets)", targets, len(targets))
    sock = socket_factory(timeout)
    router = None

    def probe(position: int, address: int) -> ProbeOutcome:
        request = ProbeRequest.for_target(address, position)
        outcome = ping_target(sock, request, timeout, config.sweep.payload, router)
        if outcome.is_alive and discovered.insert(outcome.address) and on_discovered:
            try:
                on_discovered(outcome.address)
            except Exception as e:
                logger.warning("Discovery callback failed for %s: %s", outcome.address, e)
        return outcome

    try:
        if strict_match:
            router = ReplyRouter(sock)
            router.start()

        workers = min(max_workers, len(targets)) if max_workers else len(targets)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="netsweep-probe") as executor:
            futures = {
                executor.submit(probe, position, address): address
                for position, address in enumerate(targets)
            }

            for future in as_completed(futures):
                try:
                    outcome = future.result()
                except Exception as e:
                    errors += 1
                    logger.warning("Error pinging %s: %s", decode(futures[future]), e)
                    continue

                if outcome.status == ProbeStatus.ERROR:
                    errors += 1
                    logger.warning("Error pinging %s: %s", outcome.target, outcome.error)
    finally:
        if router is not None:
            router.stop()
        sock.close()

    hosts = sort_addresses(discovered.snapshot())
    logger.info("Unique IPs: %d", len(hosts))

    return SweepResult(
        start=decode(targets.start),
        end=decode(targets.end),
        hosts=hosts,
        probed=len(targets),
        errors=errors,
        start_time=start_time,
        end_time=datetime.now(),
    )
