"""Per-target ICMP echo probing over the shared socket."""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum

from ..core.exceptions import TransportError
from .addressing import decode
from .icmp_socket import ProbeRequest, ProbeSocket, parse_icmp

logger = logging.getLogger(__name__)


class ProbeStatus(Enum):
    """Probe outcome enumeration."""

    ALIVE = "alive"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class ProbeOutcome:
    """Result of probing a single target.

    ``address`` is the host that answered. With shared-socket correlation it
    can differ from ``target``: the reply read during this probe's wait may
    belong to another in-flight probe.
    """

    target: str
    status: ProbeStatus
    address: str | None = None
    error: str | None = None
    rtt: float | None = None  # seconds, measured from our own send

    @property
    def is_alive(self) -> bool:
        return self.status == ProbeStatus.ALIVE

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "status": self.status.value,
            "address": self.address,
            "error": self.error,
            "rtt_ms": round(self.rtt * 1000, 2) if self.rtt is not None else None,
        }


class _Waiter:
    def __init__(self) -> None:
        self.event = threading.Event()
        self.sender: str | None = None

    def deliver(self, sender: str) -> None:
        if not self.event.is_set():
            self.sender = sender
            self.event.set()


class ReplyRouter:
    """Routes echo replies to the probe that sent the matching request.

    A single background thread owns every read on the socket and matches
    replies by (identifier, sequence). Traffic with no registered waiter is
    dropped. Sequence numbers wrap at 65536, so in ranges larger than that
    two probes can share a key; the later registration wins.
    """

    def __init__(self, sock: ProbeSocket, poll_interval: float = 0.2):
        self._sock = sock
        self._poll_interval = poll_interval
        self._pending: dict[tuple[int, int], _Waiter] = {}
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run, name="netsweep-reply-router", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def register(self, request: ProbeRequest) -> _Waiter:
        """Register interest before sending so early replies are not lost."""
        waiter = _Waiter()
        with self._lock:
            self._pending[request.key] = waiter
        return waiter

    def discard(self, request: ProbeRequest, waiter: _Waiter) -> None:
        with self._lock:
            if self._pending.get(request.key) is waiter:
                del self._pending[request.key]

    def wait(self, request: ProbeRequest, waiter: _Waiter, timeout: float) -> str | None:
        """Block until the matching reply arrives; return its sender."""
        try:
            if waiter.event.wait(timeout):
                return waiter.sender
            return None
        finally:
            self.discard(request, waiter)

    def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                received = self._sock.receive(self._poll_interval)
            except TransportError as e:
                if self._stopping.is_set():
                    break
                logger.warning("Reply router read failed: %s", e)
                self._stopping.wait(self._poll_interval)
                continue

            if received is None:
                continue

            data, sender = received
            try:
                message = parse_icmp(data)
            except TransportError as e:
                logger.debug("Dropping datagram from %s: %s", sender, e)
                continue

            if not message.is_echo_reply:
                continue

            with self._lock:
                waiter = self._pending.get(message.key)

            if waiter is None:
                logger.debug(
                    "Unmatched echo reply from %s (id=%s seq=%s)",
                    sender,
                    message.identifier,
                    message.sequence,
                )
                continue

            waiter.deliver(sender)


def ping_target(
    sock: ProbeSocket,
    request: ProbeRequest,
    timeout: float | None = None,
    payload: bytes = b"T",
    router: ReplyRouter | None = None,
) -> ProbeOutcome:
    """
    Send one echo request and wait for a reply.

    Without a router the probe reads the next datagram from the shared
    socket, bounded by the socket's own timeout, and treats any Echo Reply
    as proof of life for its sender, whichever probe that reply answers.
    With a router only the reply matching this request counts.

    Args:
        sock: Shared probe socket
        request: Echo request to send
        timeout: Reply deadline for routed probes (defaults to the socket timeout)
        payload: Echo data
        router: Optional reply router for strict correlation

    Returns:
        ProbeOutcome for the target
    """
    target = decode(request.target)
    waiter = router.register(request) if router is not None else None
    start = time.monotonic()

    try:
        sock.send(request, payload)
    except TransportError as e:
        if router is not None:
            router.discard(request, waiter)
        return ProbeOutcome(target, ProbeStatus.ERROR, error=str(e))

    if router is not None:
        deadline = timeout if timeout is not None else sock.timeout
        sender = router.wait(request, waiter, deadline)
        if sender is None:
            return ProbeOutcome(target, ProbeStatus.TIMEOUT)
        return ProbeOutcome(
            target, ProbeStatus.ALIVE, address=sender, rtt=time.monotonic() - start
        )

    try:
        received = sock.receive()
    except TransportError as e:
        return ProbeOutcome(target, ProbeStatus.ERROR, error=str(e))

    if received is None:
        return ProbeOutcome(target, ProbeStatus.TIMEOUT)

    data, sender = received
    try:
        message = parse_icmp(data)
    except TransportError as e:
        return ProbeOutcome(target, ProbeStatus.ERROR, error=str(e))

    # Anything but an echo reply is a non-reply.
    if not message.is_echo_reply:
        return ProbeOutcome(target, ProbeStatus.TIMEOUT)

    return ProbeOutcome(target, ProbeStatus.ALIVE, address=sender, rtt=time.monotonic() - start)
