"""Shared test fixtures."""

import queue
import threading

import pytest
from scapy.all import ICMP, IP, Raw

from netsweep.core.config import Config, set_config
from netsweep.core.exceptions import TransportError
from netsweep.discovery.addressing import decode


@pytest.fixture(autouse=True)
def default_config():
    """Isolate tests from NETSWEEP_* variables in the environment."""
    config = Config()
    set_config(config)
    yield config
    set_config(None)


def echo_reply(src: str, identifier: int, sequence: int, dst: str = "10.255.255.254") -> bytes:
    """Raw bytes of an IPv4 datagram carrying an ICMP Echo Reply."""
    return bytes(IP(src=src, dst=dst) / ICMP(type=0, id=identifier, seq=sequence) / Raw(b"T"))


class FakeProbeSocket:
    """In-memory stand-in for ProbeSocket.

    Every send to an address in ``alive`` queues an echo reply from that
    address. Reads take whichever reply is next, like the real shared socket.
    """

    def __init__(self, alive=(), timeout=0.2, fail_send=(), duplicates=1):
        self.timeout = timeout
        self.alive = set(alive)
        self.fail_send = set(fail_send)
        self.duplicates = duplicates
        self.replies: queue.Queue = queue.Queue()
        self.sent = []
        self.closed = False
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    def send(self, request, payload=b"T"):
        target = decode(request.target)
        if target in self.fail_send:
            raise TransportError(f"Failed to send echo request to {target}", "Network is unreachable")

        with self._lock:
            self.sent.append(request)
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)

        if target in self.alive:
            data = echo_reply(target, request.identifier, request.sequence)
            for _ in range(self.duplicates):
                self.replies.put((data, target))

    def receive(self, timeout=None):
        try:
            return self.replies.get(timeout=self.timeout if timeout is None else timeout)
        except queue.Empty:
            return None
        finally:
            if timeout is None:
                with self._lock:
                    self.in_flight -= 1

    def close(self):
        self.closed = True


@pytest.fixture
def fake_socket_factory():
    """Build a socket factory that records the socket it hands out."""

    def make(**kwargs):
        created = {}

        def factory(timeout):
            created["timeout"] = timeout
            created["socket"] = FakeProbeSocket(**kwargs)
            return created["socket"]

        factory.created = created
        return factory

    return make
