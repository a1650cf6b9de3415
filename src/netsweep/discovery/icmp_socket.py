"""Shared raw ICMP socket and Echo Request/Reply codec.

A single socket carries every probe of a sweep. Replies are delivered to
whichever caller reads next, so callers must not assume that a datagram
belongs to their own request.
"""

import errno
import logging
import os
import select
import socket
from dataclasses import dataclass

from scapy.all import ICMP, IP, Raw

from ..core.exceptions import PermissionError, TransportError
from .addressing import decode

logger = logging.getLogger(__name__)

ICMP_ECHO_REPLY = 0
ICMP_ECHO_REQUEST = 8
ICMP_HEADER_LEN = 8
IPV4_MIN_HEADER_LEN = 20


@dataclass(frozen=True)
class ProbeRequest:
    """One outstanding echo request."""

    target: int
    sequence: int
    identifier: int

    @classmethod
    def for_target(cls, target: int, position: int) -> "ProbeRequest":
        """Build a request whose sequence is the target's position in the range.

        The identifier mixes the process id with the sequence so this run's
        packets stand apart from other ICMP traffic on the host.
        """
        sequence = position & 0xFFFF
        identifier = ((os.getpid() & 0xFFFF) + sequence) & 0xFFFF
        return cls(target=target, sequence=sequence, identifier=identifier)

    @property
    def key(self) -> tuple[int, int]:
        return self.identifier, self.sequence


@dataclass(frozen=True)
class EchoMessage:
    """Decoded ICMP header fields."""

    type: int
    code: int
    identifier: int | None
    sequence: int | None

    @property
    def is_echo_reply(self) -> bool:
        return self.type == ICMP_ECHO_REPLY

    @property
    def key(self) -> tuple[int | None, int | None]:
        return self.identifier, self.sequence


def build_echo_request(request: ProbeRequest, payload: bytes = b"T") -> bytes:
    """Serialize an ICMP Echo Request; scapy fills in the checksum."""
    packet = ICMP(
        type=ICMP_ECHO_REQUEST,
        code=0,
        id=request.identifier,
        seq=request.sequence,
    ) / Raw(load=payload)
    return bytes(packet)


def parse_icmp(data: bytes) -> EchoMessage:
    """Decode an ICMP datagram, with or without a leading IPv4 header."""
    if len(data) >= IPV4_MIN_HEADER_LEN and data[0] >> 4 == 4:
        header_len = (data[0] & 0x0F) * 4
        if len(data) < header_len + ICMP_HEADER_LEN:
            raise TransportError("Malformed ICMP datagram", f"{len(data)} bytes")
        icmp = IP(data).getlayer(ICMP)
    elif len(data) >= ICMP_HEADER_LEN:
        icmp = ICMP(data)
    else:
        raise TransportError("Malformed ICMP datagram", f"{len(data)} bytes")

    if icmp is None:
        raise TransportError("Malformed ICMP datagram", "no ICMP layer")

    if icmp.type in (ICMP_ECHO_REPLY, ICMP_ECHO_REQUEST):
        return EchoMessage(icmp.type, icmp.code, icmp.id, icmp.seq)
    return EchoMessage(icmp.type, icmp.code, None, None)


class ProbeSocket:
    """Raw ICMP socket shared by all probes of one sweep."""

    def __init__(self, sock: socket.socket, timeout: float, recv_buffer: int = 1500):
        self._sock = sock
        self.timeout = timeout
        self._recv_buffer = recv_buffer

    @classmethod
    def open(cls, timeout: float = 5.0, recv_buffer: int = 1500) -> "ProbeSocket":
        """Open the raw socket on the wildcard address."""
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
        except OSError as e:
            if e.errno in (errno.EPERM, errno.EACCES):
                raise PermissionError(
                    "raw ICMP socket",
                    "Run with sudo or grant CAP_NET_RAW",
                ) from e
            raise TransportError("Error creating ICMP socket", str(e)) from e

        try:
            sock.bind(("0.0.0.0", 0))
            sock.settimeout(timeout)
        except OSError as e:
            sock.close()
            raise TransportError("Error configuring ICMP socket", str(e)) from e

        logger.debug("Opened raw ICMP socket (timeout %.1fs)", timeout)
        return cls(sock, timeout, recv_buffer)

    def send(self, request: ProbeRequest, payload: bytes = b"T") -> None:
        target = decode(request.target)
        packet = build_echo_request(request, payload)
        try:
            self._sock.sendto(packet, (target, 0))
        except OSError as e:
            raise TransportError(f"Failed to send echo request to {target}", str(e)) from e

    def receive(self, timeout: float | None = None) -> tuple[bytes, str] | None:
        """Read the next datagram, or None once the deadline passes.

        Without ``timeout`` the socket-wide timeout applies.
        """
        try:
            if timeout is not None:
                ready, _, _ = select.select([self._sock], [], [], timeout)
                if not ready:
                    return None
            data, peer = self._sock.recvfrom(self._recv_buffer)
        except socket.timeout:
            return None
        except (OSError, ValueError) as e:
            raise TransportError("Failed to read from ICMP socket", str(e)) from e
        return data, peer[0]

    def close(self) -> None:
        self._sock.close()
        logger.debug("Closed raw ICMP socket")

    def __enter__(self) -> "ProbeSocket":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
