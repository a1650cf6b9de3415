"""IPv4 address codec and inclusive range enumeration."""

from collections.abc import Iterator
from dataclasses import dataclass
from ipaddress import IPv4Address

from ..core.exceptions import InvalidAddressError
from ..core.utils import validate_ip

MAX_ADDRESS = 0xFFFFFFFF


def encode(text: str) -> int:
    """Convert dotted-decimal IPv4 text to its 32-bit integer value."""
    return int(validate_ip(text))


def decode(value: int) -> str:
    """Convert a 32-bit integer to canonical dotted-decimal text."""
    if not 0 <= value <= MAX_ADDRESS:
        raise InvalidAddressError(value, "outside the 32-bit address space")
    return str(IPv4Address(value))


@dataclass(frozen=True)
class AddressRange:
    """Closed interval [start, end] of IPv4 addresses as integers.

    A range whose start is above its end is empty rather than invalid.
    Iterating is lazy and may be repeated.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        for bound in (self.start, self.end):
            if not 0 <= bound <= MAX_ADDRESS:
                raise InvalidAddressError(bound, "outside the 32-bit address space")

    @classmethod
    def from_text(cls, start: str, end: str) -> "AddressRange":
        return cls(encode(start), encode(end))

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.start <= value <= self.end

    def __str__(self) -> str:
        return f"{decode(self.start)}-{decode(self.end)}"
