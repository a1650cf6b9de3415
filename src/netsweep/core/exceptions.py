"""Custom exceptions for netsweep."""


class NetSweepError(Exception):
    """Base exception for all netsweep errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(NetSweepError):
    """Input validation error."""

    pass


class InvalidAddressError(ValidationError):
    """Malformed or non-IPv4 address text."""

    def __init__(self, address: object, details: str | None = None):
        super().__init__(f"Invalid IPv4 address: {address!r}", details)
        self.address = address


class TransportError(NetSweepError):
    """Failure to open, send on, or read from the probe socket."""

    pass


class PermissionError(TransportError):
    """Insufficient permissions for operation."""

    def __init__(self, operation: str, details: str | None = None):
        message = f"Insufficient permissions for {operation}"
        super().__init__(message, details)
        self.operation = operation
