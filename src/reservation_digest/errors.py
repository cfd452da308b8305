"""Exceptions raised by the digest job."""


class DigestError(Exception):
    """Base class for digest job failures."""


class UpstreamQueryError(DigestError):
    """A read against the reservation store failed. Aborts the run."""


class DispatchError(DigestError):
    """Delivering the digest to one recipient failed."""

    def __init__(self, recipient: str, reason: str):
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to send digest to {recipient}: {reason}")
