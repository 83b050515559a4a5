"""Error taxonomy shared by every bounded context.

Each exception carries a stable ``error_code`` that is written to audit
events and returned to clients. Messages are fixed strings: the caller
must never be able to tell an expired credential from a forged one, or a
resource in another tenant from one that does not exist.
"""

from __future__ import annotations


class ShieldedError(Exception):
    """Base class for errors that map to a client-visible outcome."""

    error_code: str = "error"
    public_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)


class AuthenticationFailedError(ShieldedError):
    """Raised when a credential cannot be turned into an AuthContext.

    Covers malformed, forged, expired, revoked and replayed tokens, wrong
    issuer or audience, missing claims and an unreachable replay store.
    The message is always the same; the specific reason only goes to the
    token validator probe.
    """

    error_code = "authentication_failed"
    public_message = "Authentication failed"

    def __init__(self) -> None:
        super().__init__(self.public_message)


class ForbiddenError(ShieldedError):
    """Raised when the caller's role categorically lacks an action."""

    error_code = "forbidden"
    public_message = "Forbidden"


class ResourceNotFoundError(ShieldedError):
    """Raised when a resource is absent, in another tenant, or not visible.

    The three cases are deliberately indistinguishable to the caller.
    """

    error_code = "not_found"
    public_message = "Not found"

    def __init__(self) -> None:
        super().__init__(self.public_message)


class ConfigurationFaultError(ShieldedError):
    """Raised when the system is wired incorrectly.

    The typical case is a storage operation attempted without a bound
    AuthContext. These faults are fatal for the request and never retried.
    """

    error_code = "configuration_fault"
    public_message = "Internal server error"


class ImmutableRecordError(ConfigurationFaultError):
    """Raised on an attempt to update or delete append-only records."""

    error_code = "immutable_record"


class RateLimitedError(ShieldedError):
    """Raised when an identity is currently throttled.

    Attributes:
        retry_after_seconds: Seconds the caller should wait before retrying
    """

    error_code = "rate_limited"
    public_message = "Too many requests"

    def __init__(self, retry_after_seconds: int):
        super().__init__(self.public_message)
        self.retry_after_seconds = retry_after_seconds


class AuditWriteError(ShieldedError):
    """Raised internally when an audit event cannot be persisted.

    Never propagated to the caller: recorders log it and continue.
    """

    error_code = "audit_write_failed"
