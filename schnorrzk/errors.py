"""Exception hierarchy for the Schnorr proof engine.

Every error carries a short, non-secret ``message`` and a stable
``error_type`` string that outer layers (the HTTP service, the CLI) can
report without inspecting the exception class.
"""

from __future__ import annotations


class SchnorrZKError(Exception):
    """Base exception for all engine errors."""

    error_type: str = "schnorrzk_error"

    def __init__(self, message: str = "Schnorr protocol failure") -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(SchnorrZKError):
    """Configured parameters could not be parsed."""

    error_type = "configuration_error"


class SecretConsumedError(SchnorrZKError):
    """A wiped secret or nonce was read again."""

    error_type = "secret_consumed"

    def __init__(self, message: str = "Secret value has already been wiped") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Group parameter errors (fatal, raised at construction time)
# ---------------------------------------------------------------------------


class ParamError(SchnorrZKError):
    """Malformed or insecure group parameters."""

    error_type = "param_error"


class NotPrimeError(ParamError):
    """``p`` or ``q`` failed the primality test."""

    error_type = "not_prime"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Group parameter '{name}' is not prime")


class OrderMismatchError(ParamError):
    """``q`` does not divide ``p - 1`` or ``g`` does not have order ``q``."""

    error_type = "order_mismatch"


class DegenerateGeneratorError(ParamError):
    """``g`` is out of range or generates a subgroup smaller than ``q``."""

    error_type = "degenerate_generator"


# ---------------------------------------------------------------------------
# Protocol errors (raised while a proof is running)
# ---------------------------------------------------------------------------


class ProtocolError(SchnorrZKError):
    """Misuse of the three-move exchange or a malformed protocol message."""

    error_type = "protocol_error"


class InvalidStateError(ProtocolError):
    """An operation was invoked out of order on a session."""

    error_type = "invalid_state"

    def __init__(self, expected: object, actual: object) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid session state: expected {expected}, got {actual}")


class OutOfRangeError(ProtocolError):
    """A protocol value lies outside its canonical range."""

    error_type = "out_of_range"

    def __init__(self, field: str, bound: str = "") -> None:
        self.field = field
        message = f"Value for '{field}' is out of range"
        if bound:
            message = f"{message} (expected {bound})"
        super().__init__(message)


class NoOutstandingCommitmentError(ProtocolError):
    """``respond`` was called without a matching ``commit``."""

    error_type = "no_outstanding_commitment"

    def __init__(self, message: str = "No outstanding commitment for this response") -> None:
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "DegenerateGeneratorError",
    "InvalidStateError",
    "NoOutstandingCommitmentError",
    "NotPrimeError",
    "OrderMismatchError",
    "OutOfRangeError",
    "ParamError",
    "ProtocolError",
    "SchnorrZKError",
    "SecretConsumedError",
]
