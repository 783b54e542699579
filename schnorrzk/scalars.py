"""Owned wrappers for secret exponents.

Python integers are immutable, so "zeroization" here means dropping the only
reference the engine holds. The wrappers refuse to be copied or pickled and
never render their value, which keeps ``x`` and ``r`` out of logs, tracebacks
and serialized state.
"""

from __future__ import annotations

from typing import Optional

from .errors import SecretConsumedError


class SecretScalar:
    """A secret exponent with single ownership and explicit wiping."""

    __slots__ = ("_value",)

    def __init__(self, value: int) -> None:
        self._value: Optional[int] = value

    @property
    def value(self) -> int:
        if self._value is None:
            raise SecretConsumedError()
        return self._value

    @property
    def wiped(self) -> bool:
        return self._value is None

    def wipe(self) -> None:
        self._value = None

    def __enter__(self) -> "SecretScalar":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wipe()

    def __del__(self) -> None:
        self._value = None

    def __repr__(self) -> str:
        state = "wiped" if self._value is None else "redacted"
        return f"{type(self).__name__}(<{state}>)"

    __str__ = __repr__

    def __copy__(self) -> "SecretScalar":
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo: dict) -> "SecretScalar":
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __reduce_ex__(self, protocol: object) -> object:
        raise TypeError(f"{type(self).__name__} cannot be serialized")

    def __eq__(self, other: object) -> bool:
        # Identity only; comparing secret values would turn this into an oracle.
        return self is other

    __hash__ = object.__hash__


class Nonce(SecretScalar):
    """Ephemeral commitment randomness ``r``; readable exactly once."""

    __slots__ = ()

    def consume(self) -> int:
        value = self.value
        self.wipe()
        return value


__all__ = ["Nonce", "SecretScalar"]
