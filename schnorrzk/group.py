"""Group parameters ``(p, q, g)`` for the Schnorr identification protocol."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Dict, Tuple

import gmpy2

from .errors import DegenerateGeneratorError, NotPrimeError, OrderMismatchError, ParamError

logger = logging.getLogger("schnorrzk.group")

# Miller-Rabin false-positive rate is at most 4^-rounds; 64 rounds gives 2^-128.
DEFAULT_PRIMALITY_ROUNDS = 64

# Demonstration parameters: q = 11, p = 2q + 1 = 23, g = 4 generates the
# subgroup of order 11 in Z_23^*.
TOY_GROUP: Tuple[int, int, int] = (23, 11, 4)

# RFC 3526 group 14: 2048-bit MODP safe prime, q = (p - 1) / 2, g = 2.
_RFC3526_P14 = int(
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3D"
    "C2007CB8A163BF0598DA48361C55D39A69163FA8FD24CF5F"
    "83655D23DCA3AD961C62F356208552BB9ED529077096966D"
    "670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9"
    "DE2BCBF6955817183995497CEA956AE515D2261898FA0510"
    "15728E5A8AACAA68FFFFFFFFFFFFFFFF",
    16,
)
RFC3526_GROUP_14: Tuple[int, int, int] = (_RFC3526_P14, (_RFC3526_P14 - 1) // 2, 2)


def _byte_length(value: int) -> int:
    return max(1, (value.bit_length() + 7) // 8)


def _check_integer(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParamError(f"Group parameter '{name}' must be an integer")
    return value


@dataclass(frozen=True)
class GroupParameters:
    """Validated prime-order subgroup of ``Z_p^*`` generated by ``g``.

    Instances are immutable and safe to share between any number of provers,
    verifiers and threads. Build them with :meth:`validate`; the plain
    constructor performs no checks.
    """

    p: int
    q: int
    g: int

    @classmethod
    def validate(
        cls,
        p: int,
        q: int,
        g: int,
        *,
        rounds: int = DEFAULT_PRIMALITY_ROUNDS,
    ) -> "GroupParameters":
        """Check every group invariant and return the immutable triple.

        Raises :class:`NotPrimeError`, :class:`OrderMismatchError` or
        :class:`DegenerateGeneratorError`; performs no other side effects.
        """

        p = _check_integer("p", p)
        q = _check_integer("q", q)
        g = _check_integer("g", g)
        if rounds < 1:
            raise ParamError("Primality rounds must be positive")

        if p < 3 or not gmpy2.is_prime(p, rounds):
            raise NotPrimeError("p")
        if q < 2 or not gmpy2.is_prime(q, rounds):
            raise NotPrimeError("q")
        if (p - 1) % q != 0:
            raise OrderMismatchError("Subgroup order q does not divide p - 1")
        # q is prime, so g has order 1 or q once g^q == 1; excluding g == 1 leaves
        # exactly q.
        if not 1 < g < p:
            raise DegenerateGeneratorError("Generator must satisfy 1 < g < p")
        if pow(g, q, p) != 1:
            raise OrderMismatchError("Generator order does not divide q")

        params = cls(p=p, q=q, g=g)
        logger.info(
            "Validated group parameters (p_bits=%d, q_bits=%d, fingerprint=%s)",
            p.bit_length(),
            q.bit_length(),
            params.fingerprint[:16],
        )
        return params

    @property
    def element_length(self) -> int:
        """Byte width of a fixed-width encoded group element."""

        return _byte_length(self.p)

    @property
    def scalar_length(self) -> int:
        """Byte width of a fixed-width encoded exponent."""

        return _byte_length(self.q)

    def is_scalar(self, value: int) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < self.q

    def is_element(self, value: int) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and 0 < value < self.p

    def contains(self, value: int) -> bool:
        """Return ``True`` when ``value`` lies in the subgroup of order ``q``."""

        return self.is_element(value) and pow(value, self.q, self.p) == 1

    @property
    def fingerprint(self) -> str:
        hasher = hashlib.sha256(b"schnorr-zk/group/v1")
        for value in (self.p, self.q, self.g):
            encoded = value.to_bytes(_byte_length(value), "big")
            hasher.update(len(encoded).to_bytes(4, "big"))
            hasher.update(encoded)
        return hasher.hexdigest()

    def to_dict(self) -> Dict[str, str]:
        return {"p": str(self.p), "q": str(self.q), "g": str(self.g)}

    @staticmethod
    def from_dict(
        data: Dict[str, str],
        *,
        rounds: int = DEFAULT_PRIMALITY_ROUNDS,
    ) -> "GroupParameters":
        try:
            p, q, g = (int(str(data[name]), 0) for name in ("p", "q", "g"))
        except (KeyError, ValueError) as exc:
            raise ParamError("Group parameters must provide integer p, q and g") from exc
        return GroupParameters.validate(p, q, g, rounds=rounds)


def validate_group_parameters(
    p: int,
    q: int,
    g: int,
    *,
    rounds: int = DEFAULT_PRIMALITY_ROUNDS,
) -> GroupParameters:
    """Functional alias for :meth:`GroupParameters.validate`."""

    return GroupParameters.validate(p, q, g, rounds=rounds)


__all__ = [
    "DEFAULT_PRIMALITY_ROUNDS",
    "GroupParameters",
    "RFC3526_GROUP_14",
    "TOY_GROUP",
    "validate_group_parameters",
]
