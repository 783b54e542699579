"""Fiat-Shamir challenge derivation.

The hash input is an unambiguous, versioned encoding::

    DOMAIN_TAG || LP(p) || LP(q) || LP(g) || LP(t) || LP(y) || LP(context)

where ``LP`` prefixes each field with its 4-byte big-endian length and group
values are encoded fixed-width over ``params.element_length`` bytes. Any change
to this layout must bump :data:`CHALLENGE_ENCODING_VERSION`.
"""

from __future__ import annotations

import hashlib
from typing import Union

from .errors import OutOfRangeError
from .group import GroupParameters

CHALLENGE_ENCODING_VERSION = 1
DOMAIN_TAG = b"schnorr-zk/fiat-shamir/v%d" % CHALLENGE_ENCODING_VERSION

# Extra output bytes squeezed beyond the width of q; keeps the mod-q bias
# below 2^-128.
_BIAS_MARGIN = 16

Context = Union[bytes, str, None]


def _length_prefixed(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data


def _context_bytes(context: Context) -> bytes:
    if context is None:
        return b""
    if isinstance(context, str):
        return context.encode("utf-8")
    return bytes(context)


def challenge_input(params: GroupParameters, t: int, y: int, context: Context = None) -> bytes:
    """Return the exact byte string that is hashed to derive a challenge."""

    if not params.is_element(t):
        raise OutOfRangeError("commitment", "0 < t < p")
    if not params.is_element(y):
        raise OutOfRangeError("public_key", "0 < y < p")

    width = params.element_length
    parts = [DOMAIN_TAG]
    for value in (params.p, params.q, params.g, t, y):
        parts.append(_length_prefixed(value.to_bytes(width, "big")))
    parts.append(_length_prefixed(_context_bytes(context)))
    return b"".join(parts)


def derive_challenge(params: GroupParameters, t: int, y: int, context: Context = None) -> int:
    """Map ``(t, y[, context])`` to a challenge in ``[0, q)``."""

    digest = hashlib.shake_256(challenge_input(params, t, y, context)).digest(
        params.scalar_length + _BIAS_MARGIN
    )
    return int.from_bytes(digest, "big") % params.q


__all__ = [
    "CHALLENGE_ENCODING_VERSION",
    "DOMAIN_TAG",
    "challenge_input",
    "derive_challenge",
]
