"""Prover and verifier for the Schnorr identification protocol."""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from .challenge import Context, derive_challenge
from .errors import NoOutstandingCommitmentError, OutOfRangeError, ProtocolError
from .group import GroupParameters
from .scalars import Nonce, SecretScalar

logger = logging.getLogger("schnorrzk.crypto")

RandBelow = Callable[[int], int]


@dataclass(eq=False)
class CommitmentState:
    """Prover-side handle for one outstanding commitment.

    The nonce ``r`` stays inside the handle and is wiped as soon as a response
    is produced or the prover commits again.
    """

    commitment: int
    nonce: Nonce = field(repr=False)

    @property
    def consumed(self) -> bool:
        return self.nonce.wiped


class Prover:
    """Prover that holds the long-lived secret ``x`` and answers challenges."""

    def __init__(
        self,
        params: GroupParameters,
        secret: int,
        *,
        normalize: bool = False,
        randbelow: RandBelow = secrets.randbelow,
    ) -> None:
        if isinstance(secret, bool) or not isinstance(secret, int):
            raise OutOfRangeError("secret", "an integer 0 < x < q")
        if not 0 < secret < params.q:
            if not normalize:
                raise OutOfRangeError("secret", "0 < x < q")
            secret = secret % params.q
            if secret == 0:
                raise OutOfRangeError("secret", "x mod q != 0")
            logger.warning("Secret was reduced modulo q; pass a canonical value instead")

        self.params = params
        self._secret = SecretScalar(secret)
        self.public_key = pow(params.g, secret, params.p)
        self._randbelow = randbelow
        self._outstanding: Optional[CommitmentState] = None
        self._lock = threading.Lock()

    @property
    def has_outstanding_commitment(self) -> bool:
        outstanding = self._outstanding
        return outstanding is not None and not outstanding.consumed

    def commit(self) -> Tuple[CommitmentState, int]:
        """Sample a fresh nonce and return ``(state, t)`` with ``t = g^r mod p``."""

        with self._lock:
            if self._outstanding is not None:
                logger.debug("Discarding unanswered commitment before committing again")
                self._outstanding.nonce.wipe()
                self._outstanding = None

            r = self._randbelow(self.params.q)
            if not 0 <= r < self.params.q:
                raise ProtocolError("Nonce source returned a value outside [0, q)")
            commitment = pow(self.params.g, r, self.params.p)
            state = CommitmentState(commitment=commitment, nonce=Nonce(r))
            self._outstanding = state
            logger.debug("Produced commitment t=%x", commitment)
            return state, commitment

    def respond(self, state: CommitmentState, challenge: int) -> int:
        """Return ``s = (r + c * x) mod q`` and destroy the nonce."""

        with self._lock:
            if state is None or state is not self._outstanding or state.consumed:
                raise NoOutstandingCommitmentError()
            if not self.params.is_scalar(challenge):
                raise OutOfRangeError("challenge", "0 <= c < q")

            self._outstanding = None
            r = state.nonce.consume()
            return (r + challenge * self._secret.value) % self.params.q

    def discard(self, state: Optional[CommitmentState] = None) -> None:
        """Wipe the outstanding nonce (only if it belongs to ``state``, when given)."""

        with self._lock:
            if state is not None and state is not self._outstanding:
                state.nonce.wipe()
                return
            if self._outstanding is not None:
                self._outstanding.nonce.wipe()
                self._outstanding = None

    def close(self) -> None:
        self.discard()
        self._secret.wipe()

    def __enter__(self) -> "Prover":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Prover(public_key={self.public_key:#x})"


class Verifier:
    """Verifier that checks Schnorr proofs against a public key ``y``."""

    def __init__(
        self,
        params: GroupParameters,
        public_key: int,
        *,
        randbelow: RandBelow = secrets.randbelow,
    ) -> None:
        _check_public_key(params, public_key)
        self.params = params
        self.public_key = public_key
        self._randbelow = randbelow

    def challenge(self, commitment: int) -> int:
        """Honest-verifier challenge: fresh uniform randomness in ``[0, q)``."""

        if not self.params.is_element(commitment):
            raise OutOfRangeError("commitment", "0 < t < p")
        challenge = self._randbelow(self.params.q)
        if not self.params.is_scalar(challenge):
            raise ProtocolError("Challenge source returned a value outside [0, q)")
        return challenge

    def derive_challenge(
        self,
        commitment: int,
        public_key: Optional[int] = None,
        context: Context = None,
    ) -> int:
        """Fiat-Shamir challenge bound to ``(t, y, context)``."""

        y = self.public_key if public_key is None else public_key
        return derive_challenge(self.params, commitment, y, context)

    def verify(
        self,
        commitment: int,
        challenge: int,
        response: int,
        public_key: Optional[int] = None,
    ) -> bool:
        """Check ``g^s == t * y^c (mod p)``.

        Values outside their canonical ranges raise :class:`OutOfRangeError`;
        a well-formed but wrong proof returns ``False``.
        """

        params = self.params
        if public_key is None:
            y = self.public_key
        else:
            _check_public_key(params, public_key)
            y = public_key
        if not params.is_element(commitment):
            raise OutOfRangeError("commitment", "0 < t < p")
        if not params.is_scalar(challenge):
            raise OutOfRangeError("challenge", "0 <= c < q")
        if not params.is_scalar(response):
            raise OutOfRangeError("response", "0 <= s < q")

        left = pow(params.g, response, params.p)
        right = (commitment * pow(y, challenge, params.p)) % params.p
        accepted = left == right
        if not accepted:
            logger.debug("Proof rejected for commitment t=%x", commitment)
        return accepted


def _check_public_key(params: GroupParameters, public_key: int) -> None:
    if not params.is_element(public_key):
        raise OutOfRangeError("public_key", "0 < y < p")
    if pow(public_key, params.q, params.p) != 1:
        raise OutOfRangeError("public_key", "an element of the order-q subgroup")


def generate_secret(params: GroupParameters, randbelow: RandBelow = secrets.randbelow) -> int:
    """Generate a fresh secret uniformly from ``[1, q)``."""

    return randbelow(params.q - 1) + 1


def derive_public_key(params: GroupParameters, secret: int) -> int:
    """Derive ``y = g^x mod p`` from a canonical secret."""

    if not 0 < secret < params.q:
        raise OutOfRangeError("secret", "0 < x < q")
    return pow(params.g, secret, params.p)


def extract_witness(
    params: GroupParameters,
    first: Tuple[int, int],
    second: Tuple[int, int],
) -> int:
    """Recover ``x`` from two ``(c, s)`` answers to the same commitment.

    This is the special-soundness extractor: a prover that can answer two
    distinct challenges for one ``t`` must know ``x``, and a reused nonce
    hands ``x`` to anyone holding both transcripts.
    """

    c1, s1 = first
    c2, s2 = second
    q = params.q
    if (c1 - c2) % q == 0:
        raise ProtocolError("Extraction requires two distinct challenges")
    return ((s1 - s2) * pow(c1 - c2, -1, q)) % q


__all__ = [
    "CommitmentState",
    "Prover",
    "Verifier",
    "derive_public_key",
    "extract_witness",
    "generate_secret",
]
