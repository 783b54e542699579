"""Single-use state machine driving one commit/challenge/response exchange."""

from __future__ import annotations

import enum
import logging
import secrets
from typing import Optional

from .challenge import Context
from .crypto import CommitmentState, Prover, Verifier
from .errors import InvalidStateError, OutOfRangeError, ProtocolError
from .transcript import ProofTranscript

logger = logging.getLogger("schnorrzk.session")


class SessionState(enum.Enum):
    INIT = "init"
    COMMITTED = "committed"
    CHALLENGED = "challenged"
    RESPONDED = "responded"
    VERIFIED = "verified"


class ProtocolSession:
    """Run ``Init -> Committed -> Challenged -> Responded -> Verified`` once.

    Any call made out of order raises :class:`InvalidStateError`. Once the
    session reaches ``VERIFIED`` it is spent; a new proof needs a new session
    and therefore a new commitment.
    """

    def __init__(
        self,
        prover: Prover,
        verifier: Verifier,
        *,
        context: Context = None,
    ) -> None:
        if prover.params != verifier.params:
            raise ProtocolError("Prover and verifier use different group parameters")
        self.prover = prover
        self.verifier = verifier
        self.context = context
        self.session_id = secrets.token_hex(8)
        self.state = SessionState.INIT
        self.accepted: Optional[bool] = None
        self.non_interactive = False
        self._commitment_state: Optional[CommitmentState] = None
        self._commitment: Optional[int] = None
        self._challenge: Optional[int] = None
        self._response: Optional[int] = None

    def _require(self, expected: SessionState) -> None:
        if self.state is not expected:
            raise InvalidStateError(expected.value, self.state.value)

    def _finish(self, accepted: bool) -> bool:
        self.accepted = accepted
        self.state = SessionState.VERIFIED
        self._commitment_state = None
        if accepted:
            logger.debug("Session %s accepted", self.session_id)
        else:
            logger.warning("Session %s rejected", self.session_id)
        return accepted

    def commit(self) -> int:
        self._require(SessionState.INIT)
        self._commitment_state, self._commitment = self.prover.commit()
        self.state = SessionState.COMMITTED
        logger.debug("Session %s committed", self.session_id)
        return self._commitment

    def challenge(self) -> int:
        """Interactive move two: the verifier samples a fresh challenge."""

        self._require(SessionState.COMMITTED)
        self._challenge = self.verifier.challenge(self._commitment)
        self.state = SessionState.CHALLENGED
        return self._challenge

    def derive_challenge(self) -> int:
        """Non-interactive move two: hash ``(t, y, context)`` into a challenge."""

        self._require(SessionState.COMMITTED)
        self._challenge = self.verifier.derive_challenge(self._commitment, context=self.context)
        self.non_interactive = True
        self.state = SessionState.CHALLENGED
        return self._challenge

    def respond(self) -> int:
        self._require(SessionState.CHALLENGED)
        try:
            self._response = self.prover.respond(self._commitment_state, self._challenge)
        except ProtocolError:
            self.prover.discard(self._commitment_state)
            self._finish(False)
            raise
        self._commitment_state = None
        self.state = SessionState.RESPONDED
        return self._response

    def verify(self) -> bool:
        self._require(SessionState.RESPONDED)
        try:
            accepted = self.verifier.verify(self._commitment, self._challenge, self._response)
        except OutOfRangeError as exc:
            logger.warning("Session %s received a malformed proof: %s", self.session_id, exc.message)
            accepted = False
        return self._finish(accepted)

    def run(self, *, non_interactive: bool = False) -> bool:
        """Drive every move in order and return the verdict."""

        self.commit()
        if non_interactive:
            self.derive_challenge()
        else:
            self.challenge()
        self.respond()
        return self.verify()

    @property
    def transcript(self) -> ProofTranscript:
        if self.state not in (SessionState.RESPONDED, SessionState.VERIFIED) or self._response is None:
            raise InvalidStateError(SessionState.RESPONDED.value, self.state.value)
        return ProofTranscript(
            commitment=self._commitment,
            challenge=self._challenge,
            response=self._response,
        )

    def abort(self) -> None:
        """Abandon the session, wiping its nonce if no response was produced."""

        if self._commitment_state is not None:
            self.prover.discard(self._commitment_state)
            self._commitment_state = None
        if self.state is not SessionState.VERIFIED:
            self._finish(False)

    def __del__(self) -> None:
        # Finalizers may run while the prover lock is held, so wipe without locking.
        state = getattr(self, "_commitment_state", None)
        if state is not None:
            state.nonce.wipe()

    def __enter__(self) -> "ProtocolSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        # After RESPONDED the nonce is gone and the transcript may still be verified elsewhere.
        if self.state in (SessionState.INIT, SessionState.COMMITTED, SessionState.CHALLENGED):
            self.abort()

    def __repr__(self) -> str:
        return f"ProtocolSession(id={self.session_id}, state={self.state.value}, accepted={self.accepted})"


__all__ = ["ProtocolSession", "SessionState"]
