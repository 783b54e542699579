"""FastAPI-powered Schnorr verifier service.

The service plays the verifier for remote provers. Interactive proofs take two
requests (commitment, then response); non-interactive proofs take one.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .challenge import CHALLENGE_ENCODING_VERSION
from .config import Settings, get_settings, load_group_parameters
from .crypto import Verifier
from .errors import ProtocolError
from .group import GroupParameters
from .proofs import verify_non_interactive
from .transcript import ProofTranscript

logger = logging.getLogger("schnorrzk.server")


@dataclass
class _PendingSession:
    public_key: int
    commitment: int
    challenge: int
    created_at: float


class _SessionManager:
    """Single-use pending sessions, bounded by age and count."""

    def __init__(
        self,
        ttl_seconds: float,
        max_sessions: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: Dict[str, _PendingSession] = {}
        self._ttl = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        # Insertion order matches creation order, so expired entries lead.
        while self._sessions:
            session_id, state = next(iter(self._sessions.items()))
            if now - state.created_at < self._ttl:
                break
            del self._sessions[session_id]
            logger.debug("Expired pending session %s", session_id)

    def create(self, public_key: int, commitment: int, challenge: int) -> str:
        session_id = secrets.token_urlsafe(16)
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            while len(self._sessions) >= self._max_sessions:
                evicted = next(iter(self._sessions))
                del self._sessions[evicted]
                logger.warning("Evicted pending session %s to stay under the session cap", evicted)
            self._sessions[session_id] = _PendingSession(
                public_key=public_key,
                commitment=commitment,
                challenge=challenge,
                created_at=now,
            )
        return session_id

    def pop(self, session_id: str) -> _PendingSession:
        with self._lock:
            self._evict_expired(self._clock())
            state = self._sessions.pop(session_id, None)
        if state is None:
            raise KeyError(session_id)
        return state

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class ParametersResponse(BaseModel):
    p: str
    q: str
    g: str
    fingerprint: str
    challenge_encoding_version: int


class SessionStartRequest(BaseModel):
    public_key: str
    commitment: str


class SessionStartResponse(BaseModel):
    session: str
    challenge: str


class SessionFinishRequest(BaseModel):
    response: str


class VerdictResponse(BaseModel):
    accepted: bool


class NonInteractiveRequest(BaseModel):
    public_key: str
    commitment: str
    challenge: str
    response: str
    context: str | None = None


def _parse_hex(name: str, value: str) -> int:
    try:
        return int(value, 16)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"{name} must be hex encoded") from exc


def create_app(
    params: GroupParameters | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the verifier service around one validated group."""

    settings = settings or get_settings()
    group = params or load_group_parameters(settings)
    sessions = _SessionManager(settings.session_ttl_seconds, settings.max_pending_sessions)
    app = FastAPI(title="Schnorr ZK", description="Schnorr proof-of-knowledge verifier")
    app.state.group = group
    app.state.sessions = sessions

    @app.exception_handler(ProtocolError)
    async def protocol_error_handler(request: Request, exc: ProtocolError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error_type": exc.error_type, "detail": exc.message},
        )

    @app.get("/parameters", response_model=ParametersResponse)
    async def parameters() -> ParametersResponse:
        return ParametersResponse(
            **group.to_dict(),
            fingerprint=group.fingerprint,
            challenge_encoding_version=CHALLENGE_ENCODING_VERSION,
        )

    @app.post("/sessions", response_model=SessionStartResponse)
    async def start_session(request: SessionStartRequest) -> SessionStartResponse:
        public_key = _parse_hex("Public key", request.public_key)
        commitment = _parse_hex("Commitment", request.commitment)

        verifier = Verifier(group, public_key)
        challenge = verifier.challenge(commitment)
        session = sessions.create(public_key, commitment, challenge)
        logger.debug("Issued challenge for session %s", session)
        return SessionStartResponse(session=session, challenge=hex(challenge))

    @app.post("/sessions/{session_id}/response", response_model=VerdictResponse)
    async def finish_session(session_id: str, request: SessionFinishRequest) -> VerdictResponse:
        try:
            state = sessions.pop(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Unknown session") from exc

        response = _parse_hex("Response", request.response)
        verifier = Verifier(group, state.public_key)
        try:
            accepted = verifier.verify(state.commitment, state.challenge, response)
        except ProtocolError as exc:
            logger.warning("Session %s sent a malformed response: %s", session_id, exc.message)
            accepted = False
        return VerdictResponse(accepted=accepted)

    @app.post("/proofs/verify", response_model=VerdictResponse)
    async def verify_proof(request: NonInteractiveRequest) -> VerdictResponse:
        verifier = Verifier(group, _parse_hex("Public key", request.public_key))
        transcript = ProofTranscript(
            commitment=_parse_hex("Commitment", request.commitment),
            challenge=_parse_hex("Challenge", request.challenge),
            response=_parse_hex("Response", request.response),
        )
        accepted = verify_non_interactive(verifier, transcript, context=request.context)
        return VerdictResponse(accepted=accepted)

    return app


__all__ = ["create_app"]
