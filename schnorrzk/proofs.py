"""High level helpers for multi-round and non-interactive proofs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .challenge import Context
from .crypto import Prover, Verifier
from .errors import OutOfRangeError
from .session import ProtocolSession
from .transcript import ProofTranscript

logger = logging.getLogger("schnorrzk.proofs")


@dataclass
class RoundsResult:
    """Outcome of a batch of independent interactive rounds."""

    transcripts: List[ProofTranscript] = field(default_factory=list)
    accepted_rounds: int = 0

    @property
    def rounds(self) -> int:
        return len(self.transcripts)

    @property
    def success(self) -> bool:
        return self.rounds > 0 and self.accepted_rounds == self.rounds

    def to_dict(self) -> Dict[str, object]:
        return {
            "rounds": [transcript.to_dict() for transcript in self.transcripts],
            "accepted_rounds": self.accepted_rounds,
            "success": self.success,
        }


def run_rounds(prover: Prover, verifier: Verifier, rounds: int) -> RoundsResult:
    """Run ``rounds`` fresh interactive sessions; a cheater survives with odds ``q^-rounds``."""

    if rounds < 1:
        raise ValueError("At least one round is required")

    result = RoundsResult()
    for _ in range(rounds):
        with ProtocolSession(prover, verifier) as session:
            if session.run():
                result.accepted_rounds += 1
            result.transcripts.append(session.transcript)

    logger.info("Completed %d/%d interactive rounds", result.accepted_rounds, rounds)
    return result


def prove_non_interactive(prover: Prover, context: Context = None) -> ProofTranscript:
    """Produce a Fiat-Shamir proof of knowledge of the prover's secret."""

    verifier = Verifier(prover.params, prover.public_key)
    with ProtocolSession(prover, verifier, context=context) as session:
        session.commit()
        session.derive_challenge()
        session.respond()
        return session.transcript


def verify_non_interactive(
    verifier: Verifier,
    transcript: ProofTranscript,
    context: Context = None,
) -> bool:
    """Recompute the challenge and check the transcript; malformed input is rejected."""

    try:
        expected = verifier.derive_challenge(transcript.commitment, context=context)
        if transcript.challenge != expected:
            logger.warning("Non-interactive proof carries a mismatched challenge")
            return False
        return verifier.verify(transcript.commitment, transcript.challenge, transcript.response)
    except OutOfRangeError as exc:
        logger.warning("Rejected malformed non-interactive proof: %s", exc.message)
        return False


__all__ = ["RoundsResult", "prove_non_interactive", "run_rounds", "verify_non_interactive"]
