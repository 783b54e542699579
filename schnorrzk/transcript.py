"""Wire encoding of proof transcripts and public keys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .errors import OutOfRangeError, ProtocolError
from .group import GroupParameters

TRANSCRIPT_VERSION = 1


def encode_element(params: GroupParameters, value: int) -> bytes:
    """Fixed-width big-endian encoding of a group element (``t`` or ``y``)."""

    if not params.is_element(value):
        raise OutOfRangeError("element", "0 < v < p")
    return value.to_bytes(params.element_length, "big")


def decode_element(params: GroupParameters, data: bytes) -> int:
    if len(data) != params.element_length:
        raise ProtocolError("Encoded element has the wrong length")
    value = int.from_bytes(data, "big")
    if not params.is_element(value):
        raise OutOfRangeError("element", "0 < v < p")
    return value


def _encode_scalar(params: GroupParameters, name: str, value: int) -> bytes:
    if not params.is_scalar(value):
        raise OutOfRangeError(name, "0 <= v < q")
    return value.to_bytes(params.scalar_length, "big")


@dataclass(frozen=True)
class ProofTranscript:
    """The public ``(t, c, s)`` triple of one proof attempt.

    It contains no secret material and is safe to log, store or transmit.
    """

    commitment: int
    challenge: int
    response: int

    def to_bytes(self, params: GroupParameters) -> bytes:
        return b"".join(
            [
                bytes([TRANSCRIPT_VERSION]),
                encode_element(params, self.commitment),
                _encode_scalar(params, "challenge", self.challenge),
                _encode_scalar(params, "response", self.response),
            ]
        )

    @staticmethod
    def from_bytes(params: GroupParameters, data: bytes) -> "ProofTranscript":
        element_length = params.element_length
        scalar_length = params.scalar_length
        if len(data) != 1 + element_length + 2 * scalar_length:
            raise ProtocolError("Encoded transcript has the wrong length")
        if data[0] != TRANSCRIPT_VERSION:
            raise ProtocolError(f"Unsupported transcript version {data[0]}")
        offset = 1
        commitment = decode_element(params, data[offset : offset + element_length])
        offset += element_length
        challenge = int.from_bytes(data[offset : offset + scalar_length], "big")
        offset += scalar_length
        response = int.from_bytes(data[offset:], "big")
        # Fixed-width fields can still hold values >= q.
        if not params.is_scalar(challenge):
            raise OutOfRangeError("challenge", "0 <= c < q")
        if not params.is_scalar(response):
            raise OutOfRangeError("response", "0 <= s < q")
        return ProofTranscript(commitment=commitment, challenge=challenge, response=response)

    def to_dict(self) -> Dict[str, str]:
        return {
            "commitment": hex(self.commitment),
            "challenge": hex(self.challenge),
            "response": hex(self.response),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "ProofTranscript":
        try:
            return ProofTranscript(
                commitment=int(data["commitment"], 16),
                challenge=int(data["challenge"], 16),
                response=int(data["response"], 16),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ProtocolError("Transcript must provide hex commitment, challenge and response") from exc


__all__ = ["ProofTranscript", "TRANSCRIPT_VERSION", "decode_element", "encode_element"]
