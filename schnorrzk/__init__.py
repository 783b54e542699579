"""Schnorr zero-knowledge proof of knowledge of a discrete logarithm."""

from .challenge import CHALLENGE_ENCODING_VERSION, derive_challenge
from .crypto import (
    CommitmentState,
    Prover,
    Verifier,
    derive_public_key,
    extract_witness,
    generate_secret,
)
from .errors import (
    ConfigurationError,
    DegenerateGeneratorError,
    InvalidStateError,
    NoOutstandingCommitmentError,
    NotPrimeError,
    OrderMismatchError,
    OutOfRangeError,
    ParamError,
    ProtocolError,
    SchnorrZKError,
    SecretConsumedError,
)
from .group import RFC3526_GROUP_14, TOY_GROUP, GroupParameters, validate_group_parameters
from .proofs import RoundsResult, prove_non_interactive, run_rounds, verify_non_interactive
from .scalars import Nonce, SecretScalar
from .session import ProtocolSession, SessionState
from .transcript import ProofTranscript, decode_element, encode_element

__version__ = "0.1.0"

__all__ = [
    "CHALLENGE_ENCODING_VERSION",
    "CommitmentState",
    "ConfigurationError",
    "DegenerateGeneratorError",
    "GroupParameters",
    "InvalidStateError",
    "NoOutstandingCommitmentError",
    "Nonce",
    "NotPrimeError",
    "OrderMismatchError",
    "OutOfRangeError",
    "ParamError",
    "ProofTranscript",
    "ProtocolError",
    "ProtocolSession",
    "Prover",
    "RFC3526_GROUP_14",
    "RoundsResult",
    "SchnorrZKError",
    "SecretConsumedError",
    "SecretScalar",
    "SessionState",
    "TOY_GROUP",
    "Verifier",
    "decode_element",
    "derive_challenge",
    "derive_public_key",
    "encode_element",
    "extract_witness",
    "generate_secret",
    "prove_non_interactive",
    "run_rounds",
    "validate_group_parameters",
    "verify_non_interactive",
]
