"""Command line front end for the Schnorr proof-of-knowledge engine."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict

from schnorrzk.config import get_settings, load_group_parameters
from schnorrzk.crypto import Prover, Verifier, derive_public_key, generate_secret
from schnorrzk.errors import SchnorrZKError
from schnorrzk.group import GroupParameters
from schnorrzk.logging_config import setup_logging
from schnorrzk.proofs import prove_non_interactive, run_rounds, verify_non_interactive
from schnorrzk.transcript import ProofTranscript


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("params", help="Validate and print the configured group parameters")
    subparsers.add_parser("keygen", help="Generate a fresh secret and public key")

    prove_parser = subparsers.add_parser("prove", help="Prove knowledge of a secret")
    prove_parser.add_argument("secret", help="Hex-encoded secret exponent")
    prove_parser.add_argument(
        "--rounds",
        type=int,
        help="Number of interactive rounds (default: SCHNORR_ROUNDS)",
    )
    prove_parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Produce a Fiat-Shamir proof instead of running interactive rounds",
    )
    prove_parser.add_argument(
        "--context",
        default="",
        help="Context string bound into a non-interactive proof",
    )
    prove_parser.add_argument(
        "--output",
        help="Optional file path to store the non-interactive transcript JSON",
    )

    verify_parser = subparsers.add_parser("verify", help="Verify a non-interactive proof")
    verify_parser.add_argument("transcript", help="Path to the transcript JSON data")
    verify_parser.add_argument(
        "--public-key",
        required=True,
        help="Hex-encoded public key of the prover",
    )
    verify_parser.add_argument(
        "--context",
        default="",
        help="Context string the proof was bound to",
    )

    return parser.parse_args(argv)


def render_parameters(params: GroupParameters) -> Dict[str, object]:
    return {
        **params.to_dict(),
        "p_bits": params.p.bit_length(),
        "q_bits": params.q.bit_length(),
        "fingerprint": params.fingerprint,
    }


def main(argv: list[str] | None = None) -> int:
    namespace = parse_args(argv if argv is not None else sys.argv[1:])
    settings = get_settings()
    setup_logging(settings)

    try:
        params = load_group_parameters(settings)
    except SchnorrZKError as exc:
        print(f"Invalid group parameters: {exc.message}", file=sys.stderr)
        return 1

    if namespace.command == "params":
        print(json.dumps(render_parameters(params), indent=2))
        return 0

    if namespace.command == "keygen":
        secret = generate_secret(params)
        payload = {
            "public_key": hex(derive_public_key(params, secret)),
            "secret": hex(secret),
        }
        print(json.dumps(payload, indent=2))
        return 0

    if namespace.command == "prove":
        try:
            prover = Prover(
                params,
                int(namespace.secret, 16),
                normalize=settings.allow_secret_normalization,
            )
        except ValueError:
            print("Secret must be hex encoded", file=sys.stderr)
            return 1
        except SchnorrZKError as exc:
            print(f"Invalid secret: {exc.message}", file=sys.stderr)
            return 1

        rounds = settings.rounds if namespace.rounds is None else namespace.rounds
        if rounds < 1:
            print("At least one round is required", file=sys.stderr)
            return 1

        with prover:
            if namespace.non_interactive:
                transcript = prove_non_interactive(prover, context=namespace.context)
                verifier = Verifier(params, prover.public_key)
                payload = {
                    "public_key": hex(prover.public_key),
                    "context": namespace.context,
                    "transcript": transcript.to_dict(),
                    "accepted": verify_non_interactive(verifier, transcript, context=namespace.context),
                }
                if namespace.output:
                    Path(namespace.output).write_text(
                        json.dumps(transcript.to_dict(), indent=2), encoding="utf-8"
                    )
            else:
                verifier = Verifier(params, prover.public_key)
                result = run_rounds(prover, verifier, rounds)
                payload = {"public_key": hex(prover.public_key), **result.to_dict()}
                payload["accepted"] = payload.pop("success")
        print(json.dumps(payload, indent=2))
        return 0 if payload["accepted"] else 2

    if namespace.command == "verify":
        try:
            transcript_payload = json.loads(Path(namespace.transcript).read_text(encoding="utf-8"))
        except OSError as exc:
            print(f"Cannot read transcript: {exc.strerror}", file=sys.stderr)
            return 1
        except json.JSONDecodeError:
            print("Transcript file is not valid JSON", file=sys.stderr)
            return 1
        if not isinstance(transcript_payload, dict):
            print("Transcript file must contain a JSON object", file=sys.stderr)
            return 1
        if "transcript" in transcript_payload:
            transcript_payload = transcript_payload["transcript"]
        try:
            transcript = ProofTranscript.from_dict(transcript_payload)
            verifier = Verifier(params, int(namespace.public_key, 16))
        except ValueError:
            print("Public key must be hex encoded", file=sys.stderr)
            return 1
        except SchnorrZKError as exc:
            print(f"Invalid input: {exc.message}", file=sys.stderr)
            return 1
        accepted = verify_non_interactive(verifier, transcript, context=namespace.context)
        print(json.dumps({"accepted": accepted}, indent=2))
        return 0 if accepted else 2

    raise RuntimeError("Unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
