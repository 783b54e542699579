import copy
import pickle
import secrets
import threading
import unittest

from schnorrzk.crypto import Prover, Verifier, derive_public_key, extract_witness, generate_secret
from schnorrzk.errors import (
    NoOutstandingCommitmentError,
    OutOfRangeError,
    ProtocolError,
    SecretConsumedError,
)
from schnorrzk.group import RFC3526_GROUP_14, GroupParameters
from schnorrzk.scalars import Nonce, SecretScalar

from .helpers import fixed, small_params, toy_params


class TestProverConstruction(unittest.TestCase):
    def test_public_key_derived_once(self) -> None:
        prover = Prover(toy_params(), 6)
        self.assertEqual(prover.public_key, 2)
        self.assertEqual(derive_public_key(toy_params(), 6), 2)

    def test_non_canonical_secret_rejected_by_default(self) -> None:
        params = toy_params()
        for secret in (0, 11, 17, -3):
            with self.subTest(secret=secret):
                with self.assertRaises(OutOfRangeError):
                    Prover(params, secret)

    def test_normalization_is_opt_in_and_logged(self) -> None:
        params = toy_params()
        with self.assertLogs("schnorrzk.crypto", level="WARNING") as logs:
            prover = Prover(params, 17, normalize=True)
        self.assertEqual(prover.public_key, pow(4, 6, 23))
        self.assertNotIn("17", "\n".join(logs.output))
        with self.assertRaises(OutOfRangeError):
            Prover(params, 22, normalize=True)

    def test_repr_shows_only_public_key(self) -> None:
        prover = Prover(small_params(), 777)
        self.assertEqual(repr(prover), f"Prover(public_key={prover.public_key:#x})")

    def test_generate_secret_in_range(self) -> None:
        params = toy_params()
        for _ in range(50):
            self.assertTrue(0 < generate_secret(params) < params.q)


class TestCommitRespond(unittest.TestCase):
    def test_commitment_uses_captured_nonce(self) -> None:
        prover = Prover(toy_params(), 6, randbelow=fixed(7))
        state, commitment = prover.commit()
        self.assertEqual(commitment, pow(4, 7, 23))
        self.assertEqual(state.commitment, commitment)
        self.assertEqual(prover.respond(state, 3), (7 + 3 * 6) % 11)

    def test_response_consumes_nonce(self) -> None:
        prover = Prover(toy_params(), 6)
        state, _ = prover.commit()
        prover.respond(state, 1)
        self.assertTrue(state.consumed)
        self.assertFalse(prover.has_outstanding_commitment)
        with self.assertRaises(NoOutstandingCommitmentError):
            prover.respond(state, 2)

    def test_respond_without_commit(self) -> None:
        prover = Prover(toy_params(), 6)
        with self.assertRaises(NoOutstandingCommitmentError):
            prover.respond(None, 1)  # type: ignore[arg-type]

    def test_second_commit_invalidates_first(self) -> None:
        prover = Prover(toy_params(), 6)
        first, _ = prover.commit()
        second, _ = prover.commit()
        self.assertTrue(first.consumed)
        with self.assertRaises(NoOutstandingCommitmentError):
            prover.respond(first, 1)
        prover.respond(second, 1)

    def test_state_from_other_prover_rejected(self) -> None:
        params = toy_params()
        alice = Prover(params, 6)
        bob = Prover(params, 3)
        state, _ = alice.commit()
        bob.commit()
        with self.assertRaises(NoOutstandingCommitmentError):
            bob.respond(state, 1)

    def test_out_of_range_challenge_rejected_without_consuming(self) -> None:
        prover = Prover(toy_params(), 6)
        state, _ = prover.commit()
        for challenge in (11, 12, -1):
            with self.subTest(challenge=challenge):
                with self.assertRaises(OutOfRangeError):
                    prover.respond(state, challenge)
        self.assertFalse(state.consumed)
        prover.respond(state, 10)

    def test_discard_wipes_nonce(self) -> None:
        prover = Prover(toy_params(), 6)
        state, _ = prover.commit()
        prover.discard()
        self.assertTrue(state.consumed)
        with self.assertRaises(NoOutstandingCommitmentError):
            prover.respond(state, 1)

    def test_closed_prover_cannot_respond(self) -> None:
        with Prover(toy_params(), 6) as prover:
            state, _ = prover.commit()
        self.assertTrue(state.consumed)

    def test_bad_nonce_source_rejected(self) -> None:
        prover = Prover(toy_params(), 6, randbelow=fixed(11))
        with self.assertRaises(ProtocolError):
            prover.commit()


class TestVerifier(unittest.TestCase):
    def test_public_key_must_be_in_subgroup(self) -> None:
        params = toy_params()
        for public_key in (0, 23, 5, 22):
            with self.subTest(public_key=public_key):
                with self.assertRaises(OutOfRangeError):
                    Verifier(params, public_key)

    def test_completeness(self) -> None:
        params = small_params()
        for _ in range(25):
            secret = generate_secret(params)
            prover = Prover(params, secret)
            verifier = Verifier(params, prover.public_key)
            state, commitment = prover.commit()
            challenge = verifier.challenge(commitment)
            response = prover.respond(state, challenge)
            self.assertTrue(verifier.verify(commitment, challenge, response))

    def test_completeness_large_group(self) -> None:
        params = GroupParameters.validate(*RFC3526_GROUP_14)
        prover = Prover(params, generate_secret(params))
        verifier = Verifier(params, prover.public_key)
        state, commitment = prover.commit()
        challenge = verifier.challenge(commitment)
        self.assertTrue(verifier.verify(commitment, challenge, prover.respond(state, challenge)))

    def test_tampered_response_rejected(self) -> None:
        params = small_params()
        prover = Prover(params, 321)
        verifier = Verifier(params, prover.public_key)
        for _ in range(50):
            state, commitment = prover.commit()
            challenge = verifier.challenge(commitment)
            response = prover.respond(state, challenge)
            forged = (response + 1) % params.q
            self.assertFalse(verifier.verify(commitment, challenge, forged))

    def test_wrong_public_key_rejected(self) -> None:
        params = small_params()
        prover = Prover(params, 321)
        other = Verifier(params, derive_public_key(params, 322))
        state, commitment = prover.commit()
        challenge = secrets.randbelow(params.q - 1) + 1
        self.assertFalse(other.verify(commitment, challenge, prover.respond(state, challenge)))

    def test_verify_accepts_explicit_public_key(self) -> None:
        params = toy_params()
        prover = Prover(params, 6, randbelow=fixed(4))
        verifier = Verifier(params, derive_public_key(params, 3))
        state, commitment = prover.commit()
        response = prover.respond(state, 5)
        self.assertFalse(verifier.verify(commitment, 5, response))
        self.assertTrue(verifier.verify(commitment, 5, response, 2))

    def test_out_of_range_values_raise(self) -> None:
        params = toy_params()
        verifier = Verifier(params, 2)
        cases = [
            ("challenge", (8, 11, 0)),
            ("challenge", (8, -1, 0)),
            ("response", (8, 0, 11)),
            ("response", (8, 0, 40)),
            ("commitment", (0, 0, 0)),
            ("commitment", (8 + 23, 0, 0)),
        ]
        for field, args in cases:
            with self.subTest(field=field, args=args):
                with self.assertRaises(OutOfRangeError) as ctx:
                    verifier.verify(*args)
                self.assertEqual(ctx.exception.field, field)

    def test_interactive_challenge_uses_randomness_source(self) -> None:
        verifier = Verifier(toy_params(), 2, randbelow=fixed(9))
        self.assertEqual(verifier.challenge(8), 9)
        with self.assertRaises(OutOfRangeError):
            verifier.challenge(0)


class TestSoundness(unittest.TestCase):
    def test_nonce_reuse_reveals_secret(self) -> None:
        params = small_params()
        secret = 777
        # Two provers fed the same nonce stand in for a prover that reuses r.
        first = Prover(params, secret, randbelow=fixed(123))
        second = Prover(params, secret, randbelow=fixed(123))
        state1, t1 = first.commit()
        state2, t2 = second.commit()
        self.assertEqual(t1, t2)
        s1 = first.respond(state1, 10)
        s2 = second.respond(state2, 99)
        self.assertEqual(extract_witness(params, (10, s1), (99, s2)), secret)

    def test_extractor_requires_distinct_challenges(self) -> None:
        with self.assertRaises(ProtocolError):
            extract_witness(toy_params(), (3, 4), (3, 5))


class TestConcurrency(unittest.TestCase):
    def test_independent_sessions_in_parallel(self) -> None:
        params = small_params()
        results = []
        lock = threading.Lock()

        def worker(secret: int) -> None:
            prover = Prover(params, secret)
            verifier = Verifier(params, prover.public_key)
            for _ in range(10):
                state, commitment = prover.commit()
                challenge = verifier.challenge(commitment)
                ok = verifier.verify(commitment, challenge, prover.respond(state, challenge))
                with lock:
                    results.append(ok)

        threads = [threading.Thread(target=worker, args=(secret,)) for secret in range(1, 9)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(len(results), 80)
        self.assertTrue(all(results))

    def test_shared_prover_never_reuses_a_nonce(self) -> None:
        params = GroupParameters.validate(*RFC3526_GROUP_14)
        prover = Prover(params, generate_secret(params))
        verifier = Verifier(params, prover.public_key)
        accepted = []
        superseded = []
        failures = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(25):
                state, commitment = prover.commit()
                challenge = secrets.randbelow(params.q)
                try:
                    response = prover.respond(state, challenge)
                except NoOutstandingCommitmentError:
                    with lock:
                        superseded.append(commitment)
                    continue
                ok = verifier.verify(commitment, challenge, response)
                with lock:
                    (accepted if ok else failures).append(commitment)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(len(accepted) + len(superseded), 200)
        self.assertGreater(len(accepted), 0)
        # Every answered commitment used its own nonce.
        self.assertEqual(len(set(accepted)), len(accepted))


class TestSecretScalars(unittest.TestCase):
    def test_secret_is_redacted(self) -> None:
        scalar = SecretScalar(424242)
        self.assertNotIn("424242", repr(scalar))
        self.assertNotIn("424242", str(scalar))

    def test_secret_cannot_be_copied_or_pickled(self) -> None:
        scalar = SecretScalar(5)
        with self.assertRaises(TypeError):
            copy.copy(scalar)
        with self.assertRaises(TypeError):
            copy.deepcopy(scalar)
        with self.assertRaises(TypeError):
            pickle.dumps(scalar)

    def test_nonce_is_single_use(self) -> None:
        nonce = Nonce(9)
        self.assertEqual(nonce.consume(), 9)
        self.assertTrue(nonce.wiped)
        with self.assertRaises(SecretConsumedError):
            nonce.consume()

    def test_context_manager_wipes(self) -> None:
        with SecretScalar(3) as scalar:
            self.assertEqual(scalar.value, 3)
        with self.assertRaises(SecretConsumedError):
            _ = scalar.value


if __name__ == "__main__":
    unittest.main()
