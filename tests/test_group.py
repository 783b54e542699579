import unittest

from schnorrzk.errors import (
    DegenerateGeneratorError,
    NotPrimeError,
    OrderMismatchError,
    ParamError,
)
from schnorrzk.group import RFC3526_GROUP_14, TOY_GROUP, GroupParameters, validate_group_parameters


class TestGroupValidation(unittest.TestCase):
    def test_toy_group_is_valid(self) -> None:
        params = GroupParameters.validate(*TOY_GROUP)
        self.assertEqual((params.p, params.q, params.g), (23, 11, 4))
        self.assertEqual(params.element_length, 1)
        self.assertEqual(params.scalar_length, 1)

    def test_rfc3526_group_is_valid(self) -> None:
        params = validate_group_parameters(*RFC3526_GROUP_14)
        self.assertEqual(params.p.bit_length(), 2048)
        self.assertEqual(params.element_length, 256)
        self.assertEqual(pow(params.g, params.q, params.p), 1)

    def test_composite_modulus_rejected(self) -> None:
        with self.assertRaises(NotPrimeError) as ctx:
            GroupParameters.validate(25, 11, 4)
        self.assertEqual(ctx.exception.name, "p")

    def test_composite_order_rejected(self) -> None:
        with self.assertRaises(NotPrimeError) as ctx:
            GroupParameters.validate(23, 12, 4)
        self.assertEqual(ctx.exception.name, "q")

    def test_order_not_dividing_p_minus_one_rejected(self) -> None:
        with self.assertRaises(OrderMismatchError):
            GroupParameters.validate(23, 7, 4)

    def test_generator_outside_subgroup_rejected(self) -> None:
        # 5 is a non-residue mod 23, so 5^11 == -1.
        with self.assertRaises(OrderMismatchError):
            GroupParameters.validate(23, 11, 5)
        # 22 has order 2.
        with self.assertRaises(OrderMismatchError):
            GroupParameters.validate(23, 11, 22)

    def test_identity_and_out_of_range_generators_rejected(self) -> None:
        for g in (0, 1, 23, 24, -4):
            with self.subTest(g=g):
                with self.assertRaises(DegenerateGeneratorError):
                    GroupParameters.validate(23, 11, g)

    def test_non_integer_rejected(self) -> None:
        with self.assertRaises(ParamError):
            GroupParameters.validate(23.0, 11, 4)  # type: ignore[arg-type]
        with self.assertRaises(ParamError):
            GroupParameters.validate(23, True, 4)  # type: ignore[arg-type]

    def test_membership_helpers(self) -> None:
        params = GroupParameters.validate(*TOY_GROUP)
        self.assertTrue(params.contains(2))
        self.assertFalse(params.contains(5))
        self.assertFalse(params.contains(0))
        self.assertFalse(params.contains(23))
        self.assertTrue(params.is_scalar(0))
        self.assertFalse(params.is_scalar(11))
        self.assertFalse(params.is_element(0))

    def test_dict_round_trip_is_exact(self) -> None:
        params = GroupParameters.validate(*RFC3526_GROUP_14)
        restored = GroupParameters.from_dict(params.to_dict())
        self.assertEqual(restored, params)
        self.assertEqual(restored.fingerprint, params.fingerprint)

    def test_from_dict_requires_all_fields(self) -> None:
        with self.assertRaises(ParamError):
            GroupParameters.from_dict({"p": "23", "q": "11"})

    def test_parameters_are_immutable(self) -> None:
        params = GroupParameters.validate(*TOY_GROUP)
        with self.assertRaises(AttributeError):
            params.g = 2  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
