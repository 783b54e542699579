from schnorrzk.group import GroupParameters, TOY_GROUP

# q = 1019 and p = 2q + 1 = 2039 are both prime; 4 generates the order-q subgroup.
SMALL_GROUP = (2039, 1019, 4)


def toy_params() -> GroupParameters:
    return GroupParameters.validate(*TOY_GROUP)


def small_params() -> GroupParameters:
    return GroupParameters.validate(*SMALL_GROUP)


def fixed(value: int):
    """Randomness source that always returns ``value``."""

    def randbelow(bound: int) -> int:
        return value

    return randbelow
