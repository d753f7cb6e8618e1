import itertools
import random

from toto.generation.combinations import (
    MAX_NUMBER,
    MIN_NUMBER,
    TOTAL_POSSIBLE_COMBINATIONS,
    WINNING_NUMBERS_COUNT,
    calculate_coverage,
    canonical_key,
    format_combination,
    is_valid_key,
    parse_key,
    random_combination,
    validate,
)


def test_policy_constants():
    assert MIN_NUMBER == 1
    assert MAX_NUMBER == 49
    assert WINNING_NUMBERS_COUNT == 6
    assert TOTAL_POSSIBLE_COMBINATIONS == 13983816


def test_canonical_key_is_order_independent():
    assert canonical_key([44, 3, 28, 7, 19, 12]) == "3,7,12,19,28,44"
    assert canonical_key([3, 7, 12, 19, 28, 44]) == "3,7,12,19,28,44"


def test_canonical_key_same_for_all_permutations():
    numbers = [5, 17, 23, 31, 38, 46]
    keys = {canonical_key(p) for p in itertools.permutations(numbers)}
    assert keys == {"5,17,23,31,38,46"}


def test_canonical_key_sorts_numerically():
    assert canonical_key([10, 9, 2, 1, 40, 4]) == "1,2,4,9,10,40"


def test_validate():
    assert validate([1, 2, 3, 4, 5, 6])
    assert not validate([1, 2, 3, 4, 5, 5])
    assert not validate([0, 2, 3, 4, 5, 6])
    assert not validate([1, 2, 3, 4, 5, 50])
    assert not validate([1, 2, 3, 4, 5])
    assert not validate([1, 2, 3, 4, 5, 6, 7])


def test_validate_rejects_non_integers():
    assert not validate([1, 2, 3, 4, 5, "6"])
    assert not validate([1, 2, 3, 4, 5, 6.0])
    assert not validate([True, 2, 3, 4, 5, 6])
    assert not validate(None)


def test_parse_key_round_trips_numbers():
    assert parse_key("3,7,12,19,28,44") == [3, 7, 12, 19, 28, 44]


def test_is_valid_key():
    assert is_valid_key("1,2,3,4,5,6")
    assert not is_valid_key("2,1,3,4,5,6")
    assert not is_valid_key("1,2,3,4,5")
    assert not is_valid_key("1,2,3,4,5,x")


def test_random_combination_is_valid():
    rng = random.Random(42)
    for _ in range(200):
        assert validate(random_combination(rng))


def test_random_combination_skips_repeated_draws():
    class Scripted:
        values = iter([5, 5, 9, 1, 9, 30, 2, 49])

        def randint(self, a, b):
            return next(self.values)

    assert random_combination(Scripted()) == [5, 9, 1, 30, 2, 49]


def test_format_combination():
    assert format_combination([36, 1, 29, 6, 11, 9]) == "1, 6, 9, 11, 29, 36"


def test_calculate_coverage():
    assert calculate_coverage(0) == 0
    assert calculate_coverage(TOTAL_POSSIBLE_COMBINATIONS) == 100
