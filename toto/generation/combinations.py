"""
Toto combination helpers.

A combination is an unordered set of 6 distinct numbers in 1-49. Its identity
is the canonical key: the numbers sorted ascending and joined with commas,
e.g. "3,7,12,19,28,44".
"""
import random
from typing import Iterable, List, Optional

MIN_NUMBER = 1
MAX_NUMBER = 49
WINNING_NUMBERS_COUNT = 6
MAX_COMBINATIONS_PER_REQUEST = 50
TOTAL_POSSIBLE_COMBINATIONS = 13983816  # C(49, 6)

KEY_DELIMITER = ','


def validate(numbers) -> bool:
    """Return True if `numbers` is exactly 6 distinct integers within 1-49."""
    try:
        values = list(numbers)
    except TypeError:
        return False

    if len(values) != WINNING_NUMBERS_COUNT:
        return False

    # bool is an int subclass but never a lottery number
    if any(isinstance(n, bool) or not isinstance(n, int) for n in values):
        return False

    if len(set(values)) != WINNING_NUMBERS_COUNT:
        return False

    return all(MIN_NUMBER <= n <= MAX_NUMBER for n in values)


def canonical_key(numbers: Iterable[int]) -> str:
    """Build the order-independent key for a combination.

    The input is not validated; callers check `validate` first when it matters.
    """
    return KEY_DELIMITER.join(str(n) for n in sorted(numbers))


def parse_key(key: str) -> List[int]:
    """Split a canonical key back into its numbers."""
    return [int(part) for part in key.split(KEY_DELIMITER) if part.strip()]


def is_valid_key(key: str) -> bool:
    """A key is valid when it holds 6 strictly increasing numbers within range."""
    try:
        numbers = parse_key(key)
    except ValueError:
        return False
    if not validate(numbers):
        return False
    return all(a < b for a, b in zip(numbers, numbers[1:]))


def random_combination(rng: Optional[random.Random] = None) -> List[int]:
    """Draw 6 distinct numbers from 1-49, returned in draw order.

    Args:
        rng: Object with a `randint(a, b)` method; defaults to the `random` module

    Returns:
        List of 6 unique numbers (unsorted)
    """
    source = rng or random
    picked = []
    seen = set()
    while len(picked) < WINNING_NUMBERS_COUNT:
        n = source.randint(MIN_NUMBER, MAX_NUMBER)
        if n not in seen:
            seen.add(n)
            picked.append(n)
    return picked


def format_combination(numbers: Iterable[int]) -> str:
    """Format numbers for display, e.g. "1, 6, 9, 11, 29, 36"."""
    return ', '.join(str(n) for n in sorted(numbers))


def calculate_coverage(existing_combinations: int) -> float:
    """Percentage of all possible combinations already drawn."""
    return (existing_combinations / TOTAL_POSSIBLE_COMBINATIONS) * 100
