import random

import pytest

from conftest import FakeClock, ScriptedRandom
from toto.exceptions import (
    ArchiveFetchError,
    GenerationIncomplete,
    InsufficientSpace,
    InvalidArgument,
)
from toto.generation.combinations import (
    TOTAL_POSSIBLE_COMBINATIONS,
    canonical_key,
    random_combination,
)
from toto.generation.generator import (
    CombinationGenerator,
    HistoricalCombinationCache,
    build_generator,
)


class CountingFetch:
    def __init__(self, keys=None, error=None):
        self.keys = keys if keys is not None else {"1,2,3,4,5,6"}
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return set(self.keys)


class SaturatedCache:
    """Cache reporting a nearly full archive without holding 14M keys."""

    def __init__(self, free_keys, size=None):
        self.free_keys = set(free_keys)
        self._size = size if size is not None else TOTAL_POSSIBLE_COMBINATIONS - len(self.free_keys)

    def ensure_fresh(self):
        pass

    def contains(self, key):
        return key not in self.free_keys

    def size(self):
        return self._size

    def clear(self):
        pass


def test_cache_refetches_only_after_ttl():
    fetch = CountingFetch()
    clock = FakeClock()
    cache = HistoricalCombinationCache(fetch, ttl_seconds=300, clock=clock)

    cache.ensure_fresh()
    assert fetch.calls == 1

    clock.advance(120)
    cache.ensure_fresh()
    assert fetch.calls == 1

    clock.advance(181)
    cache.ensure_fresh()
    assert fetch.calls == 2

    cache.ensure_fresh()
    assert fetch.calls == 2


def test_cache_refetches_while_empty():
    fetch = CountingFetch(keys=set())
    cache = HistoricalCombinationCache(fetch, clock=FakeClock())

    cache.ensure_fresh()
    cache.ensure_fresh()
    assert fetch.calls == 2


def test_cache_membership_and_size():
    cache = HistoricalCombinationCache(CountingFetch({"1,2,3,4,5,6", "3,7,12,19,28,44"}), clock=FakeClock())
    cache.ensure_fresh()

    assert cache.size() == 2
    assert cache.contains("3,7,12,19,28,44")
    assert not cache.contains("1,2,3,4,5,7")


def test_cache_failed_refresh_keeps_previous_state():
    fetch = CountingFetch()
    clock = FakeClock()
    cache = HistoricalCombinationCache(fetch, ttl_seconds=300, clock=clock)
    cache.ensure_fresh()
    before = cache.stats()

    fetch.error = RuntimeError("connection refused")
    clock.advance(301)
    with pytest.raises(ArchiveFetchError):
        cache.ensure_fresh()

    assert cache.size() == 1
    assert cache.stats()['last_refreshed_at'] == before['last_refreshed_at']


def test_cache_failed_first_refresh_stays_empty():
    cache = HistoricalCombinationCache(CountingFetch(error=RuntimeError("down")), clock=FakeClock())
    with pytest.raises(ArchiveFetchError):
        cache.ensure_fresh()
    assert cache.size() == 0
    assert cache.stats()['last_refreshed_at'] is None


def test_cache_clear_forces_refetch():
    fetch = CountingFetch()
    cache = HistoricalCombinationCache(fetch, clock=FakeClock())
    cache.ensure_fresh()

    cache.clear()
    assert cache.size() == 0
    assert cache.stats() == {'existing_count': 0, 'last_refreshed_at': None, 'age_millis': 0}

    cache.ensure_fresh()
    assert fetch.calls == 2


def test_cache_stats_reports_age():
    clock = FakeClock()
    cache = HistoricalCombinationCache(CountingFetch(), clock=clock)
    cache.ensure_fresh()
    clock.advance(2.5)

    stats = cache.stats()
    assert stats['existing_count'] == 1
    assert stats['age_millis'] == 2500
    assert stats['last_refreshed_at'] is not None


def make_generator(keys=(), **kwargs):
    cache = HistoricalCombinationCache(CountingFetch(set(keys)), clock=FakeClock())
    kwargs.setdefault('rng', random.Random(1234))
    return CombinationGenerator(cache, **kwargs)


def test_generate_unique_avoids_history_and_batch_duplicates():
    rng = random.Random(99)
    history = {canonical_key(random_combination(rng)) for _ in range(500)}
    generator = make_generator(history, rng=random.Random(7))

    result = generator.generate_unique(50)

    keys = [canonical_key(c) for c in result.combinations]
    assert len(keys) == 50
    assert len(set(keys)) == 50
    assert not set(keys) & history
    assert result.total_existing == len(history)
    assert result.remaining_after == TOTAL_POSSIBLE_COMBINATIONS - len(history) - 50
    assert result.attempts >= 50


@pytest.mark.parametrize("count", [0, 51, -1])
def test_generate_unique_rejects_out_of_bounds_count(count):
    with pytest.raises(InvalidArgument) as exc:
        make_generator().generate_unique(count)
    assert "between 1 and 50" in str(exc.value)


@pytest.mark.parametrize("count", ["5", 2.5, None, True])
def test_generate_unique_rejects_non_integer_count(count):
    with pytest.raises(InvalidArgument):
        make_generator().generate_unique(count)


def test_generate_unique_insufficient_space():
    free = {"1,2,3,4,5,6", "1,2,3,4,5,7", "1,2,3,4,5,8"}
    generator = CombinationGenerator(SaturatedCache(free))

    with pytest.raises(InsufficientSpace) as exc:
        generator.generate_unique(5)
    assert exc.value.remaining == 3
    assert exc.value.requested == 5


def test_generate_unique_fills_nearly_saturated_space():
    free = {"1,2,3,4,5,6", "1,2,3,4,5,7", "1,2,3,4,5,8"}
    rng = ScriptedRandom([
        10, 11, 12, 13, 14, 15,  # already drawn
        6, 6, 5, 4, 3, 2, 1,     # free, with a repeated pick
        1, 2, 3, 4, 5, 6,        # duplicate within the batch
        1, 2, 3, 4, 5, 7,        # free
    ])
    generator = CombinationGenerator(SaturatedCache(free), rng=rng)

    result = generator.generate_unique(2)

    assert result.combinations == [[6, 5, 4, 3, 2, 1], [1, 2, 3, 4, 5, 7]]
    assert result.attempts == 4
    assert result.total_existing == TOTAL_POSSIBLE_COMBINATIONS - 3
    assert result.remaining_after == 1


def test_generate_unique_reports_consecutive_failure_bound():
    generator = CombinationGenerator(SaturatedCache(set(), size=10), max_consecutive_failures=5,
                                     rng=random.Random(3))

    with pytest.raises(GenerationIncomplete) as exc:
        generator.generate_unique(1)

    assert exc.value.bound == GenerationIncomplete.CONSECUTIVE_FAILURES
    assert exc.value.attempts == 5
    assert exc.value.generated == 0
    assert exc.value.requested == 1


def test_generate_unique_reports_attempt_bound():
    generator = CombinationGenerator(SaturatedCache(set(), size=10), max_attempts_per_combination=3,
                                     rng=random.Random(3))

    with pytest.raises(GenerationIncomplete) as exc:
        generator.generate_unique(2)

    assert exc.value.bound == GenerationIncomplete.ATTEMPTS
    assert exc.value.attempts == 6
    assert "Hit maximum attempts limit" in str(exc.value)


def test_generate_unique_degrades_when_refresh_fails():
    cache = HistoricalCombinationCache(CountingFetch(error=RuntimeError("db down")), clock=FakeClock())
    generator = CombinationGenerator(cache, rng=random.Random(5))

    result = generator.generate_unique(3)

    assert len(result.combinations) == 3
    assert result.total_existing == 0


def test_generate_unique_can_fail_closed_on_refresh_error():
    cache = HistoricalCombinationCache(CountingFetch(error=RuntimeError("db down")), clock=FakeClock())
    generator = CombinationGenerator(cache, fail_on_refresh_error=True)

    with pytest.raises(ArchiveFetchError):
        generator.generate_unique(3)


def test_generate_single():
    combination = make_generator().generate_single()
    assert len(combination) == 6


def test_is_unique():
    generator = make_generator({"3,7,12,19,28,44"})

    assert not generator.is_unique([44, 3, 28, 7, 19, 12])
    assert not generator.is_unique([44, 3, 28, 7, 19, 12])
    assert generator.is_unique([1, 2, 3, 4, 5, 6])
    assert generator.cache.size() == 1


def test_is_unique_rejects_invalid_numbers():
    with pytest.raises(InvalidArgument):
        make_generator().is_unique([1, 2, 3])


def test_remaining_count():
    generator = make_generator({"1,2,3,4,5,6", "3,7,12,19,28,44"})
    assert generator.remaining_count() == TOTAL_POSSIBLE_COMBINATIONS - 2


def test_generation_does_not_grow_the_cache():
    generator = make_generator({"1,2,3,4,5,6"})
    generator.generate_unique(10)
    generator.generate_unique(10)
    assert generator.cache.size() == 1


def test_build_generator_reads_archive(seeded_store):
    generator = build_generator(lambda: seeded_store)

    assert not generator.is_unique([1, 2, 3, 4, 5, 6])
    assert generator.remaining_count() == TOTAL_POSSIBLE_COMBINATIONS - 3
