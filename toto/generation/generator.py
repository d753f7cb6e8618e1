"""
Unique Toto combination generator.

Generates combinations that have never been drawn, using rejection sampling
against a TTL-cached set of historical combination keys.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

from toto.config import Config
from toto.exceptions import (
    ArchiveFetchError,
    GenerationIncomplete,
    InsufficientSpace,
    InvalidArgument,
)
from toto.generation import combinations as codec
from toto.generation.combinations import (
    MAX_COMBINATIONS_PER_REQUEST,
    TOTAL_POSSIBLE_COMBINATIONS,
)

logger = logging.getLogger(__name__)


class HistoricalCombinationCache:
    """In-memory set of historical combination keys, refreshed on a TTL.

    Args:
        fetch_keys: Callable returning the full set of historical keys. It may
            raise; anything it raises is reported as ArchiveFetchError.
        ttl_seconds: How long a loaded key set stays fresh
        clock: Callable returning the current time in seconds
    """

    def __init__(self, fetch_keys: Callable[[], Set[str]],
                 ttl_seconds: float = Config.CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        self._fetch_keys = fetch_keys
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._keys: Set[str] = set()
        self._last_refreshed_at: Optional[float] = None

    def is_stale(self) -> bool:
        if not self._keys or self._last_refreshed_at is None:
            return True
        return (self._clock() - self._last_refreshed_at) > self.ttl_seconds

    def ensure_fresh(self) -> None:
        """Reload the key set from the archive if it is empty or past its TTL.

        Raises:
            ArchiveFetchError: if the archive could not be read. The previous
                keys and timestamp are kept as they were.
        """
        if not self.is_stale():
            return

        try:
            keys = set(self._fetch_keys())
        except ArchiveFetchError:
            raise
        except Exception as e:
            raise ArchiveFetchError(f"Failed to load existing combinations: {e}") from e

        now = self._clock()
        self._keys, self._last_refreshed_at = keys, now
        logger.info(f"Loaded {len(keys)} existing combinations")

    def contains(self, key: str) -> bool:
        return key in self._keys

    def size(self) -> int:
        return len(self._keys)

    def clear(self) -> None:
        """Drop all keys so the next ensure_fresh() reloads from the archive."""
        self._keys, self._last_refreshed_at = set(), None

    def stats(self) -> Dict[str, Any]:
        last = self._last_refreshed_at
        return {
            'existing_count': len(self._keys),
            'last_refreshed_at': datetime.fromtimestamp(last) if last is not None else None,
            'age_millis': int((self._clock() - last) * 1000) if last is not None else 0,
        }


@dataclass
class GenerationResult:
    """Outcome of a successful generate_unique() call."""
    combinations: List[List[int]] = field(default_factory=list)
    attempts: int = 0
    processing_time_ms: int = 0
    total_existing: int = 0
    remaining_after: int = 0


class CombinationGenerator:
    """Generate Toto combinations that appear neither in history nor in the batch.

    One instance is meant to be built per process and shared by its callers,
    so that the historical cache is loaded once and reused until stale.
    """

    def __init__(self, cache: HistoricalCombinationCache,
                 max_per_request: int = MAX_COMBINATIONS_PER_REQUEST,
                 max_attempts_per_combination: int = Config.MAX_ATTEMPTS_PER_COMBINATION,
                 max_consecutive_failures: int = Config.MAX_CONSECUTIVE_FAILURES,
                 fail_on_refresh_error: bool = Config.FAIL_ON_CACHE_REFRESH_ERROR,
                 rng=None,
                 clock: Callable[[], float] = time.monotonic):
        self.cache = cache
        self.max_per_request = max_per_request
        self.max_attempts_per_combination = max_attempts_per_combination
        self.max_consecutive_failures = max_consecutive_failures
        self.fail_on_refresh_error = fail_on_refresh_error
        self.rng = rng
        self._clock = clock

    def _refresh_cache(self) -> None:
        try:
            self.cache.ensure_fresh()
        except ArchiveFetchError as e:
            if self.fail_on_refresh_error:
                raise
            logger.warning(f"{e}; continuing with {self.cache.size()} cached combinations")

    def generate_unique(self, count: int) -> GenerationResult:
        """Generate `count` combinations never seen in the archive or in this batch.

        Args:
            count: Number of combinations to generate (1 to max_per_request)

        Returns:
            GenerationResult with the combinations in the order they were drawn

        Raises:
            InvalidArgument: if count is not an integer within bounds
            InsufficientSpace: if fewer unused combinations remain than requested
            GenerationIncomplete: if a sampling bound was hit first
            ArchiveFetchError: only when fail_on_refresh_error is set
        """
        start = self._clock()

        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgument("Count is required and must be a number")
        if count < 1 or count > self.max_per_request:
            raise InvalidArgument(f"Count must be between 1 and {self.max_per_request}")

        self._refresh_cache()

        total_existing = self.cache.size()
        remaining_possible = TOTAL_POSSIBLE_COMBINATIONS - total_existing
        if remaining_possible < count:
            raise InsufficientSpace(remaining_possible, count)

        logger.info(f"Generating {count} combinations. Existing: {total_existing}, Remaining: {remaining_possible}")

        batch_keys: Set[str] = set()
        results: List[List[int]] = []
        attempts = 0
        consecutive_failures = 0
        max_attempts = count * self.max_attempts_per_combination

        while (len(results) < count and attempts < max_attempts
               and consecutive_failures < self.max_consecutive_failures):
            combination = codec.random_combination(self.rng)
            key = codec.canonical_key(combination)

            if not self.cache.contains(key) and key not in batch_keys:
                batch_keys.add(key)
                results.append(combination)
                consecutive_failures = 0
            else:
                consecutive_failures += 1

            attempts += 1

        processing_time_ms = int((self._clock() - start) * 1000)
        logger.info(f"Generation completed: {len(results)}/{count} combinations in {attempts} attempts ({processing_time_ms}ms)")

        if len(results) < count:
            if consecutive_failures >= self.max_consecutive_failures:
                bound = GenerationIncomplete.CONSECUTIVE_FAILURES
            else:
                bound = GenerationIncomplete.ATTEMPTS
            raise GenerationIncomplete(len(results), count, attempts, bound)

        return GenerationResult(
            combinations=results,
            attempts=attempts,
            processing_time_ms=processing_time_ms,
            total_existing=total_existing,
            remaining_after=remaining_possible - len(results),
        )

    def generate_single(self) -> List[int]:
        """Generate one unique combination."""
        return self.generate_unique(1).combinations[0]

    def is_unique(self, numbers) -> bool:
        """Check whether a combination has never been drawn.

        Raises:
            InvalidArgument: if numbers is not a valid combination
        """
        if not codec.validate(numbers):
            raise InvalidArgument("Invalid combination. Must be 6 unique numbers between 1-49.")
        self._refresh_cache()
        return not self.cache.contains(codec.canonical_key(numbers))

    def remaining_count(self) -> int:
        """Number of combinations that have never been drawn."""
        self._refresh_cache()
        return TOTAL_POSSIBLE_COMBINATIONS - self.cache.size()


def build_generator(store_factory=None, **kwargs) -> CombinationGenerator:
    """Wire a generator whose cache reads from the archive store.

    Args:
        store_factory: Callable returning a context-managed ArchiveStore;
            defaults to ArchiveStore on the application session
        **kwargs: Passed through to CombinationGenerator
    """
    if store_factory is None:
        from toto.data_collection.archive_store import ArchiveStore
        store_factory = ArchiveStore

    def fetch_keys() -> Set[str]:
        with store_factory() as store:
            return store.fetch_all_historical_combination_keys()

    return CombinationGenerator(HistoricalCombinationCache(fetch_keys), **kwargs)
