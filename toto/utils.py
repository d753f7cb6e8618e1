"""Small parsing and retry helpers shared by the ingestion code."""
import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def parse_integer(value: Optional[str]) -> int:
    """Parse an integer from a string, treating blanks and junk as 0."""
    if value is None or str(value).strip() == '':
        return 0
    try:
        return int(str(value).strip().replace(',', ''))
    except ValueError:
        return 0


def parse_prize(value: Optional[str]) -> float:
    """Parse a prize amount such as "1,234,567.00"; blanks are 0."""
    if value is None or str(value).strip() in ('', '0.00', '-'):
        return 0.0
    try:
        return float(str(value).replace(',', '').replace('$', '').strip())
    except ValueError:
        return 0.0


def retry(fn: Callable[[], T], max_attempts: int = 3, base_delay: float = 1.0,
          exceptions: Tuple[Type[BaseException], ...] = (Exception,),
          sleep: Callable[[float], None] = time.sleep) -> T:
    """Call `fn` until it succeeds, backing off exponentially between attempts.

    The last exception is re-raised once `max_attempts` is exhausted.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return fn()
        except exceptions as e:
            logger.warning(f"Attempt {attempt} failed: {e}")
            if attempt == max_attempts:
                raise
            sleep(base_delay * 2 ** (attempt - 1))
