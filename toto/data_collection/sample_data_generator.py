"""
Toto sample data generator.

This script generates a synthetic Toto draw history and adds it to the database,
for trying out the generator and statistics without scraping.
"""
import logging
import random
from datetime import date, timedelta
from typing import Dict, Any, List, Optional
from sqlalchemy.orm import Session

from toto.data_collection.processor import DataProcessor
from toto.generation.combinations import MIN_NUMBER, MAX_NUMBER, WINNING_NUMBERS_COUNT

logger = logging.getLogger(__name__)

FIRST_DRAW_NUMBER = 1000
FIRST_DRAW_DATE = date(1997, 1, 2)

def generate_random_draw(draw_number: int, draw_date: date, rng=random) -> Dict[str, Any]:
    """Generate a random Toto draw for a given date.

    Args:
        draw_number: The draw number
        draw_date: The date for the draw
        rng: Random source

    Returns:
        Dictionary with draw data
    """
    # 6 winning numbers plus the additional number, all distinct
    picked = rng.sample(range(MIN_NUMBER, MAX_NUMBER + 1), WINNING_NUMBERS_COUNT + 1)
    winning = sorted(picked[:WINNING_NUMBERS_COUNT])

    draw = {
        'draw_number': draw_number,
        'draw_date': draw_date,
        'additional_number': picked[-1],
        'low_numbers': sum(1 for n in winning if n <= 24),
        'high_numbers': sum(1 for n in winning if n > 24),
        'odd_numbers': sum(1 for n in winning if n % 2),
        'even_numbers': sum(1 for n in winning if n % 2 == 0),
    }
    for i, n in enumerate(winning, start=1):
        draw[f'winning_number_{i}'] = n
    return draw

def generate_draws(count: int, start_date: date = FIRST_DRAW_DATE, rng=random) -> List[Dict[str, Any]]:
    """Generate `count` consecutive draws on Mondays and Thursdays."""
    draws = []
    current_date = start_date
    while len(draws) < count:
        if current_date.weekday() in (0, 3):  # 0=Monday, 3=Thursday
            draws.append(generate_random_draw(FIRST_DRAW_NUMBER + len(draws), current_date, rng))
        current_date += timedelta(days=1)
    return draws

def generate_sample_data(count: int = 2000, db: Optional[Session] = None) -> int:
    """Generate sample Toto data and add it to the database.

    Returns:
        Number of draws added to the database
    """
    logger.info(f"Generating {count} sample Toto draws...")

    with DataProcessor(db) as processor:
        summary = processor.process_draws(generate_draws(count))
        total_draws = processor.store.fetch_draw_count()

    logger.info(f"Sample data generation completed. Added {summary['imported_count']} draws.")
    logger.info(f"Database now contains {total_draws} draws in total.")

    # Print a summary to the console as well
    print(f"\nSample data generation completed!")
    print(f"- Added {summary['imported_count']} new draws")
    print(f"- Database now contains {total_draws} total draws")

    return summary['imported_count']

if __name__ == "__main__":
    generate_sample_data()
