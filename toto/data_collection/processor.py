from typing import List, Dict, Any, Optional
import logging
from sqlalchemy.orm import Session

from toto.data_collection.archive_store import ArchiveStore

logger = logging.getLogger(__name__)

BATCH_SIZE = 50

class DataProcessor:
    """Process and store lottery draw data."""

    def __init__(self, db: Optional[Session] = None):
        self.store = ArchiveStore(db)
        self.db = self.store.db

    def process_draws(self, draws: List[Dict]) -> Dict[str, Any]:
        """Store the draws that are newer than the latest draw in the database.

        Args:
            draws: List of draw dictionaries

        Returns:
            Dict with imported_count, total_in_file, new_draws_found, latest_draw and errors
        """
        latest_draw = self.store.get_latest_draw_number()
        # Last occurrence wins when a file repeats a draw number
        by_number = {d['draw_number']: d for d in draws if (d.get('draw_number') or 0) > latest_draw}
        new_draws = [by_number[n] for n in sorted(by_number)]
        logger.info(f"Found {len(new_draws)} new draws to import (latest in DB: {latest_draw})")

        imported = 0
        latest = latest_draw
        errors = []
        for i in range(0, len(new_draws), BATCH_SIZE):
            batch = new_draws[i:i + BATCH_SIZE]
            try:
                imported += self.store.insert_draws(batch)
                latest = batch[-1]['draw_number']
                logger.info(f"Inserted batch {i // BATCH_SIZE + 1}: {len(batch)} draws")
            except Exception as e:
                message = f"Failed to insert batch starting at draw {batch[0]['draw_number']}: {e}"
                logger.error(message)
                errors.append(message)

        return {
            'imported_count': imported,
            'total_in_file': len(draws),
            'new_draws_found': len(new_draws),
            'latest_draw': latest,
            'errors': errors,
        }

    def close(self):
        """Close the database session."""
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
