"""Read and write access to the archive of historical Toto draws."""
from typing import List, Dict, Any, Optional, Set
import logging
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from toto.models.base import Draw
from toto.database import SessionLocal
from toto.exceptions import ArchiveFetchError
from toto.generation.combinations import canonical_key

logger = logging.getLogger(__name__)

WINNING_COLUMNS = [f'winning_number_{i}' for i in range(1, 7)]
DRAW_COLUMNS = set(Draw.__table__.columns.keys()) - {'id', 'combination_key', 'created_at'}


def draw_numbers(draw_data: Dict[str, Any]) -> List[int]:
    """Return the 6 winning numbers of a draw dictionary."""
    return [draw_data[col] for col in WINNING_COLUMNS]


class ArchiveStore:
    """Durable record of historical draws."""

    def __init__(self, db: Optional[Session] = None):
        self.db = db or SessionLocal()

    def fetch_all_historical_combination_keys(self) -> Set[str]:
        """Get every drawn combination as a set of canonical keys.

        Raises:
            ArchiveFetchError: if the database could not be queried
        """
        try:
            rows = self.db.query(Draw.combination_key).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error fetching combinations: {e}")
            raise ArchiveFetchError(f"Failed to fetch combinations: {e}") from e
        return {row[0] for row in rows if row[0]}

    def fetch_draw_count(self) -> int:
        """Get the number of draws in the archive."""
        try:
            return self.db.query(func.count(Draw.id)).scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ArchiveFetchError(f"Failed to fetch count: {e}") from e

    def get_latest_draw_number(self) -> int:
        """Get the latest draw number from the database."""
        try:
            latest_draw = self.db.query(Draw).order_by(Draw.draw_number.desc()).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ArchiveFetchError(f"Failed to fetch latest draw: {e}") from e
        return latest_draw.draw_number if latest_draw else 0

    def draw_exists(self, draw_number: int) -> bool:
        """Check if a draw number already exists."""
        try:
            return self.db.query(Draw.id).filter(Draw.draw_number == draw_number).first() is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ArchiveFetchError(f"Failed to check draw existence: {e}") from e

    def find_draw_by_key(self, key: str) -> Optional[Draw]:
        """Find the earliest draw whose winning numbers match a canonical key."""
        try:
            return (self.db.query(Draw)
                    .filter(Draw.combination_key == key)
                    .order_by(Draw.draw_number.asc())
                    .first())
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ArchiveFetchError(f"Database query failed: {e}") from e

    def insert_draws(self, draws: List[Dict[str, Any]]) -> int:
        """Insert multiple draws in a single transaction.

        Args:
            draws: List of draw dictionaries keyed by Draw column names

        Returns:
            int: Number of draws inserted
        """
        if not draws:
            return 0

        for draw_data in draws:
            fields = {k: v for k, v in draw_data.items() if k in DRAW_COLUMNS}
            self.db.add(Draw(combination_key=canonical_key(draw_numbers(draw_data)), **fields))

        try:
            self.db.commit()
            return len(draws)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error inserting draws: {e}")
            raise

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics about the database."""
        try:
            total_draws = self.db.query(func.count(Draw.id)).scalar() or 0
            unique_combinations = self.db.query(func.count(func.distinct(Draw.combination_key))).scalar() or 0
            latest = self.db.query(Draw).order_by(Draw.draw_number.desc()).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ArchiveFetchError(f"Failed to fetch statistics: {e}") from e

        return {
            'total_draws': total_draws,
            'unique_combinations': unique_combinations,
            'latest_draw': latest.draw_number if latest else 0,
            'latest_date': latest.draw_date.isoformat() if latest and latest.draw_date else '',
            'last_updated': datetime.now().isoformat(),
        }

    def health_check(self) -> bool:
        """Health check for database connection."""
        try:
            self.db.query(Draw.id).limit(1).all()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Database health check failed: {e}")
            return False

    def close(self):
        """Close the database session."""
        if hasattr(self, 'db') and self.db:
            self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
