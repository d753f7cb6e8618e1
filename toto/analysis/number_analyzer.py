"""
Toto number analysis module.

This module provides archive statistics, number frequency and number range
breakdowns for Toto draws, and a frequency chart.
"""
import os
import logging
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Patch
from typing import List, Dict, Any, Optional
from datetime import date, datetime
from sqlalchemy.orm import Session

from toto.database import SessionLocal
from toto.models.base import Draw
from toto.generation.combinations import MIN_NUMBER, MAX_NUMBER

logger = logging.getLogger(__name__)

WINNING_COLUMNS = [f'winning_number_{i}' for i in range(1, 7)]

NUMBER_RANGES = [
    {'range': '1-10', 'min': 1, 'max': 10},
    {'range': '11-20', 'min': 11, 'max': 20},
    {'range': '21-30', 'min': 21, 'max': 30},
    {'range': '31-40', 'min': 31, 'max': 40},
    {'range': '41-49', 'min': 41, 'max': 49},
]

# Directory for saving generated charts
CHARTS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'charts')

class NumberAnalyzer:
    """Analyze Toto draws in the archive."""

    def __init__(self, db: Optional[Session] = None):
        """Initialize the analyzer with database connection."""
        self.db = db or SessionLocal()
        self.draws_df = self._load_data()

    def close(self):
        if hasattr(self, 'db') and self.db:
            self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _load_data(self) -> pd.DataFrame:
        """Load draw data from database into pandas DataFrame."""
        columns = ['draw_number', 'draw_date', 'combination_key'] + WINNING_COLUMNS + ['additional_number']
        draws = self.db.query(Draw).order_by(Draw.draw_number.asc()).all()

        df = pd.DataFrame(
            [{col: getattr(draw, col) for col in columns} for draw in draws],
            columns=columns
        )
        logger.info(f"Loaded {len(df)} draws from database")
        return df

    def _filter_by_dates(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> pd.DataFrame:
        """Filter draws DataFrame to an inclusive date range."""
        df = self.draws_df
        if start_date or end_date:
            df = df[df['draw_date'].notna()]
        if start_date:
            df = df[df['draw_date'] >= start_date]
        if end_date:
            df = df[df['draw_date'] <= end_date]
        return df

    @staticmethod
    def _numbers(df: pd.DataFrame, include_additional: bool) -> pd.DataFrame:
        """Stack the drawn numbers into one column, tagged winning or additional."""
        winning = df[WINNING_COLUMNS].stack().to_frame('number')
        winning['kind'] = 'winning'
        frames = [winning]
        if include_additional:
            additional = df['additional_number'].dropna().to_frame('number')
            additional['kind'] = 'additional'
            frames.append(additional)

        numbers = pd.concat(frames, ignore_index=True)
        numbers['number'] = numbers['number'].astype(int)
        return numbers[numbers['number'].between(MIN_NUMBER, MAX_NUMBER)]

    def number_frequency(self, include_additional: bool = False) -> List[Dict[str, Any]]:
        """Count how often each number 1-49 has been drawn.

        Args:
            include_additional: Also count the additional number

        Returns:
            List of {number, frequency, winning_count, [additional_count], status}
        """
        numbers = self._numbers(self.draws_df, include_additional)
        winning = self._count(numbers, 'winning')
        additional = self._count(numbers, 'additional')

        data = []
        for number in winning.index:
            entry = {
                'number': int(number),
                'frequency': int(winning[number] + (additional[number] if include_additional else 0)),
                'winning_count': int(winning[number]),
            }
            if include_additional:
                entry['additional_count'] = int(additional[number])
            data.append(entry)

        self._classify(data)
        return data

    @staticmethod
    def _count(numbers: pd.DataFrame, kind: str) -> pd.Series:
        """Occurrences of each number 1-49 among numbers of the given kind."""
        counts = numbers.loc[numbers['kind'] == kind, 'number'].value_counts()
        return counts.reindex(range(MIN_NUMBER, MAX_NUMBER + 1), fill_value=0)

    @staticmethod
    def _classify(data: List[Dict[str, Any]]):
        """Tag numbers hot, warm, cool or cold by frequency rank."""
        ranked = sorted(data, key=lambda x: x['frequency'], reverse=True)
        total = len(ranked)

        # Top 20% are hot, next 30% are warm, next 30% are cool, bottom 20% are cold
        hot_count = int(total * 0.2)
        warm_count = int(total * 0.3)
        cool_count = int(total * 0.3)

        for i, entry in enumerate(ranked):
            if i < hot_count:
                entry['status'] = 'hot'
            elif i < hot_count + warm_count:
                entry['status'] = 'warm'
            elif i < hot_count + warm_count + cool_count:
                entry['status'] = 'cool'
            else:
                entry['status'] = 'cold'

    def number_ranges(self, include_additional: bool = False,
                      start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dict[str, Any]:
        """Count drawn numbers per decade range.

        Returns:
            Dict with data (range, count, percentage), total_numbers and total_draws
        """
        df = self._filter_by_dates(start_date, end_date)
        numbers = self._numbers(df, include_additional)['number']
        total_numbers = len(numbers)

        data = []
        for bucket in NUMBER_RANGES:
            count = int(numbers.between(bucket['min'], bucket['max']).sum())
            data.append({
                'range': bucket['range'],
                'count': count,
                'percentage': (count / total_numbers) * 100 if total_numbers > 0 else 0,
            })

        return {
            'data': data,
            'total_numbers': total_numbers,
            'total_draws': len(df),
        }

    def visualize_number_frequency(self, include_additional: bool = False, save_path: Optional[str] = None) -> str:
        """Create and save a bar chart of number frequency.

        Returns:
            Path to the saved visualization file
        """
        data = self.number_frequency(include_additional)
        if not len(self.draws_df):
            logger.error("No frequency data to visualize")
            return ""

        color_map = {'hot': 'red', 'warm': 'orange', 'cool': 'lightblue', 'cold': 'blue'}
        numbers = [entry['number'] for entry in data]

        fig, ax = plt.subplots(figsize=(15, 6))
        ax.bar(numbers, [entry['frequency'] for entry in data],
               color=[color_map[entry['status']] for entry in data])
        ax.set_title('Toto Number Frequency', fontsize=14)
        ax.set_xlabel('Number', fontsize=12)
        ax.set_ylabel('Frequency', fontsize=12)
        ax.set_xticks(numbers)
        ax.grid(axis='y', linestyle='--', alpha=0.7)
        ax.legend(handles=[
            Patch(facecolor='red', label='Hot (top 20%)'),
            Patch(facecolor='orange', label='Warm (21-50%)'),
            Patch(facecolor='lightblue', label='Cool (51-80%)'),
            Patch(facecolor='blue', label='Cold (bottom 20%)')
        ], loc='upper right')
        plt.tight_layout()

        if save_path is None:
            os.makedirs(CHARTS_DIR, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
            save_path = os.path.join(CHARTS_DIR, f'frequency_analysis_{timestamp}.png')

        fig.savefig(save_path)
        logger.info(f"Visualization saved to {save_path}")
        plt.close(fig)

        return save_path
