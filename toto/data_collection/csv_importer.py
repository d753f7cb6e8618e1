"""
Toto data importer for CSV exports.

Parses the Singapore Toto draw-history CSV and imports new draws into the database.
"""
import csv
import io
import logging
from datetime import datetime
from typing import List, Dict, Any, Optional

from toto.generation.combinations import validate
from toto.utils import parse_integer, parse_prize

logger = logging.getLogger(__name__)

# CSV header -> Draw column, for the integer-valued columns
INTEGER_COLUMNS = {
    'Draw': 'draw_number',
    'Winning Number 1': 'winning_number_1',
    '2': 'winning_number_2',
    '3': 'winning_number_3',
    '4': 'winning_number_4',
    '5': 'winning_number_5',
    '6': 'winning_number_6',
    'Additional Number': 'additional_number',
    'Low': 'low_numbers',
    'High': 'high_numbers',
    'Odd': 'odd_numbers',
    'Even': 'even_numbers',
    '1-10': 'range_1_10',
    '11-20': 'range_11_20',
    '21-30': 'range_21_30',
    '31-40': 'range_31_40',
    '41-50': 'range_41_50',
}
for _division in range(1, 8):
    INTEGER_COLUMNS[f'Division {_division} Winners'] = f'division_{_division}_winners'

PRIZE_COLUMNS = {f'Division {d} Prize': f'division_{d}_prize' for d in range(1, 8)}

DATE_FORMATS = ['%Y-%m-%d', '%d-%b-%y', '%d-%b-%Y', '%d/%m/%Y', '%a, %d %b %Y']


def parse_draw_date(value: str) -> Optional[Any]:
    """Parse a draw date in any of the formats seen in Toto exports."""
    value = (value or '').strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_row(row: Dict[str, str]) -> Optional[Dict[str, Any]]:
    """Convert one CSV row into a draw dictionary.

    Returns:
        Draw dictionary or None if essential fields are missing
    """
    draw = {column: parse_integer(row.get(header)) for header, column in INTEGER_COLUMNS.items()}
    draw.update({column: parse_prize(row.get(header)) for header, column in PRIZE_COLUMNS.items()})
    draw['from_last'] = (row.get('From Last') or '').strip() or None

    date_str = (row.get('Date') or '').strip()
    if (draw['draw_number'] <= 0 or not date_str or draw['winning_number_1'] <= 0
            or draw['winning_number_6'] <= 0 or draw['additional_number'] <= 0):
        return None

    numbers = [draw[f'winning_number_{i}'] for i in range(1, 7)]
    if not validate(numbers):
        logger.warning(f"Invalid winning numbers for draw {draw['draw_number']}: {numbers}")
        return None

    draw['draw_date'] = parse_draw_date(date_str)
    if draw['draw_date'] is None:
        logger.warning(f"Could not parse date '{date_str}' for draw {draw['draw_number']}")

    return draw


def parse_toto_csv(csv_content: str) -> List[Dict[str, Any]]:
    """Parse Toto CSV content.

    Args:
        csv_content: Text of the CSV file, header row included

    Returns:
        List of draw dictionaries
    """
    draws = []
    reader = csv.DictReader(io.StringIO(csv_content.strip()))
    for line_number, row in enumerate(reader, start=2):
        try:
            draw = parse_row(row)
        except Exception as e:
            logger.warning(f"Error parsing CSV line {line_number}: {e}")
            continue
        if draw:
            draws.append(draw)

    logger.info(f"Successfully parsed {len(draws)} draws from CSV")
    return draws


def read_csv_file(csv_path: str) -> List[Dict[str, Any]]:
    """Parse a Toto CSV file from disk."""
    with open(csv_path, 'r', encoding='utf-8-sig') as csvfile:
        return parse_toto_csv(csvfile.read())
