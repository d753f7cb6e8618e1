import re
import requests
from bs4 import BeautifulSoup
from dataclasses import dataclass, field
import logging
from typing import List, Dict, Optional, Any
import time

from toto.config import Config
from toto.exceptions import ScrapingError
from toto.generation.combinations import validate, MIN_NUMBER, MAX_NUMBER
from toto.data_collection.csv_importer import parse_draw_date
from toto.utils import retry

logger = logging.getLogger(__name__)

# draw number, ISO date, six numbers, additional number
FALLBACK_PATTERN = re.compile(
    r'(\d{4})[,\s]+(\d{4}-\d{2}-\d{2})[,\s]+((?:\d{1,2}[,\s]*){6})[,\s]+(\d{1,2})'
)


@dataclass
class ScrapingResult:
    success: bool
    draws: List[Dict[str, Any]] = field(default_factory=list)
    message: str = ''
    new_records: int = 0
    latest_draw: int = 0
    processing_time: int = 0
    error: Optional[str] = None


def build_draw(draw_number: int, date_str: str, numbers: List[int], additional: int) -> Optional[Dict]:
    """Assemble a draw dictionary, or None if the numbers are not a valid draw."""
    if not validate(numbers):
        logger.warning(f"Invalid winning numbers for draw {draw_number}: {numbers}")
        return None
    if not MIN_NUMBER <= additional <= MAX_NUMBER:
        logger.warning(f"Additional number out of range for draw {draw_number}: {additional}")
        return None

    draw = {'draw_number': draw_number, 'draw_date': parse_draw_date(date_str), 'additional_number': additional}
    for i, n in enumerate(numbers, start=1):
        draw[f'winning_number_{i}'] = n
    return draw


class TotoScraper:
    """Scraper for the Toto draw history page."""

    def __init__(self, target_url: str = None, user_agent: str = None,
                 timeout: int = None, max_retries: int = None):
        self.target_url = target_url or Config.SCRAPING_TARGET_URL
        self.timeout = timeout or Config.SCRAPING_TIMEOUT
        self.max_retries = max_retries or Config.SCRAPING_MAX_RETRIES
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or Config.SCRAPING_USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1',
        })

    def _get_page_content(self) -> str:
        """Fetch page content with retry logic."""
        def fetch():
            response = self.session.get(self.target_url, timeout=self.timeout)
            response.raise_for_status()
            return response.text

        try:
            return retry(fetch, max_attempts=self.max_retries, exceptions=(requests.RequestException,))
        except requests.RequestException as e:
            logger.error(f"Failed to fetch {self.target_url} after {self.max_retries} attempts")
            raise ScrapingError(str(e)) from e

    def scrape_lottery_data(self) -> ScrapingResult:
        """Scrape the draw history page.

        Returns:
            ScrapingResult; failures are reported in it rather than raised
        """
        start_time = time.time()
        logger.info(f"Fetching data from: {self.target_url}")

        try:
            html = self._get_page_content()
        except ScrapingError as e:
            return ScrapingResult(
                success=False,
                message='Failed to scrape lottery data',
                processing_time=int((time.time() - start_time) * 1000),
                error=str(e),
            )

        logger.info(f"Received {len(html)} characters of HTML")
        draws = self.parse_html(html)
        latest_draw = max((d['draw_number'] for d in draws), default=0)

        return ScrapingResult(
            success=True,
            draws=draws,
            message=f"Successfully scraped {len(draws)} lottery draws",
            new_records=len(draws),
            latest_draw=latest_draw,
            processing_time=int((time.time() - start_time) * 1000),
        )

    def parse_html(self, html: str) -> List[Dict]:
        """Parse the results table into draw dictionaries."""
        soup = BeautifulSoup(html, 'html.parser')
        table = soup.find('table', id='summary-table')
        if not table:
            logger.warning("Summary table not found in HTML")
            return self._fallback_parse(html)

        draws = []
        for row in table.find_all('tr'):
            if row.find('th'):  # Skip header rows
                continue
            draw = self._parse_row(row)
            if draw:
                draws.append(draw)

        logger.info(f"Successfully parsed {len(draws)} lottery draws")
        return draws

    def _parse_row(self, row) -> Optional[Dict]:
        """Parse a single draw row from the results table."""
        cells = [cell.get_text(' ', strip=True) for cell in row.find_all('td')]
        if len(cells) < 4:
            return None

        try:
            draw_number = int(cells[0])
            numbers = [int(n) for n in re.split(r'[,\s]+', cells[2]) if n]
            additional = int(cells[3])
        except ValueError as e:
            logger.warning(f"Error parsing draw row: {e}")
            return None

        if not cells[1]:
            return None

        return build_draw(draw_number, cells[1], numbers, additional)

    def _fallback_parse(self, html: str) -> List[Dict]:
        """Scan the raw page for draw-shaped number sequences."""
        draws = []
        for match in FALLBACK_PATTERN.finditer(html):
            numbers = [int(n) for n in re.split(r'[,\s]+', match.group(3)) if n]
            draw = build_draw(int(match.group(1)), match.group(2), numbers, int(match.group(4)))
            if draw:
                draws.append(draw)

        logger.info(f"Fallback parsing found {len(draws)} draws")
        return draws

    def test_connection(self) -> Dict[str, Any]:
        """Check that the results page answers a HEAD request."""
        try:
            response = self.session.head(self.target_url, timeout=10)
        except requests.RequestException as e:
            return {'success': False, 'message': str(e)}

        if response.ok:
            return {'success': True, 'message': f"Connection successful ({response.status_code})"}
        return {'success': False, 'message': f"Connection failed ({response.status_code}: {response.reason})"}
