#!/usr/bin/env python3
"""
Toto Unique Combination Tool

This script initializes the database and provides commands for data collection,
unique combination generation and archive statistics.
"""
import sys
import logging
import argparse
from datetime import date
from pathlib import Path

# Add project root to Python path
sys.path.append(str(Path(__file__).parent))

from toto.config import Config
from toto.database import init_db
from toto.data_collection.archive_store import ArchiveStore
from toto.data_collection.csv_importer import read_csv_file
from toto.data_collection.processor import DataProcessor
from toto.data_collection.sample_data_generator import generate_sample_data
from toto.data_collection.scraper import TotoScraper
from toto.exceptions import TotoError
from toto.generation.combinations import calculate_coverage, canonical_key
from toto.generation.generator import build_generator
from toto.analysis.number_analyzer import NumberAnalyzer
from toto.analysis.visualizer import AnalysisVisualizer

logger = logging.getLogger(__name__)

def configure_logging():
    """Configure logging for the command line tool."""
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler("toto.log"),
            logging.StreamHandler()
        ]
    )

def initialize_database():
    """Initialize the database with required tables."""
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized successfully")

def scrape_data():
    """Scrape the latest Toto draws and store the new ones."""
    logger.info("Starting data scraping process...")

    result = TotoScraper().scrape_lottery_data()
    if not result.success:
        logger.error(f"Scraping failed: {result.error}")
        return

    with DataProcessor() as processor:
        summary = processor.process_draws(result.draws)

    if summary['imported_count'] > 0:
        logger.info(f"Added {summary['imported_count']} new draws (latest draw: {summary['latest_draw']})")
    else:
        logger.info("No new draws found. Database is up to date.")
    for error in summary['errors']:
        logger.error(error)

def import_csv(csv_path: str):
    """Import Toto draws from a CSV export."""
    logger.info(f"Importing draws from {csv_path}...")

    draws = read_csv_file(csv_path)
    if not draws:
        logger.error("No valid data found in CSV file")
        return

    with DataProcessor() as processor:
        summary = processor.process_draws(draws)

    print(f"\nImport completed!")
    print(f"- Draws in file: {summary['total_in_file']}")
    print(f"- New draws found: {summary['new_draws_found']}")
    print(f"- Imported: {summary['imported_count']}")
    for error in summary['errors']:
        print(f"- Error: {error}")

def generate_combinations(count: int):
    """Generate combinations that have never been drawn.

    Args:
        count: Number of combinations to generate
    """
    generator = build_generator()
    try:
        result = generator.generate_unique(count)
    except TotoError as e:
        logger.error(f"Generation failed: {e}")
        return

    AnalysisVisualizer.print_combinations({
        'combinations': result.combinations,
        'attempts': result.attempts,
        'processing_time_ms': result.processing_time_ms,
        'total_existing': result.total_existing,
        'remaining_after': result.remaining_after,
    })

def check_combination(numbers):
    """Check whether a combination has been drawn before."""
    generator = build_generator()
    try:
        unique = generator.is_unique(numbers)
    except TotoError as e:
        logger.error(f"Check failed: {e}")
        return

    with ArchiveStore() as store:
        matched = None if unique else store.find_draw_by_key(canonical_key(numbers))
        AnalysisVisualizer.print_check_result(numbers, unique, matched)

def show_statistics():
    """Show archive statistics."""
    with ArchiveStore() as store:
        stats = store.get_statistics()
    stats['coverage'] = calculate_coverage(stats['unique_combinations'])
    AnalysisVisualizer.print_statistics(stats)

def show_frequency(include_additional: bool):
    """Show how often each number has been drawn."""
    with NumberAnalyzer() as analyzer:
        data = analyzer.number_frequency(include_additional)
    AnalysisVisualizer.print_frequency(data, include_additional)

def show_ranges(include_additional: bool, start_date: str = None, end_date: str = None):
    """Show drawn numbers grouped by range."""
    start = date.fromisoformat(start_date) if start_date else None
    end = date.fromisoformat(end_date) if end_date else None
    with NumberAnalyzer() as analyzer:
        ranges = analyzer.number_ranges(include_additional, start, end)
    AnalysisVisualizer.print_ranges(ranges)

def visualize_frequencies(include_additional: bool):
    """Save a bar chart of number frequencies."""
    with NumberAnalyzer() as analyzer:
        chart_path = analyzer.visualize_number_frequency(include_additional)
    if chart_path:
        print(f"\nVisualization saved to: {chart_path}")

def serve(host: str, port: int):
    """Run the HTTP API."""
    from toto.web.app import create_app

    init_db()
    app = create_app()
    logger.info(f"Serving Toto API on {host}:{port}")
    app.run(host=host, port=port, debug=Config.DEBUG)

def main():
    """Main entry point for the application."""
    parser = argparse.ArgumentParser(description="Toto Unique Combination Tool")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init", help="Initialize the database")
    subparsers.add_parser("scrape", help="Scrape the latest draws from the results page")

    import_parser = subparsers.add_parser("import-csv", help="Import draws from a CSV export")
    import_parser.add_argument("path", help="Path to the CSV file")

    sample_parser = subparsers.add_parser("generate-data", help="Generate sample Toto data for testing")
    sample_parser.add_argument("--count", type=int, default=2000, help="Number of sample draws")

    generate_parser = subparsers.add_parser("generate", help="Generate combinations that have never been drawn")
    generate_parser.add_argument("--count", type=int, default=5, help="Number of combinations (1-50)")

    check_parser = subparsers.add_parser("check", help="Check whether a combination has been drawn")
    check_parser.add_argument("numbers", type=int, nargs='+', help="Six numbers between 1 and 49")

    subparsers.add_parser("stats", help="Show archive statistics")

    frequency_parser = subparsers.add_parser("frequency", help="Show number frequency")
    frequency_parser.add_argument("--include-additional", action='store_true', help="Count the additional number")

    ranges_parser = subparsers.add_parser("ranges", help="Show number range distribution")
    ranges_parser.add_argument("--include-additional", action='store_true', help="Count the additional number")
    ranges_parser.add_argument("--start-date", type=str, help="First draw date (YYYY-MM-DD)")
    ranges_parser.add_argument("--end-date", type=str, help="Last draw date (YYYY-MM-DD)")

    visualize_parser = subparsers.add_parser("visualize", help="Save a number frequency chart")
    visualize_parser.add_argument("--include-additional", action='store_true', help="Count the additional number")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default=Config.API_HOST, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=Config.API_PORT, help="Bind port")

    args = parser.parse_args()
    configure_logging()

    if args.command == "init":
        initialize_database()
    elif args.command == "scrape":
        scrape_data()
    elif args.command == "import-csv":
        import_csv(args.path)
    elif args.command == "generate-data":
        generate_sample_data(args.count)
    elif args.command == "generate":
        generate_combinations(args.count)
    elif args.command == "check":
        check_combination(args.numbers)
    elif args.command == "stats":
        show_statistics()
    elif args.command == "frequency":
        show_frequency(args.include_additional)
    elif args.command == "ranges":
        show_ranges(args.include_additional, args.start_date, args.end_date)
    elif args.command == "visualize":
        visualize_frequencies(args.include_additional)
    elif args.command == "serve":
        serve(args.host, args.port)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
