"""
Toto combination service - Flask API.

JSON endpoints for generating never-drawn combinations, checking a combination
against the archive, archive statistics and data ingestion.
"""
import logging
import time
from datetime import date, datetime

from flask import Flask, jsonify, request

from toto.analysis.number_analyzer import NumberAnalyzer
from toto.data_collection.archive_store import ArchiveStore
from toto.data_collection.csv_importer import parse_toto_csv
from toto.data_collection.processor import DataProcessor
from toto.data_collection.scraper import TotoScraper
from toto.database import SessionLocal
from toto.exceptions import ArchiveFetchError, InvalidArgument, TotoError
from toto.generation.combinations import (
    MAX_COMBINATIONS_PER_REQUEST,
    TOTAL_POSSIBLE_COMBINATIONS,
    calculate_coverage,
    canonical_key,
    validate,
)
from toto.generation.generator import build_generator

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


def _generate_failure(message: str, start: float, status: int):
    return jsonify({
        "success": False,
        "combinations": [],
        "processingTime": _elapsed_ms(start),
        "totalExistingCombinations": 0,
        "remainingPossible": 0,
        "message": message,
    }), status


def _parse_date(value):
    if not value:
        return None
    return date.fromisoformat(value)


def _cache_stats(generator) -> dict:
    stats = generator.cache.stats()
    return {
        "existingCount": stats["existing_count"],
        "lastRefresh": stats["last_refreshed_at"].isoformat() if stats["last_refreshed_at"] else None,
        "cacheAge": stats["age_millis"],
    }


def create_app(generator=None, session_factory=None, scraper=None) -> Flask:
    """Build the Flask application.

    Args:
        generator: Shared CombinationGenerator; one is built on the archive if omitted
        session_factory: Callable returning a SQLAlchemy session
        scraper: TotoScraper used by the scrape endpoint
    """
    session_factory = session_factory or SessionLocal
    generator = generator or build_generator(lambda: ArchiveStore(session_factory()))
    scraper = scraper or TotoScraper()

    app = Flask(__name__)
    app.config["GENERATOR"] = generator

    if session_factory is SessionLocal:
        @app.teardown_appcontext
        def remove_session(exc=None):
            SessionLocal.remove()

    @app.route("/api/generate-combinations", methods=["POST"])
    def generate_combinations():
        start = time.time()
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        count = data.get("count")
        if isinstance(count, float) and count.is_integer():
            count = int(count)

        if isinstance(count, bool) or not isinstance(count, int) or count == 0:
            return _generate_failure("Count is required and must be a number", start, 400)

        try:
            result = generator.generate_unique(count)
        except InvalidArgument as e:
            return _generate_failure(str(e), start, 400)
        except TotoError as e:
            logger.error(f"Generate combinations API error: {e}")
            return _generate_failure(str(e), start, 500)

        return jsonify({
            "success": True,
            "combinations": [sorted(c) for c in result.combinations],
            "processingTime": result.processing_time_ms,
            "totalExistingCombinations": result.total_existing,
            "remainingPossible": result.remaining_after,
        })

    @app.route("/api/generate-combinations", methods=["GET"])
    def generator_status():
        try:
            remaining = generator.remaining_count()
        except TotoError as e:
            return jsonify({"status": "error", "message": str(e)}), 500

        return jsonify({
            "status": "ready",
            "cacheStats": _cache_stats(generator),
            "remainingCombinations": remaining,
            "maxCombinationsPerRequest": MAX_COMBINATIONS_PER_REQUEST,
            "totalPossibleCombinations": TOTAL_POSSIBLE_COMBINATIONS,
        })

    @app.route("/api/cache/clear", methods=["POST"])
    def clear_cache():
        generator.cache.clear()
        logger.info("Historical combination cache cleared")
        return jsonify({"success": True, "cacheStats": _cache_stats(generator)})

    @app.route("/api/check-combination", methods=["POST"])
    def check_combination():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        numbers = data.get("numbers")

        if not isinstance(numbers, list) or not validate(numbers):
            return jsonify({
                "success": False,
                "exists": False,
                "combination": numbers if isinstance(numbers, list) else [],
                "sortedKey": "",
                "error": "Invalid combination. Must be 6 unique numbers between 1-49.",
            }), 400

        sorted_key = canonical_key(numbers)
        try:
            with ArchiveStore(session_factory()) as store:
                matched = store.find_draw_by_key(sorted_key)
                response = {
                    "success": True,
                    "exists": matched is not None,
                    "combination": sorted(numbers),
                    "sortedKey": sorted_key,
                }
                if matched is not None:
                    response["matchedDraw"] = {
                        "drawNumber": matched.draw_number,
                        "date": matched.draw_date.isoformat() if matched.draw_date else None,
                        "isWinning": True,
                        "isAdditional": False,
                    }
        except ArchiveFetchError as e:
            logger.error(f"Database query error: {e}")
            return jsonify({
                "success": False,
                "exists": False,
                "combination": numbers,
                "sortedKey": sorted_key,
                "error": "Database query failed",
            }), 500

        return jsonify(response)

    @app.route("/api/statistics", methods=["GET"])
    def statistics():
        try:
            with ArchiveStore(session_factory()) as store:
                stats = store.get_statistics()
        except ArchiveFetchError as e:
            logger.error(f"Statistics API error: {e}")
            return jsonify({"error": "Failed to fetch statistics", "message": str(e)}), 500

        return jsonify({
            "totalDraws": stats["total_draws"],
            "uniqueCombinations": stats["unique_combinations"],
            "latestDraw": stats["latest_draw"],
            "latestDate": stats["latest_date"],
            "coverage": calculate_coverage(stats["unique_combinations"]),
            "lastUpdated": stats["last_updated"],
        })

    @app.route("/api/number-frequency", methods=["GET"])
    def number_frequency():
        include_additional = request.args.get("includeAdditional") == "true"

        with NumberAnalyzer(session_factory()) as analyzer:
            total_draws = len(analyzer.draws_df)
            data = analyzer.number_frequency(include_additional) if total_draws else []

        rows = []
        for entry in data:
            row = {
                "number": entry["number"],
                "frequency": entry["frequency"],
                "winningCount": entry["winning_count"],
                "status": entry["status"],
            }
            if include_additional:
                row["additionalCount"] = entry["additional_count"]
            rows.append(row)

        return jsonify({
            "success": True,
            "data": rows,
            "includeAdditional": include_additional,
            "totalDraws": total_draws,
            "message": (f"Successfully retrieved frequency data for {total_draws} draws"
                        if total_draws else "No lottery data found"),
        })

    @app.route("/api/number-ranges", methods=["GET"])
    def number_ranges():
        include_additional = request.args.get("includeAdditional") == "true"
        start_date = request.args.get("startDate")
        end_date = request.args.get("endDate")

        try:
            start, end = _parse_date(start_date), _parse_date(end_date)
        except ValueError:
            return jsonify({
                "success": False,
                "data": [],
                "totalNumbers": 0,
                "totalDraws": 0,
                "includeAdditional": include_additional,
                "error": "Dates must be in YYYY-MM-DD format",
            }), 400

        with NumberAnalyzer(session_factory()) as analyzer:
            ranges = analyzer.number_ranges(include_additional, start, end)

        date_range = {}
        if start_date:
            date_range["startDate"] = start_date
        if end_date:
            date_range["endDate"] = end_date

        return jsonify({
            "success": True,
            "data": ranges["data"],
            "totalNumbers": ranges["total_numbers"],
            "totalDraws": ranges["total_draws"],
            "includeAdditional": include_additional,
            "dateRange": date_range,
            "message": f"Successfully retrieved range data for {ranges['total_draws']} draws",
        })

    @app.route("/api/scrape-data", methods=["POST"])
    def scrape_data():
        start = time.time()
        logger.info("Starting data scraping process...")

        result = scraper.scrape_lottery_data()
        if not result.success:
            logger.error(f"Scraping failed: {result.error}")
            return jsonify({
                "success": False,
                "newRecords": 0,
                "latestDraw": 0,
                "message": result.message,
                "processingTime": _elapsed_ms(start),
                "error": result.error,
            }), 500

        try:
            with DataProcessor(session_factory()) as processor:
                summary = processor.process_draws(result.draws)
        except ArchiveFetchError as e:
            logger.error(f"Scrape API error: {e}")
            return jsonify({
                "success": False,
                "newRecords": 0,
                "latestDraw": 0,
                "message": "Scraping failed due to an unexpected error",
                "processingTime": _elapsed_ms(start),
                "error": str(e),
            }), 500

        if summary["errors"] and not summary["imported_count"]:
            return jsonify({
                "success": False,
                "newRecords": 0,
                "latestDraw": summary["latest_draw"],
                "message": "Failed to insert new draws into database",
                "processingTime": _elapsed_ms(start),
                "error": "; ".join(summary["errors"]),
            }), 500

        message = "Scraping completed successfully. "
        if summary["imported_count"]:
            message += f"Added {summary['imported_count']} new draws to database."
        else:
            message += "No new draws found. Database is up to date."

        return jsonify({
            "success": True,
            "newRecords": summary["imported_count"],
            "latestDraw": summary["latest_draw"],
            "message": message,
            "processingTime": _elapsed_ms(start),
        })

    @app.route("/api/scrape-data", methods=["GET"])
    def scrape_status():
        try:
            with ArchiveStore(session_factory()) as store:
                stats = store.get_statistics()
        except ArchiveFetchError as e:
            return jsonify({"status": "error", "message": str(e)}), 500

        return jsonify({
            "status": "ready",
            "currentDrawCount": stats["total_draws"],
            "latestDraw": stats["latest_draw"],
            "latestDate": stats["latest_date"],
            "lastUpdated": stats["last_updated"],
        })

    @app.route("/api/import-csv", methods=["POST"])
    def import_csv():
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"error": "No file provided"}), 400
        if not (upload.filename or "").endswith(".csv"):
            return jsonify({"error": "File must be a CSV"}), 400

        try:
            csv_content = upload.read().decode("utf-8-sig")
        except UnicodeDecodeError:
            return jsonify({"error": "File must be UTF-8 encoded CSV"}), 400
        logger.info(f"Processing CSV file: {upload.filename} ({len(csv_content)} characters)")

        draws = parse_toto_csv(csv_content)
        if not draws:
            return jsonify({"error": "No valid data found in CSV file"}), 400

        try:
            with DataProcessor(session_factory()) as processor:
                summary = processor.process_draws(draws)
        except ArchiveFetchError as e:
            logger.error(f"CSV import error: {e}")
            return jsonify({
                "success": False,
                "error": "Failed to process CSV file",
                "message": str(e),
            }), 500

        if not summary["new_draws_found"]:
            message = "No new draws to import. Database is already up to date."
        elif summary["imported_count"]:
            message = f"Successfully imported {summary['imported_count']} new draws"
        else:
            message = "No draws were imported due to errors"

        response = {
            "success": summary["imported_count"] > 0 or not summary["new_draws_found"],
            "message": message,
            "importedCount": summary["imported_count"],
            "totalDrawsInFile": summary["total_in_file"],
            "newDrawsFound": summary["new_draws_found"],
        }
        if summary["errors"]:
            response["errors"] = summary["errors"]
        return jsonify(response)

    @app.route("/api/health", methods=["GET"])
    def health():
        with ArchiveStore(session_factory()) as store:
            healthy = store.health_check()

        return jsonify({
            "status": "healthy" if healthy else "unhealthy",
            "database": healthy,
            "cache": generator.cache.size() > 0,
            "timestamp": datetime.now().isoformat(),
        }), 200 if healthy else 503

    return app
