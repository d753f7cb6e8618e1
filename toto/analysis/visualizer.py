"""
Terminal-based output for Toto generation and analysis results.

This module provides colorful terminal output for the CLI commands.
"""
import logging
from typing import List, Dict, Any
from colorama import init, Fore, Back, Style
from tabulate import tabulate

from toto.generation.combinations import TOTAL_POSSIBLE_COMBINATIONS, format_combination

# Initialize colorama for cross-platform colored terminal text
init()

logger = logging.getLogger(__name__)

class AnalysisVisualizer:
    """Terminal-based visualizer for Toto results."""

    STATUS_COLORS = {
        'hot': Fore.RED,
        'warm': Fore.YELLOW,
        'cool': Fore.BLUE,
        'cold': Fore.CYAN
    }

    @staticmethod
    def print_header(title: str):
        """Print a styled header.

        Args:
            title: Header title text
        """
        width = 80
        print("\n" + "=" * width)
        print(f"{Fore.CYAN}{Style.BRIGHT}{title.center(width)}{Style.RESET_ALL}")
        print("=" * width)

    @staticmethod
    def format_balls(numbers: List[int]) -> str:
        return ' '.join(f"{Fore.WHITE}{Back.RED}{num:2d}{Style.RESET_ALL}" for num in sorted(numbers))

    @staticmethod
    def print_combinations(result: Dict[str, Any]):
        """Print a batch of generated combinations.

        Args:
            result: Dictionary with combinations, attempts, processing_time_ms,
                total_existing and remaining_after
        """
        AnalysisVisualizer.print_header("Unique Toto Combinations")

        for i, combination in enumerate(result['combinations']):
            print(f"{i + 1:3d}. {AnalysisVisualizer.format_balls(combination)}")

        print(f"\n{Fore.CYAN}Generation details:{Style.RESET_ALL}")
        print(f"• Attempts: {result['attempts']}")
        print(f"• Processing time: {result['processing_time_ms']} ms")
        print(f"• Historical combinations: {result['total_existing']:,}")
        print(f"• Remaining possible: {result['remaining_after']:,} of {TOTAL_POSSIBLE_COMBINATIONS:,}")

    @staticmethod
    def print_check_result(numbers: List[int], unique: bool, matched_draw=None):
        """Print whether a combination has been drawn before."""
        AnalysisVisualizer.print_header("Combination Check")
        print(f"Combination: {AnalysisVisualizer.format_balls(numbers)}")
        if unique:
            print(f"{Fore.GREEN}This combination has never been drawn.{Style.RESET_ALL}")
        else:
            print(f"{Fore.RED}This combination has been drawn before.{Style.RESET_ALL}")
            if matched_draw is not None:
                print(f"• Draw {matched_draw.draw_number} on {matched_draw.draw_date}: "
                      f"{format_combination(matched_draw.winning_numbers)}")

    @staticmethod
    def print_statistics(stats: Dict[str, Any]):
        """Print archive statistics."""
        AnalysisVisualizer.print_header("Toto Archive Statistics")
        print(tabulate([
            ["Total draws", f"{stats['total_draws']:,}"],
            ["Unique combinations", f"{stats['unique_combinations']:,}"],
            ["Latest draw", stats['latest_draw']],
            ["Latest date", stats['latest_date'] or 'N/A'],
            ["Coverage", f"{stats['coverage']:.6f}%"],
        ], tablefmt="simple"))

    @staticmethod
    def print_frequency(data: List[Dict[str, Any]], include_additional: bool = False):
        """Print number frequency, 10 numbers per table."""
        AnalysisVisualizer.print_header("Toto Number Frequency")

        headers = ["Number", "Frequency", "Winning"]
        if include_additional:
            headers.append("Additional")
        headers.append("Status")

        rows = []
        for entry in data:
            color = AnalysisVisualizer.STATUS_COLORS.get(entry['status'], '')
            row = [entry['number'], f"{color}{entry['frequency']}{Style.RESET_ALL}", entry['winning_count']]
            if include_additional:
                row.append(entry['additional_count'])
            row.append(f"{color}{entry['status'].upper()}{Style.RESET_ALL}")
            rows.append(row)

        for i in range(0, len(rows), 10):
            print(tabulate(rows[i:i + 10], headers=headers, tablefmt="simple"))
            print()

    @staticmethod
    def print_ranges(ranges: Dict[str, Any]):
        """Print the number range breakdown."""
        AnalysisVisualizer.print_header("Toto Number Ranges")
        print(tabulate(
            [[r['range'], r['count'], f"{r['percentage']:.2f}%"] for r in ranges['data']],
            headers=["Range", "Count", "Share"],
            tablefmt="simple"
        ))
        print(f"\n• {ranges['total_numbers']} numbers across {ranges['total_draws']} draws")
