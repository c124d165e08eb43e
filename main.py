#!/usr/bin/env python3
"""
Packing Slip / Shipping Label Matcher - Main Entry Point.

Command-line interface and programmatic access to the document analysis
pipeline.

Usage:
    Command Line:
        python main.py --input orders.pdf
        python main.py --input orders.pdf --output report.xlsx --review
        python main.py --input orders.pdf --strategy sequential --debug

    Python:
        from main import run_analysis
        analysis = run_analysis("orders.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from typing import Optional

from config import ConfigurationManager
from slipmatch.utils.exceptions import SlipMatchError, InvalidSelectionError
from slipmatch.utils.logger import setup_logger_from_config, get_logger
from slipmatch.utils.helpers import pluralize

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_REVIEW_REQUIRED = 2
EXIT_CANCELLED = 130


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Match shipping labels to packing slips in a multi-page PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Analyze a document:
        python main.py --input orders.pdf

    Review uncertain matches and write an Excel report:
        python main.py --input orders.pdf --review --output report.xlsx
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="PDF containing packing slips and shipping labels"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write an Excel report to this file"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--strategy", "-s",
        choices=["scored", "sequential", "auto"],
        default=None,
        help="Matching strategy (default: matching.strategy from config)"
    )

    parser.add_argument(
        "--review",
        action="store_true",
        help="Review uncertain matches interactively"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when matches remain unconfirmed or warnings need confirmation"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (includes every matching decision)"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Load configuration and set up logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        logger.setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        logger.setLevel(logging.WARNING)

    logger.info("=" * 60)
    logger.info("PACKING SLIP / SHIPPING LABEL MATCHER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_analysis(
    input_path: str,
    strategy: Optional[str] = None,
    output_path: Optional[str] = None
):
    """
    Analyze one PDF and optionally write the Excel report.

    Args:
        input_path: Path to the PDF.
        strategy: Matching strategy name, or None for the configured one.
        output_path: Excel report path, or None to skip the report.

    Returns:
        AnalysisResult.

    Raises:
        SourceReadError: If the PDF cannot be read.
    """
    from slipmatch.input_handler import PDFTextSource
    from slipmatch.matching import MatchStrategy
    from slipmatch.pipeline import DocumentAnalyzer
    from slipmatch.reporting import ReportExporter

    analyzer = DocumentAnalyzer(
        strategy=MatchStrategy.from_value(strategy) if strategy else None
    )

    with PDFTextSource(input_path) as source:
        analysis = analyzer.analyze(source)

    if output_path:
        ReportExporter().export(analysis, output_path)

    return analysis


def review_interactively(analysis, stdin=None, stdout=None) -> None:
    """
    Drive a manual resolution session from the console.

    For each uncertain group, the operator enters a candidate number,
    ``s`` to skip, or ``k`` to keep the current label.
    """
    from slipmatch.resolution import ManualResolutionCoordinator

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    session = ManualResolutionCoordinator(analysis.groups)

    while not session.is_complete:
        group = session.current
        label = group.shipping_label
        print(
            f"\nMatch {session.position + 1} of {session.total}: order {group.order_number} "
            f"(pages {group.page_numbers}), confidence {group.match_confidence.value.upper()}, "
            f"current label: {label.page_number if label else 'none'}",
            file=stdout
        )
        for index, candidate in enumerate(group.label_candidates):
            print(
                f"  [{index}] page {candidate.label.page_number} "
                f"score {candidate.score}: {', '.join(candidate.match_reasons)}",
                file=stdout
            )
        print("Choice ([0-9] confirm, k keep, s skip) [s]: ", end="", file=stdout)
        stdout.flush()

        answer = stdin.readline().strip().lower()
        try:
            if answer.isdigit():
                session.confirm(candidate_index=int(answer))
            elif answer == "k":
                session.confirm(use_current=True)
            else:
                session.skip()
        except InvalidSelectionError as e:
            print(f"  {e}", file=stdout)


def log_analysis(analysis) -> None:
    """Log the summary and every warning of an analysis."""
    logger = get_logger(__name__)
    summary = analysis.summary

    logger.info(f"Packing slips detected: {summary.total_packing_slips_detected}")
    logger.info(f"Shipping labels detected: {summary.total_shipping_labels_detected}")
    logger.info(
        f"Orders matched: {summary.orders_matched} "
        f"({pluralize(summary.packing_slips_matched, 'packing slip')})"
    )

    for slip in analysis.orphaned_slips:
        logger.warning(f"Missing shipping label: order {slip.order_number}, page {slip.page_number}")
    for anomaly in analysis.non_standard_service_labels:
        logger.warning(
            f"Non-standard service: order {anomaly.order_number}, "
            f"label page {anomaly.page_number}, {anomaly.service}"
        )
    for label in analysis.unmatched_labels:
        logger.warning(f"Unmatched shipping label: page {label.page_number}")


def main(argv=None) -> int:
    """
    Entry point for command-line execution.

    Returns:
        Exit code (0 success, 1 error, 2 confirmation required with
        ``--strict``, 130 cancelled).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        analysis = run_analysis(args.input, strategy=args.strategy)

        if args.review and analysis.uncertain_matches:
            review_interactively(analysis)

        log_analysis(analysis)

        if args.output:
            from slipmatch.reporting import ReportExporter
            ReportExporter().export(analysis, args.output)

        logger.info("=" * 60)
        logger.info(
            f"Analysis complete. {pluralize(len(analysis.confirmed_orders()), 'order')} "
            f"ready for label generation."
        )
        logger.info("=" * 60)

        if args.strict and (analysis.uncertain_matches or analysis.summary.requires_confirmation):
            return EXIT_REVIEW_REQUIRED
        return EXIT_OK

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    except SlipMatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return EXIT_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
