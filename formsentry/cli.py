"""
FormSentry command line

Runs the sign-up workflow once in a fresh Chromium and writes an HTML report.

Usage:
    formsentry [--url URL] [--headless] [--catalog PATH] [--report-dir DIR] [--verbose]

Examples:
    formsentry
    formsentry --headless --report-dir /tmp/signup-reports
    formsentry --catalog my_locators.json --verbose
"""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from playwright.sync_api import Error as PlaywrightError

from .config import SentryConfig
from .errors import FormSentryError
from .runner import SignUpRunner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formsentry",
        description="Drive the sign-up form end to end and report the outcome"
    )
    parser.add_argument("--url", help="Sign-up page URL (default: FORMSENTRY_BASE_URL or the dev sign-up page)")
    parser.add_argument(
        "--headless",
        action="store_true",
        default=None,
        help="Run Chromium without a window"
    )
    parser.add_argument("--catalog", help="JSON file overriding locator candidates per role")
    parser.add_argument("--report-dir", help="Directory for the HTML report and failure screenshots")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = SentryConfig.from_env(
        base_url=args.url,
        headless=args.headless,
        catalog_path=args.catalog,
        report_dir=args.report_dir
    )

    try:
        result = SignUpRunner(config).run_in_browser()
    except (FormSentryError, PlaywrightError, OSError, ValueError) as e:
        print(f"\nError during run: {e}")
        sys.exit(1)

    print(f"\nRun {result.status.upper()}")
    if result.error_message:
        print(result.error_message)
    if result.report_path:
        print(f"Report: {result.report_path}")
    sys.exit(0 if result.passed else 1)


if __name__ == "__main__":
    main()
