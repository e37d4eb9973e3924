"""
Entry point for the loan surplus planner.

Usage:
    python main.py              # launches the web app at localhost:5000
    python main.py --cli        # runs the terminal interface
    python main.py --verbose    # debug logging from the engine
"""

import argparse
import logging

import config as cfg


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Loan Surplus Planner: bank vs pay down vs invest",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--no-pdf",
        action="store_true",
        help="Skip the PDF report in terminal mode",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cli:
        from cli import run_cli
        run_cli(pdf_path=None if args.no_pdf else cfg.PDF_PATH)
    else:
        from app import run_web
        run_web()


if __name__ == "__main__":
    main()
