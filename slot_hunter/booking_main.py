"""
Command line entry point for the slot hunter.

The date is the only required argument; token and case URL normally come
from the environment or the .env file.
"""

import argparse
import asyncio
import logging
import sys

from slot_hunter.amain import main_async, parse_target_date
from slot_hunter.config import HunterSettings


def build_settings(args: argparse.Namespace) -> HunterSettings:
    overrides = {}
    if args.token:
        overrides["access_token"] = args.token
    if args.case_url:
        overrides["case_url"] = args.case_url
    if args.max_cycles is not None:
        overrides["max_cycles"] = args.max_cycles
    return HunterSettings(**overrides)


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Hunt for and reserve an appointment slot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s 2024-06-01
  %(prog)s 2024-06-01 --case-url https://inpol.mazowieckie.pl/home/cases/<id>
  %(prog)s 2024-06-01 --max-cycles 10 -v
        """,
    )

    parser.add_argument("date", type=str, help="Target date (YYYY-MM-DD)")
    parser.add_argument("--token", type=str, help="Bearer token (overrides env)")
    parser.add_argument("--case-url", type=str, help="URL of the case page")
    parser.add_argument("--max-cycles", type=int, help="Maximum polling cycles")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        target_date = parse_target_date(args.date)
    except ValueError:
        print(f"⛔ Invalid date: {args.date!r}, expected YYYY-MM-DD")
        sys.exit(2)

    try:
        success = asyncio.run(main_async(target_date, build_settings(args)))
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n👋 Cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
