# main.py

"""Entry point for the price_search command line."""

import argparse
import asyncio
import logging
import sys

from price_search.cli.runner import cli_search, list_sources, run_login
from price_search.config.logging_config import setup_logging

logger = logging.getLogger("price_search.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_search",
        description=(
            "Search the local catalog and compare live prices "
            "from configured retailer sites."
        ),
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query.",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=["global", "local"],
        default="global",
        help="'local' skips external sources (default: global).",
    )
    parser.add_argument(
        "-s",
        "--sources",
        default=None,
        help="Comma-separated source IDs (default: all).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-d",
        "--data-dir",
        default=None,
        dest="data_dir",
        help="Directory holding products.json and sources.json.",
    )
    parser.add_argument(
        "--login",
        default=None,
        metavar="SOURCE_ID",
        help="Open a login window for a source and store its cookies.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show progress logs on stderr.",
    )
    parser.add_argument(
        "--list-sources",
        action="store_true",
        default=False,
        dest="list_sources",
        help="List configured sources and exit.",
    )
    return parser


def main() -> None:
    """Route to search, login or source listing."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("price_search starting, log file: %s", log_file)

    if args.list_sources:
        exit_code = list_sources(args.data_dir)
    elif args.login:
        exit_code = asyncio.run(run_login(args.login, args.data_dir))
    elif args.query is None:
        parser.print_help(sys.stderr)
        exit_code = 2
    else:
        exit_code = asyncio.run(
            cli_search(
                query=args.query,
                source_csv=args.sources,
                mode=args.mode,
                output_format=args.output_format,
                data_dir=args.data_dir,
            )
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
