#!/usr/bin/env python3
"""Command-line entry point: search cards, build a deck and export it as JSON."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from controllers.app_controller import AppController
from services.search_service import SearchResults
from utils.constants import LOGS_DIR, ensure_base_dirs
from utils.errors import SerializationError
from utils.logging_config import configure_logging

DEFAULT_DISPLAY_WIDTH = 390


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search Pokémon TCG cards and export a deck.")
    parser.add_argument("query", help="Card name to search for")
    parser.add_argument(
        "--width",
        type=float,
        default=DEFAULT_DISPLAY_WIDTH,
        help="Display width used to size thumbnails (default: %(default)s)",
    )
    parser.add_argument(
        "--add",
        type=int,
        action="append",
        default=[],
        metavar="INDEX",
        help="Add the search result at INDEX (response order) to the deck; repeatable",
    )
    parser.add_argument("--export", type=Path, help="Write the deck JSON to this file")
    parser.add_argument("--timeout", type=float, default=60.0, help="Search timeout in seconds")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    ensure_base_dirs()
    configure_logging(LOGS_DIR, level="DEBUG" if args.verbose else "INFO")

    controller = AppController()
    finished: list[SearchResults] = []
    controller.start_search(args.query, args.width, on_finished=finished.append)
    try:
        if not controller.wait_for_search(args.timeout):
            logger.error(f"Search for {args.query!r} timed out after {args.timeout}s")
            return 1
        if controller.last_search_error is not None:
            print(f"Search failed: {controller.last_search_error}", file=sys.stderr)
            return 1

        results = finished[0].in_response_order() if finished else []
        for index, record in enumerate(results):
            print(f"[{index}] {record.id}  {record.name}")

        for index in args.add:
            if not 0 <= index < len(results):
                logger.warning(f"Ignoring --add {index}: only {len(results)} results")
                continue
            controller.deck.add_card(results[index])

        if controller.deck.unique_card_count():
            try:
                if args.export:
                    controller.export_deck(args.export)
                else:
                    print(controller.deck_json())
            except SerializationError as exc:
                print(f"Export failed: {exc}", file=sys.stderr)
                return 1
        return 0
    finally:
        controller.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
