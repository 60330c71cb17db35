#!/usr/bin/env python3
"""Parse race chart glyph dumps and log a summary line per race.

Usage:
    python scripts/parse_chart.py path/to/chart.glyphs [more.glyphs ...]

Each file holds one or more pages, every page starting with its own
glyph header row. Exits non-zero when any page failed to parse.
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from racechart.config import configure_logging, get_settings  # noqa: E402
from racechart.exceptions import ChartParserError  # noqa: E402
from racechart.glyphs import read_pages  # noqa: E402
from racechart.parser import ChartParser, ParseSuccess  # noqa: E402

logger = logging.getLogger("parse_chart")


def parse_file(parser: ChartParser, path: Path) -> int:
    """Parse one file; returns the number of failed pages."""
    try:
        pages = read_pages(path.read_text(encoding="utf-8"))
    except ChartParserError as e:
        logger.error(f"File: {path.name} - {e}")
        return 1

    failures = 0
    for outcome in parser.parse_pages(pages, file_name=path.name):
        if isinstance(outcome, ParseSuccess):
            result = outcome.result
            if result.cancellation.cancelled:
                logger.info(f"{result.summary_text()}: cancelled ({result.cancellation.reason})")
                continue
            winners = ", ".join(s.horse_name for s in result.winners) or "none"
            logger.info(
                f"{result.summary_text()}: {result.number_of_runners} starters, "
                f"winner(s) {winners}, final time {result.final_time}"
            )
        else:
            failures += 1
    return failures


def main(argv=None) -> int:
    arg_parser = argparse.ArgumentParser(description="Parse race chart glyph dumps")
    arg_parser.add_argument("files", nargs="+", type=Path, help="glyph dump files")
    args = arg_parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    parser = ChartParser(settings=settings)

    failures = sum(parse_file(parser, path) for path in args.files)
    logger.info(f"Parsed {len(args.files)} file(s), {failures} failed page(s)")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
