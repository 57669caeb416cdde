"""Command-line entry point for the responsive image optimizer."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_CONTENT_DIR,
    DEFAULT_OUTPUT_DIR,
    MAX_SCALED_WIDTH,
    OptimizerConfig,
)
from .discovery import build_page_list
from .models import BatchSummary, OptimizerError
from .optimizer import run_optimizer
from .preflight import check_server

logger = logging.getLogger("responsive_pictures.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Measure how images render at each breakpoint of a running site and "
            "write responsive <picture> markup for the template image pipeline."
        ),
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Development server URL (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        type=Path,
        help="Directory where per-page markup should be written",
    )
    parser.add_argument(
        "--content-dir",
        default=DEFAULT_CONTENT_DIR,
        type=Path,
        help="Directory scanned for .html/.njk files with permalinks",
    )
    parser.add_argument(
        "--page",
        default=None,
        help="Only process the page with this permalink",
    )
    parser.add_argument(
        "--settle",
        type=float,
        default=0.3,
        help="Seconds to wait after each viewport change",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--max-width",
        type=int,
        default=MAX_SCALED_WIDTH,
        help="Largest raster width ever requested",
    )
    parser.add_argument(
        "--measure-intermediate",
        action="store_true",
        help="Also measure the large-tablet breakpoint instead of reusing tablet sizes",
    )
    parser.add_argument(
        "--skip-preflight",
        action="store_true",
        help="Do not check that the development server is reachable first",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON on STDOUT",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> OptimizerConfig:
    return OptimizerConfig(
        output_root=Path(args.output_dir).resolve(),
        base_url=args.base_url,
        content_dir=Path(args.content_dir).resolve(),
        max_scaled_width=args.max_width,
        settle_delay=args.settle,
        navigation_timeout=args.timeout,
        measure_intermediate=args.measure_intermediate,
    )


def _log_summary(summary: BatchSummary, elapsed: float) -> None:
    logger.info("Finished in %.2fs", elapsed)
    logger.info("  Total pages scanned: %d", summary.total_pages)
    logger.info("  Pages with images: %d", summary.pages_with_images)
    logger.info("  Total images processed: %d", summary.total_images)
    logger.info("  Above-the-fold images: %d", summary.above_the_fold_images)
    logger.info("  Pages with errors: %d", summary.pages_with_errors)
    logger.info("  Markup saved to: %s", summary.output_dir)


def run(args: argparse.Namespace) -> Optional[BatchSummary]:
    """Run one optimization pass; returns None when the batch could not start."""
    config = build_config(args)
    logger.info("Base URL: %s", config.base_url)
    logger.info("Output directory: %s", config.output_root)

    if not args.skip_preflight and not check_server(config.base_url):
        return None

    try:
        pages = build_page_list(config.content_dir, config.base_url, only=args.page)
    except OptimizerError as exc:
        logger.error("%s", exc)
        return None

    logger.info("Pages to process: %d", len(pages))
    for index, page in enumerate(pages, start=1):
        logger.debug("  %d. %s (output: %s)", index, page.url, page.output_name)

    overall_start = time.perf_counter()
    try:
        summary = asyncio.run(run_optimizer(pages, config))
    except OSError as exc:
        logger.error("Could not write markup: %s", exc)
        return None
    _log_summary(summary, time.perf_counter() - overall_start)
    return summary


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    summary = run(args)
    if summary is None:
        return 1
    if args.json:
        sys.stdout.write(json.dumps(summary.to_dict(), indent=2) + "\n")
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
