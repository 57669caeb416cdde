"""High-level orchestration for measuring pages and writing picture markup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Playwright, async_playwright

from .config import OptimizerConfig
from .markup import join_blocks, render_page
from .measure import measure_url
from .models import BatchSummary, PageMeasurementRecord, PageResult, PageTarget

logger = logging.getLogger("responsive_pictures")


def write_markup(output_root: Path, output_name: str, markup: str) -> Path:
    """Persist a page artifact; filesystem errors propagate to the caller."""
    output_path = output_root / output_name
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(markup, encoding="utf-8")
    return output_path


async def process_page(
    playwright: Playwright,
    target: PageTarget,
    config: OptimizerConfig,
) -> PageResult:
    """Measure one page and write its markup if it has any raster images."""
    try:
        record: PageMeasurementRecord = await measure_url(playwright, target.url, config)
        blocks = {} if record.error else render_page(record, config.catalog)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Error optimizing page %s", target.url)
        return PageResult(page_url=target.url, error=str(exc) or type(exc).__name__)

    if record.error:
        return PageResult(page_url=target.url, error=record.error)
    if not blocks:
        logger.warning("No images found on %s", target.url)
        return PageResult(page_url=target.url)

    markup = join_blocks(list(blocks.values()))
    output_path = write_markup(config.output_root, target.output_name, markup)
    logger.info("Optimized %d images. Saved to %s", len(blocks), output_path)
    return PageResult(
        page_url=target.url,
        image_count=len(blocks),
        above_the_fold_count=sum(
            1 for image_id in blocks if record.images[image_id].above_the_fold
        ),
        output_path=output_path,
    )


def summarize(results: List[PageResult], output_dir: Path) -> BatchSummary:
    return BatchSummary(
        total_pages=len(results),
        pages_with_images=sum(1 for r in results if r.image_count > 0),
        total_images=sum(r.image_count for r in results),
        above_the_fold_images=sum(r.above_the_fold_count for r in results),
        pages_with_errors=sum(1 for r in results if r.error),
        output_dir=output_dir,
        results=results,
    )


async def run_optimizer(
    pages: List[PageTarget],
    config: OptimizerConfig,
    playwright: Optional[Playwright] = None,
) -> BatchSummary:
    """Process pages one at a time, each in its own browser session."""
    config.output_root.mkdir(parents=True, exist_ok=True)
    results: List[PageResult] = []

    async def _run(pw: Playwright) -> None:
        for index, target in enumerate(pages, start=1):
            logger.info("Processing page %d/%d: %s", index, len(pages), target.permalink)
            results.append(await process_page(pw, target, config))

    if playwright is not None:
        await _run(playwright)
    else:
        async with async_playwright() as pw:
            await _run(pw)

    summary = summarize(results, config.output_root)
    logger.info(
        "Scan complete: %d pages, %d with images, %d images (%d above the fold), %d errors",
        summary.total_pages,
        summary.pages_with_images,
        summary.total_images,
        summary.above_the_fold_images,
        summary.pages_with_errors,
    )
    return summary
