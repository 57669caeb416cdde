"""Drive a rendered page through every breakpoint and collect image geometry."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)

from .config import OptimizerConfig
from .models import Dimensions, DiscoveredImage, PageMeasurementRecord
from .reducer import classify_fold, reduce_image
from .utils import content_key

logger = logging.getLogger("responsive_pictures")

PICTURE_SELECTOR = "picture"
IMAGE_SELECTOR = "img"

_CLASS_SCRIPT = "(picture) => picture.className || ''"
_INFO_SCRIPT = "(img) => ({ src: img.src, alt: img.alt || '' })"
_RECT_SCRIPT = """(img) => {
    const rect = img.getBoundingClientRect();
    return {
        top: rect.top,
        bottom: rect.bottom,
        width: Math.round(rect.width),
        height: Math.round(rect.height),
    };
}"""

Discovered = Tuple[DiscoveredImage, Any]


def is_svg(source: Optional[str]) -> bool:
    return bool(source) and source.lower().endswith(".svg")


async def discover_images(page: Page) -> List[Discovered]:
    """Find raster ``<picture>`` images in DOM order.

    Pictures without an ``<img>`` child and SVG sources are skipped. Ids are
    positional over every picture on the page, so skipped pictures still
    consume an index.
    """
    pictures = await page.query_selector_all(PICTURE_SELECTOR)
    logger.info("Found %d picture elements", len(pictures))

    discovered: List[Discovered] = []
    seen: Dict[Tuple[str, str], int] = {}
    for index, picture in enumerate(pictures):
        img = await picture.query_selector(IMAGE_SELECTOR)
        if img is None:
            continue
        if is_svg(await img.get_attribute("src")):
            logger.debug("Skipping SVG picture %d", index)
            continue

        container_class = await picture.evaluate(_CLASS_SCRIPT) or None
        info = await img.evaluate(_INFO_SCRIPT)
        source_url = info.get("src") or ""
        ordinal = seen.get((source_url, container_class or ""), 0)
        seen[(source_url, container_class or "")] = ordinal + 1

        image = DiscoveredImage(
            id=f"image-{index}",
            source_url=source_url,
            alt_text=info.get("alt") or "",
            container_class=container_class,
            content_key=content_key(source_url, container_class, ordinal),
        )
        logger.debug("Discovered %s (%s) key=%s", image.id, source_url, image.content_key)
        discovered.append((image, img))
    return discovered


async def read_rect(element: Any) -> Optional[Dict[str, float]]:
    """Bounding box of an element, or ``None`` if the browser could not measure it."""
    try:
        return await element.evaluate(_RECT_SCRIPT)
    except PlaywrightError as exc:
        logger.debug("Measurement failed: %s", exc)
        return None


async def _settle(page: Page, config: OptimizerConfig) -> None:
    if config.settle_delay:
        await page.wait_for_timeout(int(config.settle_delay * 1000))


async def measure_page(
    page: Page,
    url: str,
    config: OptimizerConfig,
) -> PageMeasurementRecord:
    """Measure every raster image on ``url`` at each configured breakpoint.

    Navigation failures are folded into the returned record instead of being
    raised, so the caller can move on to the next page.
    """
    catalog = config.catalog
    try:
        response = await page.goto(url, wait_until="networkidle")
    except PlaywrightTimeoutError as exc:
        logger.error("Timeout while loading %s: %s", url, exc)
        return PageMeasurementRecord(url=url, error=f"Timeout: {exc}")
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unexpected error loading %s", url)
        return PageMeasurementRecord(url=url, error=str(exc) or type(exc).__name__)
    if response is not None and response.status >= 400:
        logger.error("Loading %s returned HTTP %d", url, response.status)
        return PageMeasurementRecord(url=url, error=f"HTTP {response.status}")
    logger.info("Page loaded successfully")

    discovered = await discover_images(page)

    narrowest = catalog.narrowest
    await page.set_viewport_size(narrowest.viewport)
    await _settle(page, config)
    fold: Dict[str, bool] = {}
    for image, element in discovered:
        rect = await read_rect(element)
        fold[image.id] = bool(rect) and classify_fold(
            rect["top"], rect["bottom"], narrowest.height
        )

    raw: Dict[str, Dict[str, Optional[Dimensions]]] = {
        image.id: {} for image, _ in discovered
    }
    for bp in catalog.breakpoints(include_intermediate=config.measure_intermediate):
        await page.set_viewport_size(bp.viewport)
        await _settle(page, config)
        for image, element in discovered:
            rect = await read_rect(element)
            raw[image.id][bp.key] = (
                Dimensions(width=int(rect["width"]), height=int(rect["height"]))
                if rect
                else None
            )

    record = PageMeasurementRecord(url=url)
    for image, _ in discovered:
        record.images[image.id] = reduce_image(
            image,
            raw[image.id],
            desktop_key=catalog.desktop.key,
            above_the_fold=fold[image.id],
            max_scaled_width=config.max_scaled_width,
            pixel_ratio=config.pixel_ratio,
        )
    return record


async def measure_url(
    playwright: Playwright,
    url: str,
    config: OptimizerConfig,
) -> PageMeasurementRecord:
    """Open a fresh browser for ``url``, measure it and close the browser again."""
    logger.info("Measuring images on %s", url)
    browser = await playwright.chromium.launch(headless=True)
    try:
        context = await browser.new_context()
        page = await context.new_page()
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        return await measure_page(page, url, config)
    finally:
        await browser.close()
