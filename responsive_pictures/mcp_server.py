"""MCP server exposing responsive picture markup generation."""

from __future__ import annotations

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from playwright.async_api import async_playwright

from .config import OptimizerConfig
from .markup import join_blocks, render_page
from .measure import measure_url

logger = logging.getLogger("responsive_pictures.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="responsive-pictures")


async def _measure_once(url: str, config: OptimizerConfig) -> str:
    async with async_playwright() as playwright:
        record = await measure_url(playwright, url, config)
    if record.error:
        raise RuntimeError(f"Failed to load {url}: {record.error}")
    markup = join_blocks(list(render_page(record, config.catalog).values()))
    if not markup:
        raise RuntimeError(f"No raster <picture> images found on {url}")
    return markup


@mcp.tool()
async def picture_markup(
    url: str,
) -> str:
    """Measure the images on a rendered page and return responsive <picture> markup."""

    # Markup is returned, never written, so the output root is unused.
    config = OptimizerConfig(output_root=Path("."))
    return await _measure_once(url, config)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
