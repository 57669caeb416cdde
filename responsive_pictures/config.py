"""Configuration objects and constants for the image optimizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .breakpoints import DEFAULT_CATALOG, BreakpointCatalog

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_OUTPUT_DIR = "image-optimizations"
DEFAULT_CONTENT_DIR = "src/content"
MAX_SCALED_WIDTH = 2500
DEFAULT_PIXEL_RATIO = 2


@dataclass
class OptimizerConfig:
    """Top-level settings that control measurement and markup generation."""

    output_root: Path
    base_url: str = DEFAULT_BASE_URL
    content_dir: Path = Path(DEFAULT_CONTENT_DIR)
    catalog: BreakpointCatalog = field(default=DEFAULT_CATALOG)
    max_scaled_width: int = MAX_SCALED_WIDTH
    pixel_ratio: int = DEFAULT_PIXEL_RATIO
    settle_delay: float = 0.3
    navigation_timeout: float = 30.0
    measure_intermediate: bool = False
