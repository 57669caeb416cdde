"""Data models used throughout the measurement pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


class OptimizerError(Exception):
    """Base class for reportable optimizer failures."""


class PageNotFoundError(OptimizerError):
    """Raised when a requested page cannot be located among the content files."""


class MarkupError(OptimizerError):
    """Raised when an image record carries nothing to build markup from."""


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int

    @property
    def is_degenerate(self) -> bool:
        return self.width == 1 and self.height == 1


@dataclass(frozen=True)
class DiscoveredImage:
    """One ``<picture>`` candidate found on a rendered page."""

    id: str
    source_url: str
    alt_text: str
    container_class: Optional[str]
    content_key: str = ""


@dataclass(frozen=True)
class ScaledMeasurement:
    """Display size at one breakpoint and the raster size to request for it."""

    original: Dimensions
    scaled: Dimensions


@dataclass
class ImageRecord:
    image: DiscoveredImage
    above_the_fold: bool = False
    measurements: Dict[str, ScaledMeasurement] = field(default_factory=dict)
    needs_intermediate_breakpoint: bool = False


@dataclass
class PageMeasurementRecord:
    """Everything measured on one page, keyed by image id in discovery order."""

    url: str
    images: Dict[str, ImageRecord] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def above_the_fold_count(self) -> int:
        return sum(1 for record in self.images.values() if record.above_the_fold)


@dataclass(frozen=True)
class PageTarget:
    """A page to process and where its markup should be written."""

    url: str
    output_name: str
    permalink: str
    source_path: Optional[Path] = None


@dataclass
class PageResult:
    page_url: str
    image_count: int = 0
    above_the_fold_count: int = 0
    output_path: Optional[Path] = None
    error: Optional[str] = None


@dataclass
class BatchSummary:
    total_pages: int
    pages_with_images: int
    total_images: int
    above_the_fold_images: int
    pages_with_errors: int
    output_dir: Path
    results: List[PageResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalPages": self.total_pages,
            "pagesWithImages": self.pages_with_images,
            "totalImages": self.total_images,
            "aboveTheFoldImages": self.above_the_fold_images,
            "pagesWithErrors": self.pages_with_errors,
            "outputDir": str(self.output_dir),
            "pages": [
                {
                    "pageUrl": result.page_url,
                    "imageCount": result.image_count,
                    "aboveTheFoldCount": result.above_the_fold_count,
                    "outputPath": str(result.output_path) if result.output_path else None,
                    "error": result.error,
                }
                for result in self.results
            ],
        }
