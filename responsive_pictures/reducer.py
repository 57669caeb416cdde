"""Turn raw rendered geometry into target raster sizes.

Everything here is pure: the orchestrator hands in whatever the browser
reported and gets back the records the markup synthesizer consumes.
"""

from __future__ import annotations

import math
from typing import Dict, Mapping, Optional

from .config import DEFAULT_PIXEL_RATIO, MAX_SCALED_WIDTH
from .models import Dimensions, DiscoveredImage, ImageRecord, ScaledMeasurement

MIN_DISPLAY_SIZE = 1


def round_half_up(value: float) -> int:
    """Round like the browser's ``Math.round`` rather than banker's rounding."""
    return int(math.floor(value + 0.5))


def classify_fold(top: float, bottom: float, viewport_height: int) -> bool:
    """An element is above the fold when any part of it overlaps the first screen."""
    return top < viewport_height and bottom > 0


def reduce_geometry(
    raw: Optional[Dimensions],
    max_scaled_width: int = MAX_SCALED_WIDTH,
    pixel_ratio: int = DEFAULT_PIXEL_RATIO,
) -> Optional[ScaledMeasurement]:
    """Compute the original and scaled size for one breakpoint measurement.

    Returns ``None`` when nothing was measured. Collapsed boxes are clamped to
    1x1 and are never scaled up.
    """
    if raw is None:
        return None

    original = Dimensions(
        width=max(raw.width, MIN_DISPLAY_SIZE),
        height=max(raw.height, MIN_DISPLAY_SIZE),
    )
    if original.is_degenerate:
        return ScaledMeasurement(original=original, scaled=original)

    scaled_width = original.width * pixel_ratio
    scaled_height = original.height * pixel_ratio
    if scaled_width > max_scaled_width:
        scaled_height = max(
            round_half_up(scaled_height * max_scaled_width / scaled_width),
            MIN_DISPLAY_SIZE,
        )
        scaled_width = max_scaled_width

    return ScaledMeasurement(
        original=original,
        scaled=Dimensions(width=scaled_width, height=scaled_height),
    )


def reduce_measurements(
    raw_by_key: Mapping[str, Optional[Dimensions]],
    max_scaled_width: int = MAX_SCALED_WIDTH,
    pixel_ratio: int = DEFAULT_PIXEL_RATIO,
) -> Dict[str, ScaledMeasurement]:
    """Reduce every captured breakpoint, dropping the ones with no geometry."""
    measurements: Dict[str, ScaledMeasurement] = {}
    for key, raw in raw_by_key.items():
        measurement = reduce_geometry(raw, max_scaled_width, pixel_ratio)
        if measurement is not None:
            measurements[key] = measurement
    return measurements


def needs_intermediate_breakpoint(
    measurements: Mapping[str, ScaledMeasurement],
    desktop_key: str,
) -> bool:
    # A 1x1 desktop box means the element never got real layout at that width.
    desktop = measurements.get(desktop_key)
    return desktop is not None and desktop.original.is_degenerate


def reduce_image(
    image: DiscoveredImage,
    raw_by_key: Mapping[str, Optional[Dimensions]],
    desktop_key: str,
    above_the_fold: bool = False,
    max_scaled_width: int = MAX_SCALED_WIDTH,
    pixel_ratio: int = DEFAULT_PIXEL_RATIO,
) -> ImageRecord:
    """Build the finished record for one image."""
    measurements = reduce_measurements(raw_by_key, max_scaled_width, pixel_ratio)
    return ImageRecord(
        image=image,
        above_the_fold=above_the_fold,
        measurements=measurements,
        needs_intermediate_breakpoint=needs_intermediate_breakpoint(
            measurements, desktop_key
        ),
    )
