"""Render measured images into ``<picture>`` markup for the template pipeline.

The ``{% getUrl ... %}`` directives are consumed by the site's template
processor, which performs the actual resizing and transcoding. Their syntax
must be reproduced exactly.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .breakpoints import DEFAULT_CATALOG, Breakpoint, BreakpointCatalog
from .models import (
    Dimensions,
    ImageRecord,
    MarkupError,
    PageMeasurementRecord,
    ScaledMeasurement,
)

logger = logging.getLogger("responsive_pictures")

ASSETS_SEGMENT = "/assets/"
SOURCE_FORMATS = ("avif", "webp")
MIME_TYPES = {
    "avif": "image/avif",
    "webp": "image/webp",
    "jpeg": "image/jpeg",
    "png": "image/png",
}


@dataclass(frozen=True)
class SourceSet:
    """One breakpoint's worth of ``<source>`` lines."""

    label: str
    media: str
    size: Dimensions


def asset_path(source_url: str) -> str:
    """Rewrite an absolute image URL to start at the site's ``/assets/`` root."""
    if ASSETS_SEGMENT in source_url:
        return ASSETS_SEGMENT + source_url.split(ASSETS_SEGMENT, 1)[1]
    return source_url


def fallback_format(source_url: str) -> str:
    """PNG sources keep a PNG fallback; everything else falls back to JPEG."""
    path = source_url.split("?", 1)[0].split("#", 1)[0]
    return "png" if path.lower().endswith(".png") else "jpeg"


def render_directive(path: str, size: Dimensions, fmt: str) -> str:
    return (
        f'{{% getUrl "{path}" | resize({{ width: {size.width}, height: {size.height} }}) '
        f"| {fmt} %}}"
    )


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def _first_available(
    record: ImageRecord, breakpoints: List[Breakpoint]
) -> Optional[Tuple[Breakpoint, ScaledMeasurement]]:
    for bp in breakpoints:
        measurement = record.measurements.get(bp.key)
        if measurement is not None:
            return bp, measurement
    return None


def select_sources(record: ImageRecord, catalog: BreakpointCatalog) -> List[SourceSet]:
    """Pick the breakpoints to emit, in ascending specificity."""
    measurements = record.measurements
    sources: List[SourceSet] = []

    def add(bp: Breakpoint, media: str, measurement: Optional[ScaledMeasurement]) -> None:
        if measurement is not None:
            sources.append(SourceSet(bp.label, media, measurement.scaled))

    add(catalog.mobile, catalog.mobile.media, measurements.get(catalog.mobile.key))
    add(catalog.tablet, catalog.tablet.media, measurements.get(catalog.tablet.key))

    desktop_media = catalog.desktop.media
    if record.needs_intermediate_breakpoint:
        # Synthetic breakpoint: borrow the nearest narrower measurement.
        found = _first_available(
            record, [catalog.large_tablet, catalog.tablet, catalog.mobile]
        )
        if found is None:
            logger.debug(
                "No measurement to size the %s sources of %s",
                catalog.large_tablet.label,
                record.image.id,
            )
        else:
            add(catalog.large_tablet, catalog.large_tablet.media, found[1])
        desktop_media = catalog.narrowed_desktop_media

    add(catalog.desktop, desktop_media, measurements.get(catalog.desktop.key))
    return sources


def render_preload(path: str, size: Dimensions, media: str) -> str:
    href = render_directive(path, size, "avif")
    return (
        f'<link rel="preload" as="image" href="{href}" type="{MIME_TYPES["avif"]}" '
        f'media="{media}">'
    )


def synthesize(
    image_id: str,
    record: PageMeasurementRecord,
    catalog: BreakpointCatalog = DEFAULT_CATALOG,
) -> str:
    """Render the markup block for one image of a measured page.

    Raises ``KeyError`` for an unknown id and ``MarkupError`` when the image
    has no measurement at any breakpoint.
    """
    entry = record.images[image_id]
    image = entry.image
    ordered = list(catalog.breakpoints(include_intermediate=True))

    # The fallback <img> is sized from desktop, or the widest breakpoint we have.
    widest = _first_available(entry, list(reversed(ordered)))
    if widest is None:
        raise MarkupError(f"{image_id} ({image.source_url}) has no measurements")
    desktop = entry.measurements.get(catalog.desktop.key) or widest[1]

    path = asset_path(image.source_url)
    fmt = fallback_format(image.source_url)
    lines: List[str] = []

    if entry.above_the_fold:
        # Preload the narrowest measured variant, under that breakpoint's own query.
        preload_bp, preload = _first_available(entry, ordered)
        lines.append(render_preload(path, preload.scaled, preload_bp.media))

    class_attr = f' class="{_attr(image.container_class)}"' if image.container_class else ""
    lines.append(f"<picture{class_attr}>")
    for source in select_sources(entry, catalog):
        lines.append(f"\t<!--{source.label} Image-->")
        for source_fmt in SOURCE_FORMATS + (fmt,):
            srcset = render_directive(path, source.size, source_fmt)
            lines.append(
                f'\t<source media="{source.media}" srcset="{srcset}" '
                f'type="{MIME_TYPES[source_fmt]}">'
            )

    loading = "" if entry.above_the_fold else ' loading="lazy"'
    lines.append(
        f'\t<img src="{render_directive(path, desktop.scaled, fmt)}" '
        f'alt="{_attr(image.alt_text)}" '
        f'width="{desktop.original.width}" height="{desktop.original.height}"'
        f'{loading} decoding="async">'
    )
    lines.append("</picture>")
    return "\n".join(lines)


def render_page(
    record: PageMeasurementRecord,
    catalog: BreakpointCatalog = DEFAULT_CATALOG,
) -> Dict[str, str]:
    """Render every image on a page in discovery order, skipping unrenderable ones.

    Returns the blocks keyed by image id.
    """
    blocks: Dict[str, str] = {}
    for image_id in record.images:
        try:
            blocks[image_id] = synthesize(image_id, record, catalog)
        except MarkupError as exc:
            logger.warning("Skipping %s on %s: %s", image_id, record.url, exc)
    return blocks


def join_blocks(blocks: List[str]) -> str:
    """Concatenate blocks into a page artifact separated by blank lines."""
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"
