"""Utility helpers for route normalization and image identity."""

from __future__ import annotations

import hashlib
import re
from typing import Optional

SLASH_PATTERN = re.compile(r"/+")
CONTENT_KEY_LENGTH = 12


def normalize_permalink(value: str) -> str:
    """Ensure a permalink starts and ends with a single slash."""
    value = value.strip()
    if not value.startswith("/"):
        value = "/" + value
    if not value.endswith("/"):
        value = value + "/"
    return SLASH_PATTERN.sub("/", value)


def output_name_for_permalink(permalink: str, fallback: str = "index") -> str:
    """Map a route to a flat artifact filename: ``/services/roofing/`` -> ``services-roofing.html``."""
    stem = normalize_permalink(permalink).strip("/").replace("/", "-")
    return f"{stem or fallback}.html"


def content_key(source_url: str, container_class: Optional[str], ordinal: int = 0) -> str:
    """Identity of an image that survives DOM reordering.

    ``ordinal`` separates repeated uses of the same image in the same container.
    """
    digest = hashlib.sha1(
        f"{source_url}\0{container_class or ''}\0{ordinal}".encode("utf-8")
    ).hexdigest()
    return digest[:CONTENT_KEY_LENGTH]
