"""Locate site pages from content files and their frontmatter permalinks."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .models import PageNotFoundError, PageTarget
from .utils import normalize_permalink, output_name_for_permalink

logger = logging.getLogger("responsive_pictures")

CONTENT_SUFFIXES = {".html", ".njk"}
INDEX_PERMALINK = "/"
_FRONTMATTER_PATTERN = re.compile(r"\A---\s*\r?\n(.*?)\r?\n---\s*(?:\r?\n|\Z)", re.DOTALL)
_QUOTED_PATTERN = re.compile(r"""['"]([^'"]+)['"]""")


def find_content_files(content_dir: Path) -> List[Path]:
    """Recursively collect template files under ``content_dir`` in a stable order."""
    files: List[Path] = []
    try:
        entries = sorted(content_dir.iterdir())
    except OSError as exc:
        logger.error("Error scanning directory %s: %s", content_dir, exc)
        return files
    for entry in entries:
        if entry.is_dir():
            files.extend(find_content_files(entry))
        elif entry.suffix in CONTENT_SUFFIXES:
            files.append(entry)
    return files


def _permalink_from_frontmatter(text: str) -> Optional[str]:
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return None
    try:
        data: Any = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        return _permalink_from_lines(match.group(1))
    if isinstance(data, dict) and isinstance(data.get("permalink"), str):
        return data["permalink"]
    return None


def _permalink_from_lines(text: str) -> Optional[str]:
    # Templated frontmatter is not always valid YAML; fall back to the first quoted value.
    for line in text.splitlines():
        if "permalink:" in line:
            quoted = _QUOTED_PATTERN.search(line)
            return quoted.group(1) if quoted else None
    return None


def extract_permalink(path: Path) -> Optional[str]:
    """Read the ``permalink`` of a content file, normalised to ``/route/``."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading file %s: %s", path, exc)
        return None

    permalink = _permalink_from_frontmatter(text)
    if permalink is None and not text.startswith("---"):
        permalink = _permalink_from_lines(text)
    if not permalink or not permalink.strip():
        logger.info("No permalink found in frontmatter for %s", path)
        return None
    permalink = normalize_permalink(permalink)
    logger.debug("Found permalink in frontmatter: %s", permalink)
    return permalink


def build_page_list(
    content_dir: Path,
    base_url: str,
    only: Optional[str] = None,
) -> List[PageTarget]:
    """List every page to measure, always including the site index.

    When ``only`` names a permalink, just that page is returned; a permalink
    that matches nothing raises ``PageNotFoundError``.
    """
    base_url = base_url.rstrip("/")
    files = find_content_files(content_dir)
    logger.info("Found %d content files in %s", len(files), content_dir)

    pages: List[PageTarget] = []
    seen = set()
    for path in files:
        permalink = extract_permalink(path)
        if permalink is None or permalink in seen:
            continue
        seen.add(permalink)
        pages.append(
            PageTarget(
                url=f"{base_url}{permalink}",
                output_name=output_name_for_permalink(permalink),
                permalink=permalink,
                source_path=path,
            )
        )

    if INDEX_PERMALINK not in seen:
        pages.append(
            PageTarget(
                url=f"{base_url}{INDEX_PERMALINK}",
                output_name=output_name_for_permalink(INDEX_PERMALINK),
                permalink=INDEX_PERMALINK,
            )
        )

    if only is not None:
        wanted = normalize_permalink(only)
        pages = [page for page in pages if page.permalink == wanted]
        if not pages:
            raise PageNotFoundError(f"No content file declares permalink {wanted}")
    return pages
