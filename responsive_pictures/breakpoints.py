"""Viewport breakpoints the page measurements are taken at."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class Breakpoint:
    """A named viewport and the media query its sources are emitted under."""

    name: str
    width: int
    height: int
    label: str
    media: str

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Breakpoint {self.name!r} needs a positive viewport, got {self.width}x{self.height}"
            )

    @property
    def key(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def viewport(self) -> dict:
        """Viewport mapping in the shape Playwright's ``set_viewport_size`` expects."""
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class BreakpointCatalog:
    """Fixed, ordered set of breakpoints.

    The nominal breakpoints are mobile, tablet and desktop. ``large_tablet``
    is synthetic: it only appears in markup for images whose desktop layout
    collapsed, and is only measured when explicitly requested.
    """

    mobile: Breakpoint
    tablet: Breakpoint
    large_tablet: Breakpoint
    desktop: Breakpoint
    narrowed_desktop_media: str

    def breakpoints(self, include_intermediate: bool = False) -> Tuple[Breakpoint, ...]:
        if include_intermediate:
            return (self.mobile, self.tablet, self.large_tablet, self.desktop)
        return (self.mobile, self.tablet, self.desktop)

    def __iter__(self) -> Iterator[Breakpoint]:
        return iter(self.breakpoints())

    @property
    def narrowest(self) -> Breakpoint:
        return min(self.breakpoints(), key=lambda bp: bp.width)

    def get(self, key: str) -> Breakpoint:
        for bp in self.breakpoints(include_intermediate=True):
            if bp.key == key:
                return bp
        raise KeyError(key)


MOBILE = Breakpoint("mobile", 320, 675, "Mobile", "(max-width: 600px)")
TABLET = Breakpoint("tablet", 1024, 800, "Tablet", "(max-width: 1024px)")
LARGE_TABLET = Breakpoint(
    "large-tablet",
    1440,
    900,
    "Large Tablet",
    "(min-width: 1025px) and (max-width: 1439px)",
)
DESKTOP = Breakpoint("desktop", 1920, 1080, "Desktop", "(min-width: 1024px)")

DEFAULT_CATALOG = BreakpointCatalog(
    mobile=MOBILE,
    tablet=TABLET,
    large_tablet=LARGE_TABLET,
    desktop=DESKTOP,
    narrowed_desktop_media="(min-width: 1440px)",
)
