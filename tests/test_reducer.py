from __future__ import annotations

import pytest

from responsive_pictures.models import Dimensions, DiscoveredImage
from responsive_pictures.reducer import (
    classify_fold,
    needs_intermediate_breakpoint,
    reduce_geometry,
    reduce_image,
    reduce_measurements,
    round_half_up,
)

DESKTOP = "1920x1080"


@pytest.mark.parametrize(
    ("raw", "scaled"),
    [
        ((160, 90), (320, 180)),
        ((512, 288), (1024, 576)),
        ((1200, 675), (2400, 1350)),
        ((1250, 10), (2500, 20)),
    ],
)
def test_scales_to_twice_display_size(raw, scaled) -> None:
    result = reduce_geometry(Dimensions(*raw))
    assert result.original == Dimensions(*raw)
    assert result.scaled == Dimensions(*scaled)


def test_caps_width_and_keeps_aspect_ratio() -> None:
    result = reduce_geometry(Dimensions(1300, 500))
    assert result.original == Dimensions(1300, 500)
    # 1000 * 2500 / 2600 = 961.54
    assert result.scaled == Dimensions(2500, 962)


def test_capped_height_rounds_half_up() -> None:
    # 4 * 2500 / 4000 = 2.5
    result = reduce_geometry(Dimensions(2000, 2))
    assert result.scaled == Dimensions(2500, 3)


def test_collapsed_box_is_clamped_and_not_scaled() -> None:
    result = reduce_geometry(Dimensions(0, 0))
    assert result.original == Dimensions(1, 1)
    assert result.scaled == Dimensions(1, 1)


def test_single_zero_dimension_is_clamped_then_scaled() -> None:
    result = reduce_geometry(Dimensions(0, 50))
    assert result.original == Dimensions(1, 50)
    assert result.scaled == Dimensions(2, 100)


def test_missing_geometry_yields_nothing() -> None:
    assert reduce_geometry(None) is None


def test_injected_limits() -> None:
    result = reduce_geometry(Dimensions(600, 300), max_scaled_width=1000, pixel_ratio=3)
    assert result.scaled == Dimensions(1000, 500)


def test_reduce_measurements_keeps_coverage_sparse() -> None:
    reduced = reduce_measurements({"320x675": Dimensions(100, 50), "1024x800": None})
    assert list(reduced) == ["320x675"]


def test_intermediate_flag_follows_desktop_original() -> None:
    collapsed = reduce_measurements({DESKTOP: Dimensions(0, 0)})
    placeholder = reduce_measurements({DESKTOP: Dimensions(1, 1)})
    normal = reduce_measurements({DESKTOP: Dimensions(1, 2)})
    assert needs_intermediate_breakpoint(collapsed, DESKTOP)
    assert needs_intermediate_breakpoint(placeholder, DESKTOP)
    assert not needs_intermediate_breakpoint(normal, DESKTOP)
    assert not needs_intermediate_breakpoint({}, DESKTOP)


def test_intermediate_flag_ignores_other_breakpoints() -> None:
    reduced = reduce_measurements({"1024x800": Dimensions(0, 0), DESKTOP: Dimensions(800, 600)})
    assert not needs_intermediate_breakpoint(reduced, DESKTOP)


def test_reduce_image_builds_record() -> None:
    image = DiscoveredImage("image-0", "http://x/assets/a.jpg", "", None)
    record = reduce_image(
        image,
        {"320x675": Dimensions(300, 200), DESKTOP: Dimensions(0, 0)},
        desktop_key=DESKTOP,
        above_the_fold=True,
    )
    assert record.above_the_fold
    assert record.needs_intermediate_breakpoint
    assert record.measurements["320x675"].scaled == Dimensions(600, 400)


@pytest.mark.parametrize(
    ("top", "bottom", "expected"),
    [
        (0, 200, True),
        (600, 900, True),
        (-100, 10, True),
        (675, 900, False),
        (900, 1200, False),
        (-300, 0, False),
    ],
)
def test_fold_classification(top, bottom, expected) -> None:
    assert classify_fold(top, bottom, 675) is expected


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
