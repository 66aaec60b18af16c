import math

import pytest

from fontmap.model import CANVAS_SIZE
from fontmap.model.geometry import CanvasBounds, compute_bounds, layout_points, normalize


def test_three_point_layout(make_font):
    fonts = {
        "a": make_font("a", vector=(0.0, 0.0)),
        "b": make_font("b", vector=(10.0, 0.0)),
        "c": make_font("c", vector=(5.0, 10.0)),
    }
    layout = layout_points(fonts, 600)
    assert layout == {
        "a": pytest.approx((0.0, 0.0)),
        "b": pytest.approx((600.0, 0.0)),
        "c": pytest.approx((300.0, 600.0)),
    }


def test_bounds_map_to_canvas_edges(make_font):
    fonts = [
        make_font("a", vector=(-3.5, 2.0)),
        make_font("b", vector=(7.25, -1.0)),
        make_font("c", vector=(1.0, 9.0)),
        make_font("d", vector=(0.0, 0.0)),
    ]
    bounds = compute_bounds(fonts)
    assert bounds == CanvasBounds(-3.5, 7.25, -1.0, 9.0)

    layout = layout_points(fonts, CANVAS_SIZE)
    for x, y in layout.values():
        assert 0.0 <= x <= CANVAS_SIZE
        assert 0.0 <= y <= CANVAS_SIZE
    assert layout["a"][0] == pytest.approx(0.0)
    assert layout["b"][0] == pytest.approx(CANVAS_SIZE)
    assert layout["b"][1] == pytest.approx(0.0)
    assert layout["c"][1] == pytest.approx(CANVAS_SIZE)


def test_degenerate_axis_maps_to_center(make_font):
    fonts = [make_font("a", vector=(5.0, 1.0)), make_font("b", vector=(5.0, 3.0))]
    layout = layout_points(fonts, 600)
    assert layout["a"] == pytest.approx((300.0, 0.0))
    assert layout["b"] == pytest.approx((300.0, 600.0))


def test_single_point_is_centered(make_font):
    layout = layout_points([make_font("only", vector=(42.0, -7.0))], 600)
    assert layout == {"only": pytest.approx((300.0, 300.0))}


def test_items_without_vector_are_not_positioned(make_font):
    fonts = {
        "a": make_font("a", vector=(0.0, 0.0)),
        "b": make_font("b", vector=(1.0, 1.0)),
        "pending": make_font("pending"),
    }
    assert compute_bounds(fonts.values()) == CanvasBounds(0.0, 1.0, 0.0, 1.0)
    assert set(layout_points(fonts)) == {"a", "b"}


def test_empty_input():
    assert compute_bounds([]) is None
    assert layout_points({}) == {}


def test_normalize_clips_outside_bounds():
    bounds = CanvasBounds(0.0, 10.0, 0.0, 10.0)
    assert normalize((5.0, 5.0), bounds, 600) == pytest.approx((300.0, 300.0))
    assert normalize((20.0, -5.0), bounds, 600) == pytest.approx((600.0, 0.0))


def test_extreme_finite_vectors_stay_on_canvas(make_font):
    fonts = [
        make_font("a", vector=(-1e308, 0.0)),
        make_font("b", vector=(1e308, 1.0)),
        make_font("c", vector=(0.0, 0.5)),
    ]
    layout = layout_points(fonts, 600)
    assert layout["a"] == pytest.approx((0.0, 0.0))
    assert layout["b"] == pytest.approx((600.0, 600.0))
    assert layout["c"] == pytest.approx((300.0, 300.0))
    assert all(math.isfinite(v) for point in layout.values() for v in point)
