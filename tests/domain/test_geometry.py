from __future__ import annotations

import pytest

from domain.models import Point
from domain.services.geometry import (
    Region,
    calculate_centered_region,
    ellipse_edge_point,
    midpoint,
    rectangle_center,
)


def test_edge_point_straight_below_center_hits_bottom() -> None:
    center = Point(x=0, y=0)
    point = ellipse_edge_point(Point(x=0, y=100), center, width=138, height=41)

    assert point.x == pytest.approx(0)
    assert point.y == pytest.approx(20.5)


def test_edge_point_to_the_right_hits_semi_major_axis() -> None:
    point = ellipse_edge_point(Point(x=500, y=10), Point(x=100, y=10), width=138, height=41)

    assert point.x == pytest.approx(169)
    assert point.y == pytest.approx(10)


def test_edge_point_lies_on_ellipse() -> None:
    center = Point(x=50, y=50)
    point = ellipse_edge_point(Point(x=-20, y=300), center, width=120, height=40)

    a, b = 60, 20
    value = ((point.x - center.x) / a) ** 2 + ((point.y - center.y) / b) ** 2
    assert value == pytest.approx(1)


def test_edge_point_of_center_is_center() -> None:
    center = Point(x=12, y=34)
    assert ellipse_edge_point(center, center, width=138, height=41) == center


def test_degenerate_ellipse_returns_center() -> None:
    center = Point(x=0, y=0)
    assert ellipse_edge_point(Point(x=10, y=10), center, width=0, height=41) == center


def test_centered_region_uses_sixty_percent() -> None:
    region = calculate_centered_region(0, 100)

    assert region == Region(left=20, right=80)
    assert region.width == pytest.approx(60)
    assert region.center == pytest.approx(50)


def test_centered_region_with_custom_ratio() -> None:
    region = calculate_centered_region(100, 300, ratio=0.5)
    assert (region.left, region.right) == (150, 250)


def test_center_and_midpoint() -> None:
    assert rectangle_center(10, 20, 100, 40) == Point(x=60, y=40)
    assert midpoint(Point(x=0, y=0), Point(x=10, y=-4)) == Point(x=5, y=-2)
