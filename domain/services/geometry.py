from __future__ import annotations

import math
from dataclasses import dataclass

from domain.models import Point
from domain.styles import CENTRAL_REGION_RATIO


@dataclass(frozen=True)
class Region:
    left: float
    right: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def center(self) -> float:
        return (self.left + self.right) / 2


def ellipse_edge_point(point: Point, center: Point, width: float, height: float) -> Point:
    """Return where the ray from ``center`` through ``point`` crosses the ellipse boundary."""
    dx = point.x - center.x
    dy = point.y - center.y
    length = math.hypot(dx, dy)
    if length == 0:
        return center

    ux = dx / length
    uy = dy / length
    a = width / 2
    b = height / 2
    if a == 0 or b == 0:
        return center

    # (t*ux)^2/a^2 + (t*uy)^2/b^2 = 1
    denominator = math.sqrt((ux * ux) / (a * a) + (uy * uy) / (b * b))
    if denominator == 0:
        return center
    t = 1 / denominator
    return Point(x=center.x + t * ux, y=center.y + t * uy)


def calculate_centered_region(
    left: float, right: float, ratio: float = CENTRAL_REGION_RATIO
) -> Region:
    total_width = right - left
    region_width = total_width * ratio
    region_left = left + total_width / 2 - region_width / 2
    return Region(left=region_left, right=region_left + region_width)


def rectangle_center(x: float, y: float, width: float, height: float) -> Point:
    return Point(x=x + width / 2, y=y + height / 2)


def midpoint(first: Point, second: Point) -> Point:
    return Point(x=(first.x + second.x) / 2, y=(first.y + second.y) / 2)
