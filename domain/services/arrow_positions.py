from __future__ import annotations

from typing import List, Sequence

from domain.models import ArrowLayout
from domain.services.geometry import calculate_centered_region
from domain.styles import (
    ARROWS_AFTER_ELLIPSIS,
    ARROWS_BEFORE_ELLIPSIS,
    MAX_ARROWS_IN_CENTRAL_REGION,
    MAX_ARROWS_WITHOUT_ELLIPSIS,
    MIN_ARROW_SPACING,
)


def needs_ellipsis(count: int) -> bool:
    return count > MAX_ARROWS_WITHOUT_ELLIPSIS


class ArrowPositionCalculator:
    """Places arrow endpoints along a node edge, condensing large fan-outs."""

    def output_positions(self, total_count: int, x: float, width: float) -> ArrowLayout:
        """Positions a parent should use for the arrows leaving a node.

        Up to four arrows share the central 60% of the node width, more spread
        over the full width. Above eight only two leading and two trailing
        arrows are positioned; ``full_count`` keeps the real number.
        """
        condensed = needs_ellipsis(total_count)
        shown = ARROWS_BEFORE_ELLIPSIS + ARROWS_AFTER_ELLIPSIS if condensed else total_count
        if shown <= 0:
            return ArrowLayout(positions=[], full_count=total_count)
        if shown == 1:
            return ArrowLayout(positions=[x + width / 2], full_count=total_count)

        if shown <= MAX_ARROWS_IN_CENTRAL_REGION:
            region = calculate_centered_region(x, x + width)
            left, right = region.left, region.right
        else:
            left, right = x, x + width

        if condensed:
            half = (right - left) / 2
            positions = self.distribute(ARROWS_BEFORE_ELLIPSIS, left, left + half)
            positions += self.distribute(ARROWS_AFTER_ELLIPSIS, left + half, right)
            return ArrowLayout(positions=positions, full_count=total_count)
        return ArrowLayout(positions=self.distribute(shown, left, right), full_count=total_count)

    def condense(self, arrow_count: int, positions: Sequence[float]) -> ArrowLayout:
        """Pick the arrows actually drawn for ``arrow_count`` incoming streams.

        When condensing, the leading and trailing arrows are packed into the two
        halves of the central region with ``MIN_ARROW_SPACING`` between them and
        ``ellipsis_x`` marks where the "..." goes.
        """
        if not needs_ellipsis(arrow_count) or not positions:
            return ArrowLayout(positions=list(positions), full_count=arrow_count)

        region = calculate_centered_region(min(positions), max(positions))
        half = region.width / 2
        adjusted = self._pack(ARROWS_BEFORE_ELLIPSIS, region.left, half)
        adjusted += self._pack(ARROWS_AFTER_ELLIPSIS, region.left + half, half)
        return ArrowLayout(positions=adjusted, full_count=arrow_count, ellipsis_x=region.center)

    def distribute(self, count: int, left: float, right: float) -> List[float]:
        if count <= 0:
            return []
        if count == 1:
            return [(left + right) / 2]
        if count == 2:
            return [left, right]
        spacing = (right - left) / (count - 1)
        return [left + index * spacing for index in range(count)]

    def distribute_in_central_region(self, count: int, x: float, width: float) -> List[float]:
        region = calculate_centered_region(x, x + width)
        return self.distribute(count, region.left, region.right)

    def _pack(self, count: int, start: float, available: float) -> List[float]:
        if count <= 0:
            return []
        if count == 1:
            return [start + available / 2]
        required = (count - 1) * MIN_ARROW_SPACING
        if required <= available:
            first = start + (available - required) / 2
            return [first + index * MIN_ARROW_SPACING for index in range(count)]
        spacing = available / (count - 1)
        return [start + index * spacing for index in range(count)]
