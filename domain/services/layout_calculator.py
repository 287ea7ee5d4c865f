from __future__ import annotations

from typing import List, Sequence

from domain.models import Element, Point
from domain.services.geometry import Region
from domain.styles import ARROW_VERTICAL_RATIO, VERTICAL_SPACING


class LayoutCalculator:
    def child_position(
        self,
        parent_x: float,
        parent_y: float,
        parent_height: float,
        vertical_spacing: float = VERTICAL_SPACING,
    ) -> Point:
        """Stacked children sit straight below the parent, arrows shortened to 3/5."""
        return Point(x=parent_x, y=parent_y + parent_height + vertical_spacing * ARROW_VERTICAL_RATIO)

    def subtree_extent(self, elements: Sequence[Element]) -> Region:
        """Horizontal span covered by ``elements``; arrows count through their points."""
        lefts: List[float] = []
        rights: List[float] = []
        for element in elements:
            x = element["x"]
            if element.get("type") == "arrow" and element.get("points"):
                offsets = [point[0] for point in element["points"]]
                lefts.append(x + min(offsets))
                rights.append(x + max(offsets))
            else:
                lefts.append(x)
                rights.append(x + element.get("width", 0))
        if not lefts:
            return Region(left=0.0, right=0.0)
        return Region(left=min(lefts), right=max(rights))
