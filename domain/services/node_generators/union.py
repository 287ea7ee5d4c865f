from __future__ import annotations

from dataclasses import dataclass
from typing import List

from domain.models import NodeInfo, PlanNode, Point
from domain.services.generation_context import GenerationContext
from domain.services.geometry import Region, calculate_centered_region, midpoint
from domain.services.node_generators.base import BaseNodeGenerator
from domain.styles import MAX_ARROWS_IN_CENTRAL_REGION

UNION_SPACING_FACTOR = 1.5


@dataclass
class PlacedChild:
    info: NodeInfo
    first_element: int
    last_element: int
    extent: Region

    @property
    def arrow_count(self) -> int:
        return max(1, self.info.input_arrow_count)


class UnionNodeGenerator(BaseNodeGenerator):
    """Concatenates its inputs; every child stream becomes one output stream.

    Children are generated first, then each child subtree is moved once so the
    subtrees sit side by side, centered under the union, before any arrow
    into the union is drawn.
    """

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        bottom = y + self.height
        if not node.children:
            return NodeInfo(
                x=x,
                y=bottom,
                width=self.width,
                height=self.height,
                rect_id=rect_id,
                input_arrow_count=0,
            )

        child_position = context.layout.child_position(
            x, y, self.height, context.config.vertical_spacing
        )
        placed: List[PlacedChild] = []
        for child in node.children:
            first = len(context.elements)
            info = context.generate_child_node(child, x, child_position.y, False)
            last = len(context.elements)
            extent = context.layout.subtree_extent(context.elements[first:last])
            placed.append(PlacedChild(info, first, last, extent))
        self._spread(placed, x, context)

        total = sum(child.arrow_count for child in placed)
        ends = self._end_positions(total, x)
        arrow_index = 0
        for child in placed:
            count = child.arrow_count
            child_ends = ends[arrow_index : arrow_index + count]
            arrow_index += count
            self._connect(context, child, child_ends, child_position.y, bottom, rect_id)

        first_info = placed[0].info
        return NodeInfo(
            x=x,
            y=max(child.info.y for child in placed),
            width=self.width,
            height=self.height,
            rect_id=rect_id,
            input_arrow_count=total,
            input_arrow_positions=ends,
            output_columns=list(first_info.output_columns),
            output_sort_order=list(first_info.output_sort_order),
        )

    def _spread(self, placed: List[PlacedChild], x: float, context: GenerationContext) -> None:
        spacing = context.config.horizontal_spacing * UNION_SPACING_FACTOR
        total_width = sum(child.extent.width for child in placed) + spacing * (len(placed) - 1)
        cursor = x + self.width / 2 - total_width / 2
        for child in placed:
            dx = cursor - child.extent.left
            if dx:
                context.shift_elements(context.elements[child.first_element : child.last_element], dx)
                child.info.x += dx
                child.info.input_arrow_positions = [
                    position + dx for position in child.info.input_arrow_positions
                ]
            cursor += child.extent.width + spacing

    def _end_positions(self, total: int, x: float) -> List[float]:
        if total == 1:
            return [x + self.width / 2]
        if total <= MAX_ARROWS_IN_CENTRAL_REGION:
            region = calculate_centered_region(x, x + self.width)
        else:
            region = Region(left=x, right=x + self.width)
        spacing = region.width / (total - 1)
        return [region.left + index * spacing for index in range(total)]

    def _connect(
        self,
        context: GenerationContext,
        child: PlacedChild,
        ends: List[float],
        top: float,
        bottom: float,
        rect_id: str,
    ) -> None:
        info = child.info
        starts = info.usable_arrow_positions() or context.arrows.distribute(
            child.arrow_count, info.x, info.x + info.width
        )
        start_layout, end_layout = self.condense_pairs(context, child.arrow_count, starts, ends)
        pairs = list(zip(start_layout.positions, end_layout.positions))
        for start_x, end_x in pairs:
            self.draw_edge(
                context, Point(x=start_x, y=top), Point(x=end_x, y=bottom), info.rect_id, rect_id
            )
        if start_layout.ellipsis_x is not None and end_layout.ellipsis_x is not None:
            marker = midpoint(
                Point(x=start_layout.ellipsis_x, y=top), Point(x=end_layout.ellipsis_x, y=bottom)
            )
            self.draw_ellipsis(context, marker.x, marker.y)
        if info.output_columns and pairs:
            start_x, end_x = pairs[-1]
            context.extend(
                context.labels.render_right(
                    info.output_columns,
                    info.output_sort_order,
                    (top + bottom) / 2,
                    (start_x + end_x) / 2,
                )
            )
