from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from domain.errors import ChildCardinalityError
from domain.models import NodeInfo, PlanNode, Point
from domain.services.generation_context import GenerationContext
from domain.services.geometry import midpoint
from domain.services.node_generators.base import BaseNodeGenerator
from domain.styles import DATASOURCE_WIDTH, JOIN_HEIGHT


@dataclass
class BinaryChildren:
    left: NodeInfo
    right: NodeInfo
    top: float

    @property
    def left_arrows(self) -> int:
        return max(1, self.left.input_arrow_count)

    @property
    def right_arrows(self) -> int:
        return max(1, self.right.input_arrow_count)

    @property
    def max_child_y(self) -> float:
        return max(self.left.y, self.right.y)


class BinaryInputNodeGenerator(BaseNodeGenerator):
    """Shared layout for joins: first child on the left, second on the right."""

    height = JOIN_HEIGHT

    def generate_children(
        self, node: PlanNode, x: float, y: float, context: GenerationContext
    ) -> BinaryChildren:
        if len(node.children) != 2:
            raise ChildCardinalityError(node.operator, 2, len(node.children))
        config = context.config
        child_y = y + self.height + config.vertical_spacing
        left_x = x - DATASOURCE_WIDTH - config.horizontal_spacing
        right_x = x + self.width + config.horizontal_spacing
        left = context.generate_child_node(node.children[0], left_x, child_y, False)
        right = context.generate_child_node(node.children[1], right_x, child_y, False)
        return BinaryChildren(left=left, right=right, top=child_y)

    def child_arrow_starts(
        self, context: GenerationContext, child: NodeInfo, arrow_count: int
    ) -> List[float]:
        if arrow_count == 1:
            return [child.x + child.width / 2]
        return context.arrows.distribute_in_central_region(arrow_count, child.x, child.width)

    def join_details(self, node: PlanNode, context: GenerationContext) -> List[str]:
        details: List[str] = []
        if node.prop("join_type"):
            details.append(f"join_type={node.prop('join_type')}")
        if node.prop("on"):
            details.append(f"on={context.dialect.strip_column_indices(node.prop('on') or '')}")
        return details

    def connect_side(
        self,
        context: GenerationContext,
        child: NodeInfo,
        arrow_count: int,
        top: float,
        ends: Sequence[float],
        end_y: float,
        target_id: str,
    ) -> List[float]:
        """Draw one side's arrows into the node bottom; return the drawn start positions."""
        starts = self.child_arrow_starts(context, child, arrow_count)
        start_layout, end_layout = self.condense_pairs(context, arrow_count, starts, ends)
        for start_x, end_x in zip(start_layout.positions, end_layout.positions):
            self.draw_edge(
                context, Point(x=start_x, y=top), Point(x=end_x, y=end_y), child.rect_id, target_id
            )
        if start_layout.ellipsis_x is not None and end_layout.ellipsis_x is not None:
            marker = midpoint(
                Point(x=start_layout.ellipsis_x, y=top), Point(x=end_layout.ellipsis_x, y=end_y)
            )
            self.draw_ellipsis(context, marker.x, marker.y)
        return list(start_layout.positions)

    def label_sides(
        self,
        context: GenerationContext,
        children: BinaryChildren,
        left_starts: Sequence[float],
        right_starts: Sequence[float],
        mid_y: float,
    ) -> None:
        left, right = children.left, children.right
        if left.output_columns:
            anchor = left_starts[0] if left_starts else left.x + left.width / 2
            context.extend(
                context.labels.render_left(
                    left.output_columns, left.output_sort_order, mid_y, anchor
                )
            )
        if right.output_columns:
            anchor = right_starts[-1] if right_starts else right.x + right.width / 2
            context.extend(
                context.labels.render_right(
                    right.output_columns, right.output_sort_order, mid_y, anchor
                )
            )


def merge_columns(first: Sequence[str], second: Sequence[str]) -> List[str]:
    merged: List[str] = []
    for column in [*first, *second]:
        if column not in merged:
            merged.append(column)
    return merged
