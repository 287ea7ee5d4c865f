from __future__ import annotations

from typing import List

from domain.models import NodeInfo, PlanNode, Point, Size
from domain.services.generation_context import GenerationContext
from domain.services.geometry import ellipse_edge_point, midpoint, rectangle_center
from domain.services.node_generators.binary_input import BinaryInputNodeGenerator
from domain.styles import (
    FONT_FAMILY_BOLD,
    HASH_TABLE_FONT_SIZE,
    HASH_TABLE_HEIGHT,
    HASH_TABLE_WIDTH,
    HASH_TABLE_Y_OFFSET,
    ORANGE_COLOR,
)

HASH_TABLE_TEXT_WIDTH = 70
HASH_TABLE_TEXT_HEIGHT = 18.4
HASH_TABLE_LINE_HEIGHT = 1.15


class HashJoinNodeGenerator(BinaryInputNodeGenerator):
    """Hash join: the build side (first child) fills a hash table the probe side streams through.

    Both sides send their arrows to the boundary of the ``HashTable`` ellipse
    drawn inside the node. The node emits as many streams as the probe side.
    """

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        mode = node.prop("mode")
        label = f"{node.operator}: {mode}" if mode else node.operator
        rect_id = self.draw_node(node, label, x, y, self.width, self.height, context)
        self.add_detail_lines(
            context, self.join_details(node, context), x + 10, y + 35, self.width - 20
        )
        hash_table_id, center = self._draw_hash_table(x, y, context)

        children = self.generate_children(node, x, y, context)
        left_starts = self._connect_to_hash_table(
            context, children.left, children.left_arrows, children.top, hash_table_id, center
        )
        right_starts = self._connect_to_hash_table(
            context, children.right, children.right_arrows, children.top, hash_table_id, center
        )
        self.label_sides(
            context, children, left_starts, right_starts, (children.top + center.y) / 2
        )

        projection = context.dialect.extract_projection_columns(node.prop("projection") or "")
        layout = self.output_layout(context, children.right_arrows, x, self.width)
        return NodeInfo(
            x=x,
            y=children.max_child_y,
            width=self.width,
            height=self.height,
            rect_id=rect_id,
            input_arrow_count=layout.full_count,
            input_arrow_positions=list(layout.positions),
            output_columns=projection or list(children.right.output_columns),
            output_sort_order=list(children.right.output_sort_order),
        )

    def _draw_hash_table(self, x: float, y: float, context: GenerationContext) -> tuple[str, Point]:
        ellipse_x = x + self.width / 2 - HASH_TABLE_WIDTH / 2
        ellipse_y = y + HASH_TABLE_Y_OFFSET
        ellipse = context.add(
            context.factory.ellipse(
                Point(x=ellipse_x, y=ellipse_y),
                Size(width=HASH_TABLE_WIDTH, height=HASH_TABLE_HEIGHT),
                {"role": "hash_table"},
                stroke_color=ORANGE_COLOR,
            )
        )
        label = context.factory.text(
            "HashTable",
            Point(
                x=ellipse_x + (HASH_TABLE_WIDTH - HASH_TABLE_TEXT_WIDTH) / 2,
                y=ellipse_y + (HASH_TABLE_HEIGHT - HASH_TABLE_TEXT_HEIGHT) / 2,
            ),
            Size(width=HASH_TABLE_TEXT_WIDTH, height=HASH_TABLE_TEXT_HEIGHT),
            {"role": "hash_table_label"},
            font_size=HASH_TABLE_FONT_SIZE,
            font_family=FONT_FAMILY_BOLD,
            text_align="center",
            vertical_align="middle",
            stroke_color=ORANGE_COLOR,
            container_id=ellipse["id"],
        )
        label["lineHeight"] = HASH_TABLE_LINE_HEIGHT
        context.add(label)
        center = rectangle_center(ellipse_x, ellipse_y, HASH_TABLE_WIDTH, HASH_TABLE_HEIGHT)
        return ellipse["id"], center

    def _connect_to_hash_table(
        self,
        context: GenerationContext,
        child: NodeInfo,
        arrow_count: int,
        top: float,
        hash_table_id: str,
        center: Point,
    ) -> List[float]:
        layout = context.arrows.condense(
            arrow_count, self.child_arrow_starts(context, child, arrow_count)
        )
        for start_x in layout.positions:
            start = Point(x=start_x, y=top)
            end = ellipse_edge_point(start, center, HASH_TABLE_WIDTH, HASH_TABLE_HEIGHT)
            self.draw_edge(context, start, end, child.rect_id, hash_table_id)
        if layout.ellipsis_x is not None:
            marker = midpoint(Point(x=layout.ellipsis_x, y=top), center)
            self.draw_ellipsis(context, marker.x, marker.y)
        return list(layout.positions)
