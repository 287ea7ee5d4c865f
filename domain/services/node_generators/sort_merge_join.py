from __future__ import annotations

from domain.errors import ArrowCountMismatchError
from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.binary_input import BinaryInputNodeGenerator, merge_columns


class SortMergeJoinNodeGenerator(BinaryInputNodeGenerator):
    """Merge join over two inputs that must be partitioned identically."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        self.add_detail_lines(
            context, self.join_details(node, context), x + 10, y + 35, self.width - 20
        )

        children = self.generate_children(node, x, y, context)
        if children.left_arrows != children.right_arrows:
            raise ArrowCountMismatchError(
                node.operator,
                "both inputs must have the same number of partitions, "
                f"got {children.left_arrows} and {children.right_arrows}",
            )
        count = children.left_arrows
        bottom = y + self.height
        if count == 1:
            ends = [x + self.width / 2]
        else:
            ends = context.arrows.distribute_in_central_region(count, x, self.width)
        left_starts = self.connect_side(
            context, children.left, count, children.top, ends, bottom, rect_id
        )
        right_starts = self.connect_side(
            context, children.right, count, children.top, ends, bottom, rect_id
        )
        self.label_sides(context, children, left_starts, right_starts, (children.top + bottom) / 2)

        layout = self.output_layout(context, count, x, self.width)
        return NodeInfo(
            x=x,
            y=children.max_child_y,
            width=self.width,
            height=self.height,
            rect_id=rect_id,
            input_arrow_count=layout.full_count,
            input_arrow_positions=list(layout.positions),
            output_columns=merge_columns(children.left.output_columns, children.right.output_columns),
            output_sort_order=context.dialect.extract_join_keys(node.prop("on") or ""),
        )
