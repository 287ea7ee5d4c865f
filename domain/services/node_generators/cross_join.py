from __future__ import annotations

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.binary_input import BinaryInputNodeGenerator, merge_columns


class CrossJoinNodeGenerator(BinaryInputNodeGenerator):
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        children = self.generate_children(node, x, y, context)
        bottom = y + self.height
        middle = x + self.width / 2
        left_starts = self.connect_side(
            context,
            children.left,
            children.left_arrows,
            children.top,
            context.arrows.distribute(children.left_arrows, x, middle),
            bottom,
            rect_id,
        )
        right_starts = self.connect_side(
            context,
            children.right,
            children.right_arrows,
            children.top,
            context.arrows.distribute(children.right_arrows, middle, x + self.width),
            bottom,
            rect_id,
        )
        self.label_sides(context, children, left_starts, right_starts, (children.top + bottom) / 2)

        layout = self.output_layout(
            context, max(children.left_arrows, children.right_arrows), x, self.width
        )
        return NodeInfo(
            x=x,
            y=children.max_child_y,
            width=self.width,
            height=self.height,
            rect_id=rect_id,
            input_arrow_count=layout.full_count,
            input_arrow_positions=list(layout.positions),
            output_columns=merge_columns(children.left.output_columns, children.right.output_columns),
        )
