from __future__ import annotations

from typing import List

from domain.errors import ArrowCountMismatchError, ChildCardinalityError
from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator


class GlobalLimitNodeGenerator(BaseNodeGenerator):
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        if len(node.children) != 1:
            raise ChildCardinalityError(node.operator, 1, len(node.children))
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)

        parts: List[str] = []
        for key in ("skip", "fetch"):
            value = node.prop(key)
            if value is not None:
                parts.append(f"{key}={value}")
        if parts:
            self.add_bottom_detail(context, ", ".join(parts), x, y, self.width, self.height)

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        if children.total_arrows != 1:
            raise ArrowCountMismatchError(
                node.operator,
                f"expected exactly 1 input stream, got {children.total_arrows}",
            )
        return self.single_stream_info(x, self.width, self.height, rect_id, children)
