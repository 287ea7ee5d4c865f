from __future__ import annotations

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator


class LocalLimitNodeGenerator(BaseNodeGenerator):
    """Per-partition limit, every input stream passes through."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        fetch = node.prop("fetch")
        if fetch:
            self.add_bottom_detail(context, f"fetch={fetch}", x, y, self.width, self.height)
        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        return self.pass_through_info(x, self.width, self.height, rect_id, children, context)
