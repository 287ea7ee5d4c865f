from __future__ import annotations

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator


class CoalescePartitionsNodeGenerator(BaseNodeGenerator):
    """Merges every input partition into one output stream."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        self.add_limit_detail(node, x, y, self.width, self.height, context)
        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        return self.single_stream_info(x, self.width, self.height, rect_id, children)
