from __future__ import annotations

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator


class CoalesceBatchesNodeGenerator(BaseNodeGenerator):
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        target_batch_size = node.prop("target_batch_size")
        if target_batch_size:
            self.add_bottom_detail(
                context, f"target_batch_size={target_batch_size}", x, y, self.width, self.height
            )
        else:
            self.add_limit_detail(node, x, y, self.width, self.height, context)

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        return self.pass_through_info(x, self.width, self.height, rect_id, children, context)
