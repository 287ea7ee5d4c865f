from __future__ import annotations

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator


class ProjectionNodeGenerator(BaseNodeGenerator):
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)

        expr = node.prop("expr") or ""
        projected = [context.dialect.project_expression(item) for item in context.dialect.list_items(expr)]
        if projected:
            detail = ", ".join(column.detail for column in projected)
        else:
            detail = expr.strip().removeprefix("[").removesuffix("]")
        if detail:
            self.add_bottom_detail(context, detail, x, y, self.width, self.height)

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        return self.pass_through_info(
            x,
            self.width,
            self.height,
            rect_id,
            children,
            context,
            output_columns=[column.name for column in projected],
        )
