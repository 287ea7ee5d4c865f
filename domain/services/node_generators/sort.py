from __future__ import annotations

from typing import List

from domain.models import NodeInfo, PlanNode, Point, Size
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator

SORT_DETAIL_HEIGHT = 35


class SortNodeGenerator(BaseNodeGenerator):
    """Full or TopK sort; its ``expr`` columns become the new sort order."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        sort_order = context.dialect.extract_sort_order(node.prop("expr") or "")

        parts: List[str] = []
        if sort_order:
            parts.append(f"[{', '.join(sort_order)}]")
        if node.prop("preserve_partitioning"):
            parts.append(f"preserve_partitioning={node.prop('preserve_partitioning')}")
        limit = context.dialect.extract_limit(node.properties)
        if limit:
            parts.append(limit)

        if parts:
            offset = SORT_DETAIL_HEIGHT + (5 if limit and len(parts) > 1 else 0)
            context.add(
                context.factory.detail_text(
                    " \n".join(parts),
                    Point(x=x + 10, y=y + self.height - offset),
                    Size(width=self.width - 20, height=SORT_DETAIL_HEIGHT),
                )
            )

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        return self.pass_through_info(
            x, self.width, self.height, rect_id, children, context, output_sort_order=sort_order
        )
