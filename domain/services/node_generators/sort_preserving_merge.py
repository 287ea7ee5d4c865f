from __future__ import annotations

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator


class SortPreservingMergeNodeGenerator(BaseNodeGenerator):
    """Merges sorted partitions into a single sorted stream."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        dialect = context.dialect
        expr = node.prop("expr") or node.prop("expression") or ""
        sort_order = [dialect.extract_column_name(item) for item in dialect.list_items(expr)]
        parts = [f"[{', '.join(sort_order)}]"] if sort_order else []
        limit = dialect.extract_limit(node.properties)
        if limit:
            parts.append(limit)
        if parts:
            self.add_bottom_detail(context, ", ".join(parts), x, y, self.width, self.height)

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        info = self.single_stream_info(x, self.width, self.height, rect_id, children)
        info.output_sort_order = sort_order
        return info
