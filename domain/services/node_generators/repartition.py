from __future__ import annotations

from typing import List

from domain.models import NodeInfo, PlanNode
from domain.ports.plan_dialect import PartitionSpec
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator, ChildrenResult
from domain.styles import DARK_RED_COLOR

SINGLE_LINE_OFFSET = 22.5
FIRST_LINE_OFFSET = 57.5


class RepartitionNodeGenerator(BaseNodeGenerator):
    """Redistributes rows into the number of partitions named by ``partitioning``."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        dialect = context.dialect
        partitioning = node.prop("partitioning")
        spec = dialect.parse_partitioning(partitioning) if partitioning else None
        preserve_order = node.prop("preserve_order") == "true"

        builder = context.detail_builder()
        if spec is not None:
            builder.add_line(spec.simplified)
        if preserve_order:
            builder.add_line("preserve_order=true", DARK_RED_COLOR)
        sort_columns = dialect.extract_sort_expr_columns(node.prop("sort_exprs") or "")
        if sort_columns:
            builder.add_line(f"sort_exprs=[{', '.join(sort_columns)}]")
        limit = dialect.extract_limit(node.properties)
        if limit:
            builder.add_line(limit)

        bottom = y + self.height
        if builder.line_count == 1:
            context.extend(builder.build(x + 10, bottom - SINGLE_LINE_OFFSET, self.width - 20))
        elif builder.line_count > 1:
            spacing = (FIRST_LINE_OFFSET - SINGLE_LINE_OFFSET) / (builder.line_count - 1)
            context.extend(
                builder.build(
                    x + 10, bottom - FIRST_LINE_OFFSET, self.width - 20, line_spacing=spacing
                )
            )

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        sort_order = self._output_sort_order(spec, preserve_order, children)
        count = spec.partition_count if spec is not None and spec.partition_count > 0 else 0
        count = count or children.total_arrows
        if is_root or count == 0:
            return NodeInfo(
                x=x,
                y=children.max_child_y,
                width=self.width,
                height=self.height,
                rect_id=rect_id,
                input_arrow_count=0,
                output_columns=list(children.columns),
                output_sort_order=sort_order,
            )
        layout = self.output_layout(context, count, x, self.width)
        return NodeInfo(
            x=x,
            y=children.max_child_y,
            width=self.width,
            height=self.height,
            rect_id=rect_id,
            input_arrow_count=layout.full_count,
            input_arrow_positions=list(layout.positions),
            output_columns=list(children.columns),
            output_sort_order=sort_order,
        )

    def _output_sort_order(
        self, spec: PartitionSpec | None, preserve_order: bool, children: ChildrenResult
    ) -> List[str]:
        """Hash and round-robin shuffles keep ordering only when nothing is interleaved."""
        if spec is None or not spec.reorders_rows:
            return list(children.sort_order)
        if children.sort_order and (preserve_order or children.total_arrows == 1):
            return list(children.sort_order)
        return []
