from __future__ import annotations

from typing import Dict, List

from domain.models import NodeInfo, PlanNode, Point, Size
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator
from domain.styles import (
    AGGREGATE_PIPELINE_HEIGHT,
    DARK_RED_COLOR,
    DEFAULT_NODE_HEIGHT,
    PURPLE_MODE_COLOR,
)

PIPELINE_LABEL = "AggregateExec - Pipeline"
SORTED_ORDERING_MODE = "Sorted"
DETAIL_ELEMENT_HEIGHT = 20


class AggregateNodeGenerator(BaseNodeGenerator):
    """Group-by aggregation, rendered as a pipeline when its input is already sorted."""

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        dialect = context.dialect
        pipelined = node.prop("ordering_mode") == SORTED_ORDERING_MODE
        height = AGGREGATE_PIPELINE_HEIGHT if pipelined else DEFAULT_NODE_HEIGHT
        label = PIPELINE_LABEL if pipelined else node.operator
        rect_id = self.draw_node(node, label, x, y, self.width, height, context)

        gby = node.prop("gby")
        aggr = node.prop("aggr")
        gby_columns = [dialect.extract_column_name(item) for item in dialect.list_items(gby or "")]

        builder = context.detail_builder()
        summary: List[str] = []
        if gby:
            summary.append(f"gby=[{', '.join(gby_columns)}]" if gby_columns else f"gby={gby}")
        if aggr:
            summary.append(f"aggr={aggr}")
        if node.prop("mode"):
            builder.add_line(f"mode={node.prop('mode')}", PURPLE_MODE_COLOR)
        if summary:
            builder.add_line(", ".join(summary))

        if builder.line_count:
            detail_y = y + height - (55 if pipelined else 35)
            for element in builder.build(x + 10, detail_y, self.width - 20):
                element["height"] = DETAIL_ELEMENT_HEIGHT
                context.add(element)
        if pipelined:
            context.add(
                context.factory.detail_text(
                    f"ordering_mode={SORTED_ORDERING_MODE}",
                    Point(x=x + 10, y=y + height - 20),
                    Size(width=self.width - 20, height=DETAIL_ELEMENT_HEIGHT),
                    color=DARK_RED_COLOR,
                )
            )

        children = self.process_children(node, x, y, self.width, height, rect_id, context)
        columns = gby_columns + dialect.extract_aggregate_columns(aggr or "")
        sort_order = self._promote_binned_columns(
            children.sort_order, dialect.extract_binned_columns(gby or "")
        )
        return self.pass_through_info(
            x,
            self.width,
            height,
            rect_id,
            children,
            context,
            output_columns=columns or None,
            output_sort_order=sort_order,
        )

    def _promote_binned_columns(self, sort_order: List[str], binned: Dict[str, str]) -> List[str]:
        """``date_bin`` over a sorted column stays sorted, right after that column."""
        promoted = list(sort_order)
        for function, source in binned.items():
            if source in sort_order and function not in promoted:
                promoted.insert(sort_order.index(source) + 1, function)
        return promoted
