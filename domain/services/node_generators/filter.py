from __future__ import annotations

import re
from typing import List

from domain.models import NodeInfo, PlanNode
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator

_EMBEDDED_PROJECTION_RE = re.compile(r"projection=(\[[^\]]+\])")
_TRAILING_PROJECTION_RE = re.compile(r",\s*projection=\[[^\]]+\]")
FILTER_LINE_HEIGHT = 20


class FilterNodeGenerator(BaseNodeGenerator):
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)

        projection = self._projection_columns(node, context)
        expression = self._filter_expression(node, context)
        details: List[str] = []
        if expression:
            details.append(expression)
        if projection:
            details.append(f"projection=[{', '.join(projection)}]")
        self.add_detail_lines(
            context, details, x + 10, y + 35, self.width - 20, line_height=FILTER_LINE_HEIGHT
        )

        children = self.process_children(node, x, y, self.width, self.height, rect_id, context)
        return self.pass_through_info(
            x,
            self.width,
            self.height,
            rect_id,
            children,
            context,
            output_columns=projection or None,
        )

    def _projection_columns(self, node: PlanNode, context: GenerationContext) -> List[str]:
        projection = node.prop("projection")
        if not projection:
            embedded = _EMBEDDED_PROJECTION_RE.search(node.prop("filter") or "")
            projection = embedded.group(1) if embedded else ""
        return context.dialect.extract_projection_columns(projection)

    def _filter_expression(self, node: PlanNode, context: GenerationContext) -> str:
        properties = node.properties or {}
        if properties.get("filter"):
            expression = _TRAILING_PROJECTION_RE.sub("", properties["filter"])
        elif properties.get("predicate"):
            expression = properties["predicate"]
        else:
            expression = next(
                (
                    value
                    for key, value in properties.items()
                    if "predicate" in key or ("=" in value and "@" in value)
                ),
                "",
            )
        return context.dialect.strip_column_indices(expression).strip()
