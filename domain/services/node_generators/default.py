from __future__ import annotations

from domain.models import NodeInfo, PlanNode, Point, Size
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator
from domain.styles import (
    DATASOURCE_WIDTH,
    DEFAULT_NODE_WIDTH,
    DETAILS_LINE_HEIGHT,
    ERROR_COLOR,
)

UNIMPLEMENTED_TEXT = "unimplemented"


class DefaultNodeGenerator(BaseNodeGenerator):
    """Fallback for operators without a dedicated generator.

    The operator name and an ``unimplemented`` marker are drawn in red, while
    input streams and schema pass through untouched so the rest of the plan
    still lays out.
    """

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        config = context.config
        width = DATASOURCE_WIDTH if config.node_width == DEFAULT_NODE_WIDTH else config.node_width
        height = config.node_height
        rect_id = self.draw_node(
            node, node.operator, x, y, width, height, context, label_color=ERROR_COLOR
        )
        context.add(
            context.factory.detail_text(
                UNIMPLEMENTED_TEXT,
                Point(x=x + 10, y=y + height - DETAILS_LINE_HEIGHT - 10),
                Size(width=width - 20, height=DETAILS_LINE_HEIGHT),
                color=ERROR_COLOR,
            )
        )
        children = self.process_children(node, x, y, width, height, rect_id, context)
        return self.pass_through_info(x, width, height, rect_id, children, context)
