from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

from domain.models import ArrowLayout, Element, NodeInfo, PlanNode, Point, Size
from domain.services.generation_context import GenerationContext
from domain.styles import (
    DATASOURCE_WIDTH,
    DEFAULT_NODE_HEIGHT,
    DETAILS_LINE_HEIGHT,
    ELLIPSIS_FONT_SIZE,
)

ELLIPSIS_MARKER_SIZE = 20
BOTTOM_DETAIL_HEIGHT = 20


class NodeGenerator(Protocol):
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo: ...


@dataclass
class ChildrenResult:
    """What a stacked parent learns from drawing its children and their arrows."""

    max_child_y: float
    total_arrows: int = 0
    arrow_positions: List[float] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    sort_order: List[str] = field(default_factory=list)
    children: List[NodeInfo] = field(default_factory=list)


class BaseNodeGenerator(ABC):
    width: float = DATASOURCE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT

    @abstractmethod
    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        raise NotImplementedError

    def draw_node(
        self,
        node: PlanNode,
        label: str,
        x: float,
        y: float,
        width: float,
        height: float,
        context: GenerationContext,
        label_color: str | None = None,
    ) -> str:
        """Add the node rectangle and its bold operator label, return the rectangle id."""
        rect = context.add(
            context.factory.rectangle(
                Point(x=x, y=y),
                Size(width=width, height=height),
                {"role": "node", "operator": node.operator},
            )
        )
        rect_id = rect["id"]
        context.add(
            context.factory.operator_text(
                label, x, y, width, container_id=rect_id, stroke_color=label_color
            )
        )
        return rect_id

    def process_children(
        self,
        node: PlanNode,
        x: float,
        y: float,
        width: float,
        height: float,
        rect_id: str,
        context: GenerationContext,
    ) -> ChildrenResult:
        """Stack children below the node and connect every child to its bottom edge."""
        result = ChildrenResult(max_child_y=y + height)
        parent_bottom = y + height
        for child in node.children:
            child_position = context.layout.child_position(
                x, y, height, context.config.vertical_spacing
            )
            info = context.generate_child_node(child, child_position.x, child_position.y, False)
            result.children.append(info)
            result.max_child_y = max(result.max_child_y, info.y)

            arrow_count = max(1, info.input_arrow_count)
            starts = info.usable_arrow_positions() or context.arrows.distribute(
                arrow_count, info.x, info.x + info.width
            )
            drawn = self.draw_arrows_to_parent(
                context,
                info,
                starts,
                start_y=child_position.y,
                end_y=parent_bottom,
                parent_rect_id=rect_id,
                arrow_count=arrow_count,
            )
            result.total_arrows += arrow_count
            result.arrow_positions.extend(starts)

            if info.output_columns and drawn:
                context.extend(
                    context.labels.render_right(
                        info.output_columns,
                        info.output_sort_order,
                        (child_position.y + parent_bottom) / 2,
                        max(drawn),
                    )
                )
            if not result.columns:
                result.columns = list(info.output_columns)
                result.sort_order = list(info.output_sort_order)
        return result

    def draw_arrows_to_parent(
        self,
        context: GenerationContext,
        child: NodeInfo,
        positions: Sequence[float],
        start_y: float,
        end_y: float,
        parent_rect_id: str,
        arrow_count: int,
    ) -> List[float]:
        """Draw vertical arrows from the child top, condensing large fan-ins."""
        layout = context.arrows.condense(arrow_count, positions)
        for arrow_x in layout.positions:
            self.draw_edge(
                context,
                Point(x=arrow_x, y=start_y),
                Point(x=arrow_x, y=end_y),
                child.rect_id,
                parent_rect_id,
            )
        if layout.ellipsis_x is not None:
            self.draw_ellipsis(context, layout.ellipsis_x, (start_y + end_y) / 2)
        return list(layout.positions)

    def draw_edge(
        self,
        context: GenerationContext,
        start: Point,
        end: Point,
        start_element_id: str,
        end_element_id: str,
        role: str = "edge",
    ) -> Element:
        arrow = context.add(
            context.factory.arrow(start, end, start_element_id, end_element_id, {"role": role})
        )
        context.bind_arrow(arrow)
        return arrow

    def draw_ellipsis(self, context: GenerationContext, center_x: float, center_y: float) -> Element:
        half = ELLIPSIS_MARKER_SIZE / 2
        return context.add(
            context.factory.text(
                "...",
                Point(x=center_x - half, y=center_y - half),
                Size(width=ELLIPSIS_MARKER_SIZE, height=ELLIPSIS_MARKER_SIZE),
                {"role": "ellipsis"},
                font_size=ELLIPSIS_FONT_SIZE,
                text_align="center",
                stroke_color=context.config.arrow_color,
            )
        )

    def condense_pairs(
        self,
        context: GenerationContext,
        arrow_count: int,
        starts: Sequence[float],
        ends: Sequence[float],
    ) -> tuple[ArrowLayout, ArrowLayout]:
        """Condense start and end positions of diagonal arrows together."""
        return context.arrows.condense(arrow_count, starts), context.arrows.condense(
            arrow_count, ends
        )

    def add_detail_lines(
        self,
        context: GenerationContext,
        lines: Sequence[str],
        x: float,
        y: float,
        width: float,
        line_height: float = DETAILS_LINE_HEIGHT,
        color: str | None = None,
    ) -> Element | None:
        """One centered text element holding ``lines`` joined by newlines."""
        if not lines:
            return None
        return context.add(
            context.factory.detail_text(
                "\n".join(lines),
                Point(x=x, y=y),
                Size(width=width, height=len(lines) * line_height),
                color=color,
            )
        )

    def add_limit_detail(
        self,
        node: PlanNode,
        x: float,
        y: float,
        width: float,
        height: float,
        context: GenerationContext,
    ) -> Element | None:
        limit = context.dialect.extract_limit(node.properties)
        if limit is None:
            return None
        return self.add_bottom_detail(context, limit, x, y, width, height)

    def add_bottom_detail(
        self,
        context: GenerationContext,
        text: str,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> Element:
        """Single detail line resting just above the bottom edge of the node."""
        return context.add(
            context.factory.detail_text(
                text,
                Point(x=x + 10, y=y + height - 25),
                Size(width=width - 20, height=BOTTOM_DETAIL_HEIGHT),
            )
        )

    def output_layout(
        self, context: GenerationContext, total: int, x: float, width: float
    ) -> ArrowLayout:
        return context.arrows.output_positions(total, x, width)

    def pass_through_info(
        self,
        x: float,
        width: float,
        height: float,
        rect_id: str,
        children: ChildrenResult,
        context: GenerationContext,
        output_columns: Sequence[str] | None = None,
        output_sort_order: Sequence[str] | None = None,
    ) -> NodeInfo:
        """NodeInfo forwarding the children's streams and schema unchanged."""
        layout = self.output_layout(context, children.total_arrows, x, width)
        return NodeInfo(
            x=x,
            y=children.max_child_y,
            width=width,
            height=height,
            rect_id=rect_id,
            input_arrow_count=layout.full_count,
            input_arrow_positions=list(layout.positions),
            output_columns=list(children.columns if output_columns is None else output_columns),
            output_sort_order=list(
                children.sort_order if output_sort_order is None else output_sort_order
            ),
        )

    def single_stream_info(
        self,
        x: float,
        width: float,
        height: float,
        rect_id: str,
        children: ChildrenResult,
    ) -> NodeInfo:
        return NodeInfo(
            x=x,
            y=children.max_child_y,
            width=width,
            height=height,
            rect_id=rect_id,
            input_arrow_count=1,
            input_arrow_positions=[x + width / 2],
            output_columns=list(children.columns),
            output_sort_order=list(children.sort_order),
        )
