from __future__ import annotations

from dataclasses import dataclass
from typing import List

from domain.models import NodeInfo, PlanNode, Point, Size
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.base import BaseNodeGenerator
from domain.styles import (
    DATASOURCE_HEIGHT,
    DATASOURCE_WIDTH,
    DETAILS_FONT_SIZE,
    DYNAMIC_FILTER_HEIGHT,
    DYNAMIC_FILTER_WIDTH,
    DYNAMIC_FILTER_Y_OFFSET,
    FILE_ELLIPSE_BASE_OFFSET,
    FILE_ELLIPSE_SIZE,
    FILE_ELLIPSE_SPACING,
    FILE_GROUP_PADDING,
    FILE_GROUP_SPACING,
    FILE_LABEL_FONT_SIZE,
    FONT_FAMILY_BOLD,
    ORANGE_COLOR,
)

DYNAMIC_FILTER_MARKERS = ("DynamicFilter", "DynamicFilterPhysicalExpr")
DYNAMIC_FILTER_TEXT_WIDTH = 100
DYNAMIC_FILTER_TEXT_HEIGHT = 18
FILE_LABEL_LINE_HEIGHT = 1.15
MAX_FILES_SHOWN = 3


@dataclass
class FileGroupShape:
    """Geometry of one drawn file group, anchor of its arrow into the scan."""

    element_id: str
    center_x: float
    top: float
    bottom: float


class DataSourceNodeGenerator(BaseNodeGenerator):
    """Scan node with its file partitions drawn as ellipses underneath."""

    width = DATASOURCE_WIDTH
    height = DATASOURCE_HEIGHT

    def generate(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        rect_id = self.draw_node(node, node.operator, x, y, self.width, self.height, context)
        self.add_limit_detail(node, x, y, self.width, self.height, context)

        predicate = node.prop("predicate") or ""
        if any(marker in predicate for marker in DYNAMIC_FILTER_MARKERS):
            self._draw_dynamic_filter(x, y, context)

        dialect = context.dialect
        columns = dialect.extract_projection_columns(node.prop("projection") or "")
        sort_order = dialect.extract_sort_order(node.prop("output_ordering") or "")

        file_groups = dialect.parse_file_groups(node.properties)
        shapes = self._draw_file_groups(file_groups, x, y, context)
        arrow_ends = self._arrow_end_positions(shapes, x)
        bottom = y + self.height
        for shape, end_x in zip(shapes, arrow_ends):
            self.draw_edge(
                context,
                Point(x=shape.center_x, y=shape.top),
                Point(x=end_x, y=bottom),
                shape.element_id,
                rect_id,
                role="file_arrow",
            )

        if shapes and columns:
            context.extend(
                context.labels.render_right(
                    columns, sort_order, (bottom + shapes[0].top) / 2, shapes[-1].center_x
                )
            )

        return NodeInfo(
            x=x,
            y=max([bottom] + [shape.bottom for shape in shapes]),
            width=self.width,
            height=self.height,
            rect_id=rect_id,
            input_arrow_count=len(file_groups),
            input_arrow_positions=arrow_ends,
            output_columns=columns,
            output_sort_order=sort_order,
        )

    def _draw_dynamic_filter(self, x: float, y: float, context: GenerationContext) -> None:
        ellipse_x = x + self.width / 2 - DYNAMIC_FILTER_WIDTH / 2
        ellipse_y = y + DYNAMIC_FILTER_Y_OFFSET
        ellipse = context.add(
            context.factory.ellipse(
                Point(x=ellipse_x, y=ellipse_y),
                Size(width=DYNAMIC_FILTER_WIDTH, height=DYNAMIC_FILTER_HEIGHT),
                {"role": "dynamic_filter"},
                stroke_color=ORANGE_COLOR,
                stroke_style="dashed",
            )
        )
        context.add(
            context.factory.text(
                "DynamicFilter",
                Point(
                    x=ellipse_x + (DYNAMIC_FILTER_WIDTH - DYNAMIC_FILTER_TEXT_WIDTH) / 2,
                    y=ellipse_y + DYNAMIC_FILTER_HEIGHT / 2 - DYNAMIC_FILTER_TEXT_HEIGHT / 2,
                ),
                Size(width=DYNAMIC_FILTER_TEXT_WIDTH, height=DYNAMIC_FILTER_TEXT_HEIGHT),
                {"role": "dynamic_filter_label"},
                font_size=DETAILS_FONT_SIZE,
                font_family=FONT_FAMILY_BOLD,
                text_align="center",
                stroke_color=ORANGE_COLOR,
                container_id=ellipse["id"],
            )
        )

    def _draw_file_groups(
        self, file_groups: List[List[str]], x: float, y: float, context: GenerationContext
    ) -> List[FileGroupShape]:
        if not file_groups:
            return []
        step = FILE_ELLIPSE_SIZE + FILE_ELLIPSE_SPACING
        base_y = y + self.height + FILE_ELLIPSE_BASE_OFFSET
        total_width = (
            len(file_groups) * FILE_ELLIPSE_SIZE + (len(file_groups) - 1) * FILE_GROUP_SPACING
        )
        tallest = max(min(len(group), MAX_FILES_SHOWN) for group in file_groups)
        tallest_height = tallest * FILE_ELLIPSE_SIZE + (tallest - 1) * FILE_ELLIPSE_SPACING

        shapes: List[FileGroupShape] = []
        group_x = x + (self.width - total_width) / 2
        for group in file_groups:
            shown = min(len(group), MAX_FILES_SHOWN)
            group_height = shown * FILE_ELLIPSE_SIZE + (shown - 1) * FILE_ELLIPSE_SPACING
            start_y = base_y + (tallest_height - group_height) / 2

            # first file, "..." in the middle slot, last file
            visible = [(0, group[0])]
            if len(group) > 2:
                self._draw_skipped_files_marker(group_x, start_y + step, context)
                visible.append((2, group[-1]))
            elif len(group) == 2:
                visible.append((1, group[1]))

            first_ellipse_id = ""
            for slot, path in visible:
                ellipse_id = self._draw_file(path, group_x, start_y + slot * step, context)
                first_ellipse_id = first_ellipse_id or ellipse_id
            group_bottom = start_y + visible[-1][0] * step + FILE_ELLIPSE_SIZE
            center_x = group_x + FILE_ELLIPSE_SIZE / 2

            if len(group) > 1:
                frame = context.add(
                    context.factory.rectangle(
                        Point(x=group_x - FILE_GROUP_PADDING, y=start_y - FILE_GROUP_PADDING),
                        Size(
                            width=FILE_ELLIPSE_SIZE + 2 * FILE_GROUP_PADDING,
                            height=group_bottom - start_y + 2 * FILE_GROUP_PADDING,
                        ),
                        {"role": "file_group", "files": len(group)},
                        stroke_style="dashed",
                    )
                )
                shapes.append(
                    FileGroupShape(
                        element_id=frame["id"],
                        center_x=center_x,
                        top=start_y - FILE_GROUP_PADDING,
                        bottom=group_bottom + FILE_GROUP_PADDING,
                    )
                )
            else:
                shapes.append(
                    FileGroupShape(
                        element_id=first_ellipse_id,
                        center_x=center_x,
                        top=start_y,
                        bottom=group_bottom,
                    )
                )
            group_x += FILE_ELLIPSE_SIZE + FILE_GROUP_SPACING
        return shapes

    def _draw_file(self, path: str, ellipse_x: float, ellipse_y: float, context: GenerationContext) -> str:
        ellipse = context.add(
            context.factory.ellipse(
                Point(x=ellipse_x, y=ellipse_y),
                Size(width=FILE_ELLIPSE_SIZE, height=FILE_ELLIPSE_SIZE),
                {"role": "file", "path": path},
            )
        )
        label = context.factory.text(
            context.dialect.file_label(path),
            Point(x=ellipse_x + FILE_ELLIPSE_SIZE / 2 - 10, y=ellipse_y + FILE_ELLIPSE_SIZE / 2 - 15),
            Size(width=20, height=30),
            {"role": "file_label"},
            font_size=FILE_LABEL_FONT_SIZE,
            font_family=FONT_FAMILY_BOLD,
            text_align="center",
            vertical_align="middle",
            container_id=ellipse["id"],
        )
        label["lineHeight"] = FILE_LABEL_LINE_HEIGHT
        context.add(label)
        return ellipse["id"]

    def _draw_skipped_files_marker(self, slot_x: float, slot_y: float, context: GenerationContext) -> None:
        context.add(
            context.factory.text(
                "...",
                Point(x=slot_x + FILE_ELLIPSE_SIZE / 2 - 10, y=slot_y + FILE_ELLIPSE_SIZE / 2 - 10),
                Size(width=20, height=20),
                {"role": "ellipsis"},
                font_size=DETAILS_FONT_SIZE,
                text_align="center",
                vertical_align="middle",
            )
        )

    def _arrow_end_positions(self, shapes: List[FileGroupShape], x: float) -> List[float]:
        """Land arrows straight above their groups when every group sits under the node."""
        centers = [shape.center_x for shape in shapes]
        if all(x <= center <= x + self.width for center in centers):
            return centers
        if len(centers) == 1:
            return [x + self.width / 2]
        spacing = self.width / (len(centers) - 1)
        return [x + index * spacing for index in range(len(centers))]
