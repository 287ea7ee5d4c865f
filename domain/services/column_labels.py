from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from domain.models import Element, Point, Size
from domain.services.element_factory import ElementFactory
from domain.services.text_measurement import measure_text
from domain.styles import (
    COLUMN_LABEL_FONT_SIZE,
    COLUMN_LABEL_HEIGHT,
    FONT_FAMILY_NORMAL,
    ORDERED_COLUMN_COLOR,
    TEXT_LEFT_OFFSET,
    TEXT_RIGHT_OFFSET,
)


@dataclass(frozen=True)
class LabelRun:
    text: str
    color: str
    width: float


class ColumnLabelRenderer:
    """Renders the column list carried by an arrow, sorted columns highlighted."""

    def __init__(self, factory: ElementFactory) -> None:
        self.factory = factory

    def runs(self, columns: Sequence[str], sort_order: Sequence[str]) -> List[LabelRun]:
        """Merge consecutive columns of the same color into comma separated runs."""
        ordered = set(sort_order)
        default_color = self.factory.config.node_color
        runs: List[LabelRun] = []
        index = 0
        while index < len(columns):
            color = ORDERED_COLUMN_COLOR if columns[index] in ordered else default_color
            parts = [columns[index]]
            index += 1
            while index < len(columns):
                next_color = ORDERED_COLUMN_COLOR if columns[index] in ordered else default_color
                if next_color != color:
                    break
                parts.append(columns[index])
                index += 1
            text = ", ".join(parts)
            if runs:
                text = f", {text}"
            runs.append(
                LabelRun(text=text, color=color, width=measure_text(text, COLUMN_LABEL_FONT_SIZE))
            )
        return runs

    def render_right(
        self,
        columns: Sequence[str],
        sort_order: Sequence[str],
        arrow_mid_y: float,
        rightmost_arrow_x: float,
        offset: float = TEXT_RIGHT_OFFSET,
    ) -> List[Element]:
        runs = self.runs(columns, sort_order)
        if not runs:
            return []
        group_id = self.factory.ids.generate_id()
        elements: List[Element] = []
        cursor = rightmost_arrow_x + offset
        for run in runs:
            elements.append(self._run_element(run, cursor, arrow_mid_y, "left", group_id))
            cursor += run.width
        return elements

    def render_left(
        self,
        columns: Sequence[str],
        sort_order: Sequence[str],
        arrow_mid_y: float,
        leftmost_arrow_x: float,
        offset: float = TEXT_LEFT_OFFSET,
    ) -> List[Element]:
        runs = self.runs(columns, sort_order)
        if not runs:
            return []
        group_id = self.factory.ids.generate_id()
        cursor = leftmost_arrow_x + offset - sum(run.width for run in runs)
        elements: List[Element] = []
        for run in runs:
            elements.append(self._run_element(run, cursor, arrow_mid_y, "right", group_id))
            cursor += run.width
        return elements

    def _run_element(
        self, run: LabelRun, x: float, arrow_mid_y: float, align: str, group_id: str
    ) -> Element:
        return self.factory.text(
            run.text,
            Point(x=x, y=arrow_mid_y - COLUMN_LABEL_HEIGHT / 2),
            Size(width=run.width, height=COLUMN_LABEL_HEIGHT),
            {"role": "column_label"},
            font_size=COLUMN_LABEL_FONT_SIZE,
            font_family=FONT_FAMILY_NORMAL,
            text_align=align,
            stroke_color=run.color,
            group_ids=[group_id],
        )
