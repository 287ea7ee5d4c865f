from __future__ import annotations

from dataclasses import dataclass
from typing import List

from domain.models import Element, Point, Size
from domain.services.element_factory import ElementFactory
from domain.styles import DETAILS_LINE_HEIGHT


@dataclass(frozen=True)
class DetailLine:
    text: str
    color: str


class DetailTextBuilder:
    def __init__(self, factory: ElementFactory) -> None:
        self.factory = factory
        self.lines: List[DetailLine] = []

    def add_line(self, text: str, color: str | None = None) -> "DetailTextBuilder":
        self.lines.append(DetailLine(text=text, color=color or self.factory.config.node_color))
        return self

    def build(
        self,
        x: float,
        y: float,
        width: float,
        container_id: str | None = None,
        line_spacing: float = DETAILS_LINE_HEIGHT,
    ) -> List[Element]:
        return [
            self.factory.detail_text(
                line.text,
                Point(x=x, y=y + index * line_spacing),
                Size(width=width, height=DETAILS_LINE_HEIGHT),
                color=line.color,
                container_id=container_id,
            )
            for index, line in enumerate(self.lines)
        ]

    @property
    def line_count(self) -> int:
        return len(self.lines)
