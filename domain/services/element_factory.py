from __future__ import annotations

from typing import Any, Dict, List

from domain.models import CUSTOM_DATA_KEY, Element, GenerationConfig, Point, Size
from domain.services.id_generator import IdGenerator
from domain.styles import (
    ARROW_ROUNDNESS_TYPE,
    DETAILS_FONT_SIZE,
    FONT_FAMILY_BOLD,
    FONT_FAMILY_NORMAL,
    LINE_HEIGHT,
    OPACITY,
    OPERATOR_TEXT_HEIGHT,
    RECTANGLE_ROUNDNESS_TYPE,
    ROUGHNESS,
    STROKE_WIDTH,
    TRANSPARENT,
)

ELLIPSE_ROUNDNESS_TYPE = 2
RECTANGLE_VERSION = 7
OPERATOR_TEXT_VERSION = 3


class ElementFactory:
    """Builds Excalidraw element dicts with shared default styling."""

    def __init__(self, ids: IdGenerator, config: GenerationConfig) -> None:
        self.ids = ids
        self.config = config

    def rectangle(
        self,
        position: Point,
        size: Size,
        metadata: Dict[str, Any],
        stroke_color: str | None = None,
        stroke_style: str = "solid",
        roundness_type: int = RECTANGLE_ROUNDNESS_TYPE,
        group_ids: List[str] | None = None,
        element_id: str | None = None,
    ) -> Element:
        return self._base_shape(
            element_id=element_id,
            type_name="rectangle",
            position=position,
            size=size,
            metadata=metadata,
            stroke_color=stroke_color or self.config.node_color,
            group_ids=group_ids,
            extra={
                "strokeStyle": stroke_style,
                "roundness": {"type": roundness_type},
                "version": RECTANGLE_VERSION,
            },
        )

    def ellipse(
        self,
        position: Point,
        size: Size,
        metadata: Dict[str, Any],
        stroke_color: str | None = None,
        background_color: str = TRANSPARENT,
        stroke_style: str = "solid",
        group_ids: List[str] | None = None,
    ) -> Element:
        return self._base_shape(
            element_id=None,
            type_name="ellipse",
            position=position,
            size=size,
            metadata=metadata,
            stroke_color=stroke_color or self.config.node_color,
            group_ids=group_ids,
            extra={
                "backgroundColor": background_color,
                "strokeStyle": stroke_style,
                "roundness": {"type": ELLIPSE_ROUNDNESS_TYPE},
            },
        )

    def text(
        self,
        text: str,
        position: Point,
        size: Size,
        metadata: Dict[str, Any],
        font_size: float = DETAILS_FONT_SIZE,
        font_family: int = FONT_FAMILY_NORMAL,
        text_align: str = "left",
        vertical_align: str = "top",
        stroke_color: str | None = None,
        container_id: str | None = None,
        group_ids: List[str] | None = None,
    ) -> Element:
        is_operator_text = (
            text_align == "center" and font_family == FONT_FAMILY_BOLD and container_id is not None
        )
        return self._base_shape(
            element_id=None,
            type_name="text",
            position=position,
            size=size,
            metadata=metadata,
            stroke_color=stroke_color or self.config.node_color,
            group_ids=group_ids,
            extra={
                "roundness": None,
                "version": OPERATOR_TEXT_VERSION if is_operator_text else 1,
                "text": text,
                "fontSize": font_size,
                "fontFamily": font_family,
                "textAlign": text_align,
                "verticalAlign": vertical_align,
                "baseline": font_size,
                "containerId": container_id,
                "originalText": text,
                "autoResize": False,
                "lineHeight": LINE_HEIGHT,
            },
        )

    def arrow(
        self,
        start: Point,
        end: Point,
        start_element_id: str,
        end_element_id: str,
        metadata: Dict[str, Any],
        stroke_color: str | None = None,
    ) -> Element:
        dx = end.x - start.x
        dy = end.y - start.y
        return self._base_shape(
            element_id=None,
            type_name="arrow",
            position=start,
            size=Size(width=abs(dx), height=abs(dy)),
            metadata=metadata,
            stroke_color=stroke_color or self.config.arrow_color,
            extra={
                "roundness": {"type": ARROW_ROUNDNESS_TYPE},
                "points": [[0, 0], [dx, dy]],
                "lastCommittedPoint": None,
                "startBinding": {"elementId": start_element_id, "focus": 0, "gap": 0},
                "endBinding": {"elementId": end_element_id, "focus": 0, "gap": 0},
                "startArrowhead": None,
                "endArrowhead": "arrow",
                "elbowed": False,
            },
        )

    def operator_text(
        self,
        label: str,
        x: float,
        y: float,
        width: float,
        container_id: str,
        stroke_color: str | None = None,
    ) -> Element:
        return self.text(
            label,
            Point(x=x, y=y + 5),
            Size(width=width, height=OPERATOR_TEXT_HEIGHT),
            {"role": "operator_label"},
            font_size=self.config.operator_font_size,
            font_family=FONT_FAMILY_BOLD,
            text_align="center",
            container_id=container_id,
            stroke_color=stroke_color,
        )

    def detail_text(
        self,
        text: str,
        position: Point,
        size: Size,
        color: str | None = None,
        container_id: str | None = None,
        group_ids: List[str] | None = None,
    ) -> Element:
        return self.text(
            text,
            position,
            size,
            {"role": "detail"},
            font_size=self.config.details_font_size,
            font_family=FONT_FAMILY_NORMAL,
            text_align="center",
            stroke_color=color,
            container_id=container_id,
            group_ids=group_ids,
        )

    def _base_shape(
        self,
        element_id: str | None,
        type_name: str,
        position: Point,
        size: Size,
        metadata: Dict[str, Any],
        stroke_color: str,
        group_ids: List[str] | None = None,
        extra: Dict[str, Any] | None = None,
    ) -> Element:
        return {
            "id": element_id or self.ids.generate_id(),
            "type": type_name,
            "x": position.x,
            "y": position.y,
            "width": size.width,
            "height": size.height,
            "angle": 0,
            "strokeColor": stroke_color,
            "backgroundColor": TRANSPARENT,
            "fillStyle": "solid",
            "strokeWidth": STROKE_WIDTH,
            "strokeStyle": "solid",
            "roughness": ROUGHNESS,
            "opacity": OPACITY,
            "groupIds": list(group_ids or []),
            "frameId": None,
            "index": self.ids.generate_index(),
            "roundness": None,
            "seed": self.ids.generate_seed(),
            "version": 1,
            "versionNonce": self.ids.generate_seed(),
            "isDeleted": False,
            "boundElements": [],
            "updated": self.ids.timestamp(),
            "link": None,
            "locked": False,
            "customData": {CUSTOM_DATA_KEY: dict(metadata)},
            **(extra or {}),
        }
