from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from domain.styles import (
    ARROW_COLOR,
    BACKGROUND_COLOR,
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    EXCALIDRAW_SOURCE,
    EXCALIDRAW_VERSION,
    HORIZONTAL_SPACING,
    NODE_COLOR,
    VERTICAL_SPACING,
)

CUSTOM_DATA_KEY = "planviz"

Element = Dict[str, Any]


class PlanNode(BaseModel):
    operator: str = Field(..., min_length=1)
    properties: Optional[Dict[str, str]] = None
    children: List["PlanNode"] = Field(default_factory=list)
    level: int = 0

    @field_validator("operator", mode="before")
    @classmethod
    def strip_operator(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("properties", mode="before")
    @classmethod
    def stringify_properties(cls, value: object) -> Optional[Dict[str, str]]:
        if value is None:
            return None
        if not isinstance(value, dict):
            msg = "properties must be a mapping of strings"
            raise ValueError(msg)
        return {str(key): str(item) for key, item in value.items()}

    def prop(self, key: str) -> str | None:
        if not self.properties:
            return None
        return self.properties.get(key)

    def walk(self) -> Iterator["PlanNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())


class GenerationConfig(BaseModel):
    """Resolved layout configuration shared by every node generator."""

    model_config = ConfigDict(frozen=True)

    node_width: float = Field(DEFAULT_NODE_WIDTH, gt=0)
    node_height: float = Field(DEFAULT_NODE_HEIGHT, gt=0)
    vertical_spacing: float = Field(VERTICAL_SPACING, ge=0)
    horizontal_spacing: float = Field(HORIZONTAL_SPACING, ge=0)
    font_size: int = Field(16, gt=0)
    operator_font_size: int = 20
    details_font_size: int = 14
    node_color: str = NODE_COLOR
    arrow_color: str = ARROW_COLOR

    @model_validator(mode="before")
    @classmethod
    def derive_font_sizes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        resolved = {key: value for key, value in data.items() if value is not None}
        font_size = int(resolved.get("font_size", 16))
        resolved.setdefault("operator_font_size", round(font_size * 1.25))
        resolved.setdefault("details_font_size", round(font_size * 0.875))
        return resolved


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass
class NodeInfo:
    x: float
    y: float
    width: float
    height: float
    rect_id: str
    input_arrow_count: int
    input_arrow_positions: List[float] = field(default_factory=list)
    output_columns: List[str] = field(default_factory=list)
    output_sort_order: List[str] = field(default_factory=list)

    def usable_arrow_positions(self) -> List[float]:
        if len(self.input_arrow_positions) == self.input_arrow_count:
            return list(self.input_arrow_positions)
        return []


@dataclass(frozen=True)
class ArrowLayout:
    """Arrow x positions to draw, plus the ellipsis marker when condensed."""

    positions: List[float]
    full_count: int
    ellipsis_x: float | None = None

    @property
    def condensed(self) -> bool:
        return self.ellipsis_x is not None


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[Element]
    app_state: dict
    files: dict

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": EXCALIDRAW_VERSION,
            "source": EXCALIDRAW_SOURCE,
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }


def default_app_state() -> dict:
    return {"gridSize": None, "viewBackgroundColor": BACKGROUND_COLOR}
