from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List

from domain.models import Element, GenerationConfig, NodeInfo, PlanNode
from domain.ports.plan_dialect import PlanDialect
from domain.services.arrow_positions import ArrowPositionCalculator
from domain.services.column_labels import ColumnLabelRenderer
from domain.services.detail_text import DetailTextBuilder
from domain.services.element_factory import ElementFactory
from domain.services.id_generator import IdGenerator
from domain.services.layout_calculator import LayoutCalculator

ChildGenerator = Callable[[PlanNode, float, float, bool], NodeInfo]


@dataclass
class ElementRegistry:
    elements: List[Element] = field(default_factory=list)
    index: Dict[str, Element] = field(default_factory=dict)

    def add(self, element: Element) -> Element:
        self.elements.append(element)
        element_id = element.get("id")
        if isinstance(element_id, str):
            self.index[element_id] = element
        return element


@dataclass
class GenerationContext:
    """Services and the single output element list shared by one diagram build."""

    config: GenerationConfig
    ids: IdGenerator
    factory: ElementFactory
    dialect: PlanDialect
    arrows: ArrowPositionCalculator
    labels: ColumnLabelRenderer
    layout: LayoutCalculator
    generate_child_node: ChildGenerator
    registry: ElementRegistry = field(default_factory=ElementRegistry)

    @classmethod
    def create(
        cls,
        config: GenerationConfig,
        dialect: PlanDialect,
        generate_child_node: ChildGenerator,
        ids: IdGenerator | None = None,
    ) -> "GenerationContext":
        ids = ids or IdGenerator()
        factory = ElementFactory(ids, config)
        return cls(
            config=config,
            ids=ids,
            factory=factory,
            dialect=dialect,
            arrows=ArrowPositionCalculator(),
            labels=ColumnLabelRenderer(factory),
            layout=LayoutCalculator(),
            generate_child_node=generate_child_node,
        )

    @property
    def elements(self) -> List[Element]:
        return self.registry.elements

    def add(self, element: Element) -> Element:
        """Append ``element``; a text with a container is listed in its container's boundElements."""
        self.registry.add(element)
        container = self.registry.index.get(element.get("containerId") or "")
        if container is not None:
            container.setdefault("boundElements", []).append({"id": element["id"], "type": "text"})
        return element

    def extend(self, elements: Iterable[Element]) -> None:
        for element in elements:
            self.add(element)

    def detail_builder(self) -> DetailTextBuilder:
        return DetailTextBuilder(self.factory)

    def bind_arrow(self, arrow: Element) -> None:
        """Register ``arrow`` in the boundElements of both shapes it connects."""
        arrow_id = arrow["id"]
        for key in ("startBinding", "endBinding"):
            binding = arrow.get(key)
            if not binding:
                continue
            target = self.registry.index.get(binding.get("elementId"))
            if target is None:
                continue
            bound = target.setdefault("boundElements", [])
            if not any(item.get("id") == arrow_id for item in bound):
                bound.append({"id": arrow_id, "type": "arrow"})

    def shift_elements(self, elements: Iterable[Element], dx: float) -> None:
        for element in elements:
            element["x"] = element["x"] + dx
