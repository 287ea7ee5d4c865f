from __future__ import annotations

import logging

from domain.models import (
    ExcalidrawDocument,
    GenerationConfig,
    NodeInfo,
    PlanNode,
    default_app_state,
)
from domain.ports.plan_dialect import PlanDialect
from domain.services.generation_context import GenerationContext
from domain.services.id_generator import IdGenerator
from domain.services.node_generators.registry import (
    NodeGeneratorRegistry,
    build_default_registry,
)
from domain.services.property_parser import DataFusionPropertyParser

logger = logging.getLogger(__name__)


class PlanToExcalidrawConverter:
    """Walks a plan tree depth-first and lays it out as one Excalidraw scene."""

    def __init__(
        self,
        config: GenerationConfig | None = None,
        dialect: PlanDialect | None = None,
        registry: NodeGeneratorRegistry | None = None,
    ) -> None:
        self.config = config or GenerationConfig()
        self.dialect = dialect or DataFusionPropertyParser()
        self.registry = registry or build_default_registry()
        self.ids = IdGenerator()

    def convert(self, root: PlanNode) -> ExcalidrawDocument:
        self.ids.reset()
        context = GenerationContext.create(
            self.config, self.dialect, generate_child_node=self._unbound_child, ids=self.ids
        )

        def generate_child_node(node: PlanNode, x: float, y: float, is_root: bool) -> NodeInfo:
            return self._generate_node(node, x, y, is_root, context)

        context.generate_child_node = generate_child_node
        self._generate_node(root, 0, 0, True, context)
        logger.debug(
            "Generated %d elements for %d plan nodes", len(context.elements), root.node_count()
        )
        return ExcalidrawDocument(
            elements=context.elements, app_state=default_app_state(), files={}
        )

    def _generate_node(
        self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
    ) -> NodeInfo:
        if not self.registry.has(node.operator):
            logger.warning("No generator for operator %s, drawing it as unimplemented", node.operator)
        else:
            logger.debug("Generating %s at (%s, %s)", node.operator, x, y)
        generator = self.registry.get(node.operator)
        return generator.generate(node, x, y, is_root, context)

    @staticmethod
    def _unbound_child(node: PlanNode, x: float, y: float, is_root: bool) -> NodeInfo:
        msg = "generation context is not attached to a converter"
        raise RuntimeError(msg)
