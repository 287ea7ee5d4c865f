from __future__ import annotations

from typing import Dict

from domain.services.node_generators.aggregate import AggregateNodeGenerator
from domain.services.node_generators.base import NodeGenerator
from domain.services.node_generators.coalesce_batches import CoalesceBatchesNodeGenerator
from domain.services.node_generators.coalesce_partitions import CoalescePartitionsNodeGenerator
from domain.services.node_generators.cross_join import CrossJoinNodeGenerator
from domain.services.node_generators.data_source import DataSourceNodeGenerator
from domain.services.node_generators.default import DefaultNodeGenerator
from domain.services.node_generators.filter import FilterNodeGenerator
from domain.services.node_generators.global_limit import GlobalLimitNodeGenerator
from domain.services.node_generators.hash_join import HashJoinNodeGenerator
from domain.services.node_generators.local_limit import LocalLimitNodeGenerator
from domain.services.node_generators.projection import ProjectionNodeGenerator
from domain.services.node_generators.repartition import RepartitionNodeGenerator
from domain.services.node_generators.sort import SortNodeGenerator
from domain.services.node_generators.sort_merge_join import SortMergeJoinNodeGenerator
from domain.services.node_generators.sort_preserving_merge import (
    SortPreservingMergeNodeGenerator,
)
from domain.services.node_generators.union import UnionNodeGenerator


class NodeGeneratorRegistry:
    """Operator name to generator lookup with a fallback for unknown operators."""

    def __init__(self, default: NodeGenerator | None = None) -> None:
        self._generators: Dict[str, NodeGenerator] = {}
        self.default = default or DefaultNodeGenerator()

    def register(self, operator: str, generator: NodeGenerator) -> None:
        self._generators[operator] = generator

    def get(self, operator: str) -> NodeGenerator:
        return self._generators.get(operator, self.default)

    def has(self, operator: str) -> bool:
        return operator in self._generators


def build_default_registry() -> NodeGeneratorRegistry:
    registry = NodeGeneratorRegistry()
    sort_merge_join = SortMergeJoinNodeGenerator()
    generators: Dict[str, NodeGenerator] = {
        "DataSourceExec": DataSourceNodeGenerator(),
        "FilterExec": FilterNodeGenerator(),
        "CoalesceBatchesExec": CoalesceBatchesNodeGenerator(),
        "CoalescePartitionsExec": CoalescePartitionsNodeGenerator(),
        "RepartitionExec": RepartitionNodeGenerator(),
        "AggregateExec": AggregateNodeGenerator(),
        "ProjectionExec": ProjectionNodeGenerator(),
        "SortExec": SortNodeGenerator(),
        "SortPreservingMergeExec": SortPreservingMergeNodeGenerator(),
        "HashJoinExec": HashJoinNodeGenerator(),
        "SortMergeJoin": sort_merge_join,
        "SortMergeJoinExec": sort_merge_join,
        "CrossJoinExec": CrossJoinNodeGenerator(),
        "UnionExec": UnionNodeGenerator(),
        "GlobalLimitExec": GlobalLimitNodeGenerator(),
        "LocalLimitExec": LocalLimitNodeGenerator(),
    }
    for operator, generator in generators.items():
        registry.register(operator, generator)
    return registry
