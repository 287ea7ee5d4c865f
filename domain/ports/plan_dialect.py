from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

PARTITIONING_HASH = "hash"
PARTITIONING_ROUND_ROBIN = "round_robin"
PARTITIONING_OTHER = "other"


@dataclass(frozen=True)
class PartitionSpec:
    simplified: str
    partition_count: int
    kind: str = PARTITIONING_OTHER

    @property
    def reorders_rows(self) -> bool:
        return self.kind in {PARTITIONING_HASH, PARTITIONING_ROUND_ROBIN}


@dataclass(frozen=True)
class ProjectedColumn:
    name: str
    detail: str


class PlanDialect(Protocol):
    """Text heuristics for one plan-text dialect, kept apart from layout code."""

    def list_items(self, value: str) -> list[str]: ...

    def parse_file_groups(self, properties: Mapping[str, str] | None) -> list[list[str]]: ...

    def file_label(self, path: str) -> str: ...

    def extract_projection_columns(self, value: str) -> list[str]: ...

    def extract_sort_order(self, value: str) -> list[str]: ...

    def extract_sort_expr_columns(self, value: str) -> list[str]: ...

    def extract_join_keys(self, value: str) -> list[str]: ...

    def extract_column_name(self, expression: str) -> str: ...

    def project_expression(self, expression: str) -> ProjectedColumn: ...

    def extract_aggregate_columns(self, value: str) -> list[str]: ...

    def extract_binned_columns(self, value: str) -> dict[str, str]: ...

    def strip_column_indices(self, text: str) -> str: ...

    def extract_limit(self, properties: Mapping[str, str] | None) -> str | None: ...

    def parse_partitioning(self, value: str) -> PartitionSpec: ...
