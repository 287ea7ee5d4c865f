from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import PurePosixPath

from domain.ports.plan_dialect import (
    PARTITIONING_HASH,
    PARTITIONING_OTHER,
    PARTITIONING_ROUND_ROBIN,
    PartitionSpec,
    PlanDialect,
    ProjectedColumn,
)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())

_COLUMN_INDEX_RE = re.compile(r"@\d+")
_BEFORE_AT_RE = re.compile(r"^([^@]+)")
_FUNCTION_RE = re.compile(r"^(\w+)\s*\(")
_ALIAS_RE = re.compile(r"\s+as\s+([^\s@]+)", re.IGNORECASE)
_PROJECTION_ALIAS_RE = re.compile(r"\s+as\s+(.+?)(?:\s*@|$)", re.IGNORECASE)
_AS_SPLIT_RE = re.compile(r"\s+as\s+", re.IGNORECASE)
_ORDERING_SUFFIX_RE = re.compile(r"\s+(ASC|DESC)(\s+NULLS\s+(FIRST|LAST))?\s*$", re.IGNORECASE)
_FILE_GROUPS_RE = re.compile(r"groups?:\s*(\[.*\])", re.DOTALL)
_JOIN_PAIR_RE = re.compile(r"\(([^,]+),\s*([^)]+)\)")
_QUALIFIED_ARG_RE = re.compile(r"\([^)]*\.(\w+)\)")
_PLAIN_ARG_RE = re.compile(r"\((\w+)\)")
_INDEXED_COLUMN_RE = re.compile(r"(\w+)@\d+")
_TOPK_RE = re.compile(r"TopK\(fetch=(\d+)\)")
_FETCH_RE = re.compile(r"fetch=(\d+)")
_HASH_RE = re.compile(r"^Hash\(\[(.+)\],\s*(\d+)\)$")
_ROUND_ROBIN_RE = re.compile(r"^RoundRobinBatch\((\d+)\)$")
_TRAILING_COUNT_RE = re.compile(r"\((\d+)\)$")
_TRAILING_ARG_COUNT_RE = re.compile(r",\s*(\d+)\)$")

BINNING_FUNCTIONS = frozenset({"date_bin"})


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` only outside of (), [] and {} nesting."""
    items: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        items.append(tail)
    return items


def enclosed_content(text: str, opener: str = "[") -> str | None:
    """Return what sits inside the first ``opener`` and its matching closer."""
    start = text.find(opener)
    if start < 0:
        return None
    closer = _OPENERS[opener]
    depth = 0
    for pos in range(start, len(text)):
        char = text[pos]
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start + 1 : pos]
    return text[start + 1 :]


def _before_at(text: str) -> str:
    stripped = text.strip()
    match = _BEFORE_AT_RE.match(stripped)
    return match.group(1).strip() if match else stripped


def _file_label(path: str) -> str:
    return PurePosixPath(path.strip().strip("'\"")).stem


class DataFusionPropertyParser(PlanDialect):
    """Property heuristics for DataFusion ``EXPLAIN`` physical plans."""

    def list_items(self, value: str) -> list[str]:
        content = enclosed_content(value)
        if content is None:
            return []
        return [item for item in split_top_level(content) if item]

    def parse_file_groups(self, properties: Mapping[str, str] | None) -> list[list[str]]:
        """``{2 groups: [[a.parquet, b.parquet], [c.parquet]]}`` -> ``[[a, b], [c]]`` paths."""
        if not properties or not properties.get("file_groups"):
            return []
        match = _FILE_GROUPS_RE.search(properties["file_groups"])
        if not match:
            return []

        groups: list[list[str]] = []
        current_group: list[str] = []
        current_file: list[str] = []
        depth = 0
        quote: str | None = None

        def flush_file() -> None:
            name = "".join(current_file).strip().strip("'\"")
            if name:
                current_group.append(name)
            current_file.clear()

        for char in match.group(1):
            if quote:
                if char == quote:
                    quote = None
                else:
                    current_file.append(char)
                continue
            if char in "'\"":
                quote = char
            elif char == "[":
                depth += 1
                if depth == 2:
                    current_group = []
                    current_file.clear()
            elif char == "]":
                depth -= 1
                if depth == 1:
                    flush_file()
                    if current_group:
                        groups.append(list(current_group))
                    current_group = []
                elif depth <= 0:
                    break
            elif char == "," and depth == 2:
                flush_file()
            elif depth >= 2:
                current_file.append(char)
        return groups

    def file_label(self, path: str) -> str:
        return _file_label(path)

    def extract_projection_columns(self, value: str) -> list[str]:
        return [_before_at(item) for item in self.list_items(value)]

    def extract_sort_order(self, value: str) -> list[str]:
        columns: list[str] = []
        for item in self.list_items(value):
            name = _ORDERING_SUFFIX_RE.sub("", _before_at(item))
            if name:
                columns.append(name)
        return columns

    def extract_sort_expr_columns(self, value: str) -> list[str]:
        # sort_exprs is printed without surrounding brackets
        columns: list[str] = []
        for item in split_top_level(value):
            match = re.match(r"^([^@\s]+)", item.strip())
            if match:
                columns.append(match.group(1))
        return columns

    def extract_join_keys(self, value: str) -> list[str]:
        content = enclosed_content(value)
        if content is None:
            return []
        keys: list[str] = []
        for match in _JOIN_PAIR_RE.finditer(content):
            key = self._unqualified(_before_at(match.group(1)))
            if key and key not in keys:
                keys.append(key)
        return keys

    def extract_column_name(self, expression: str) -> str:
        """``date_bin(...)`` -> ``date_bin``, ``a@0 as b`` -> ``b``, ``a@0`` -> ``a``."""
        trimmed = expression.strip()
        function = _FUNCTION_RE.match(trimmed)
        if function:
            return function.group(1)
        alias = _ALIAS_RE.search(trimmed)
        if alias:
            return alias.group(1).strip()
        return _before_at(trimmed)

    def project_expression(self, expression: str) -> ProjectedColumn:
        trimmed = expression.strip()
        alias = _PROJECTION_ALIAS_RE.search(trimmed)
        name = alias.group(1).strip() if alias else _before_at(trimmed)
        source = _AS_SPLIT_RE.split(trimmed, maxsplit=1)[0].strip()
        function = _FUNCTION_RE.match(source)
        return ProjectedColumn(name=name, detail=function.group(1) if function else name)

    def extract_aggregate_columns(self, value: str) -> list[str]:
        """``[max(j.env), count(value)]`` -> ``[env, value]``."""
        columns: list[str] = []
        for item in self.list_items(value):
            match = _QUALIFIED_ARG_RE.search(item) or _PLAIN_ARG_RE.search(item)
            if match:
                columns.append(match.group(1))
        return columns

    def extract_binned_columns(self, value: str) -> dict[str, str]:
        """Map each binning function in a group-by list to the column it buckets."""
        binned: dict[str, str] = {}
        for item in self.list_items(value):
            function = _FUNCTION_RE.match(item.strip())
            if not function or function.group(1) not in BINNING_FUNCTIONS:
                continue
            arguments = enclosed_content(item.strip(), "(")
            if arguments is None:
                continue
            args = split_top_level(arguments)
            if len(args) < 2:
                continue
            column = _INDEXED_COLUMN_RE.search(args[-1])
            if column:
                binned[function.group(1)] = column.group(1)
        return binned

    def strip_column_indices(self, text: str) -> str:
        return _COLUMN_INDEX_RE.sub("", text)

    def extract_limit(self, properties: Mapping[str, str] | None) -> str | None:
        if not properties:
            return None
        if properties.get("limit"):
            return f"limit={properties['limit']}"
        if properties.get("fetch"):
            return f"fetch={properties['fetch']}"
        for value in properties.values():
            if not value:
                continue
            topk = _TOPK_RE.search(value)
            if topk:
                return f"TopK(fetch={topk.group(1)})"
            fetch = _FETCH_RE.search(value)
            if fetch:
                return f"fetch={fetch.group(1)}"
        return None

    def parse_partitioning(self, value: str) -> PartitionSpec:
        text = value.strip()
        hashed = _HASH_RE.match(text)
        if hashed:
            columns = [_before_at(item) for item in split_top_level(hashed.group(1))]
            count = int(hashed.group(2))
            return PartitionSpec(
                simplified=f"Hash([{', '.join(columns)}], {count})",
                partition_count=count,
                kind=PARTITIONING_HASH,
            )

        round_robin = _ROUND_ROBIN_RE.match(text)
        if round_robin:
            return PartitionSpec(
                simplified=f"RoundRobinBatch({round_robin.group(1)})",
                partition_count=int(round_robin.group(1)),
                kind=PARTITIONING_ROUND_ROBIN,
            )

        count_match = _TRAILING_COUNT_RE.search(text) or _TRAILING_ARG_COUNT_RE.search(text)
        kind = PARTITIONING_OTHER
        if text.startswith("Hash"):
            kind = PARTITIONING_HASH
        elif text.startswith("RoundRobinBatch"):
            kind = PARTITIONING_ROUND_ROBIN
        return PartitionSpec(
            simplified=text,
            partition_count=int(count_match.group(1)) if count_match else 0,
            kind=kind,
        )

    def _unqualified(self, column: str) -> str:
        return column.rsplit(".", 1)[-1] if "." in column and "(" not in column else column
