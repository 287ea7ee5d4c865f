from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List

from domain.errors import PlanParseError
from domain.models import PlanNode
from domain.ports.repositories import PlanParser
from domain.services.property_parser import split_top_level

logger = logging.getLogger(__name__)

PHYSICAL_PLAN_SECTION = "physical_plan"
TAB_WIDTH = 2
INDENT_WIDTH = 2

_PROPERTY_RE = re.compile(r"^([A-Za-z_]\w*)=(.*)$", re.DOTALL)


@dataclass
class PlanLine:
    number: int
    indent: int
    text: str


class PlanTextParser(PlanParser):
    """Parse the indented text printed by DataFusion ``EXPLAIN``.

    Accepts either the bare physical plan or the boxed table printed by the
    CLI; from the table only the ``physical_plan`` rows are used.
    """

    def parse(self, text: str) -> PlanNode:
        if not text.strip():
            msg = "plan text is empty"
            raise PlanParseError(msg)
        lines = self._plan_lines(text)
        if not lines:
            msg = "no operator lines found"
            raise PlanParseError(msg)

        root: Dict[str, Any] | None = None
        stack: List[tuple[int, Dict[str, Any]]] = []
        for line in lines:
            while stack and stack[-1][0] >= line.indent:
                stack.pop()
            node = self._parse_operator(line.text)
            node["level"] = len(stack)
            if stack:
                stack[-1][1]["children"].append(node)
            elif root is None:
                root = node
            else:
                msg = f"second root operator {node['operator']!r}"
                raise PlanParseError(msg, line.number)
            stack.append((line.indent, node))

        logger.debug("Parsed %d plan lines", len(lines))
        return PlanNode.model_validate(root)

    def parse_properties(self, operator: str, text: str) -> Dict[str, str]:
        """``a=1, b=[x, y], c`` -> ``{"a": "1", "b": "[x, y]", ...}``.

        A segment without ``key=`` continues the previous value (``sort_exprs``
        lists are printed without brackets). A leading bare segment is the
        predicate of a ``FilterExec`` and the main expression otherwise.
        """
        properties: Dict[str, str] = {}
        last_key: str | None = None
        for segment in split_top_level(text):
            if not segment:
                continue
            match = _PROPERTY_RE.match(segment)
            if match:
                last_key = match.group(1)
                properties[last_key] = match.group(2).strip()
            elif last_key is not None:
                properties[last_key] = f"{properties[last_key]}, {segment}"
            else:
                last_key = "filter" if operator == "FilterExec" else "expression"
                properties[last_key] = segment
        return properties

    def _parse_operator(self, text: str) -> Dict[str, Any]:
        operator, separator, rest = text.partition(":")
        operator = operator.strip()
        properties = self.parse_properties(operator, rest) if separator and rest.strip() else {}
        return {
            "operator": operator,
            "properties": properties or None,
            "children": [],
        }

    def _plan_lines(self, text: str) -> List[PlanLine]:
        numbered = list(enumerate(text.splitlines(), start=1))
        if any(line.lstrip().startswith("|") for _, line in numbered):
            numbered = self._physical_plan_rows(numbered)
        lines: List[PlanLine] = []
        for number, raw in numbered:
            if not raw.strip():
                continue
            expanded = raw.rstrip().replace("\t", " " * TAB_WIDTH)
            stripped = expanded.lstrip(" ")
            indent = (len(expanded) - len(stripped)) // INDENT_WIDTH
            lines.append(PlanLine(number=number, indent=indent, text=stripped))
        return lines

    def _physical_plan_rows(self, numbered: List[tuple[int, str]]) -> List[tuple[int, str]]:
        rows: List[tuple[int, str]] = []
        section = ""
        for number, raw in numbered:
            line = raw.strip()
            if not line.startswith("|"):
                # borders and the echoed query around the table
                continue
            inner = line[1:-1] if line.endswith("|") else line[1:]
            plan_type, separator, plan = inner.partition("|")
            if not separator:
                continue
            if plan_type.strip():
                section = plan_type.strip()
            if section != PHYSICAL_PLAN_SECTION:
                continue
            rows.append((number, plan.rstrip().removeprefix(" ")))
        return rows

