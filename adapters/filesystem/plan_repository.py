from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from adapters.filesystem.json_utils import load_json
from adapters.plan_text.parser import PlanTextParser
from domain.models import PlanNode
from domain.ports.repositories import PlanParser, PlanRepository

PLAN_TEXT_SUFFIXES = (".txt", ".sql", ".plan")
PLAN_JSON_SUFFIX = ".json"


class FileSystemPlanRepository(PlanRepository):
    """Reads plans either as ``EXPLAIN`` text or as a JSON ``PlanNode`` tree."""

    def __init__(self, parser: PlanParser | None = None) -> None:
        self.parser = parser or PlanTextParser()

    def load_by_path(self, path: Path) -> PlanNode:
        if path.suffix.lower() == PLAN_JSON_SUFFIX:
            return PlanNode.model_validate(load_json(path))
        return self.parser.parse(path.read_text(encoding="utf-8"))

    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, PlanNode]]:
        return [(path, self.load_by_path(path)) for path in sorted(self._iter_paths(directory))]

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        for path in directory.iterdir():
            if not path.is_file():
                continue
            suffix = path.suffix.lower()
            if suffix in PLAN_TEXT_SUFFIXES or suffix == PLAN_JSON_SUFFIX:
                yield path
