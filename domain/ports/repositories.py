from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import ExcalidrawDocument, PlanNode


class PlanParser(Protocol):
    def parse(self, text: str) -> PlanNode: ...


class PlanRepository(Protocol):
    def load_by_path(self, path: Path) -> PlanNode: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, PlanNode]]: ...


class ExcalidrawRepository(Protocol):
    def load_by_path(self, path: Path) -> ExcalidrawDocument: ...

    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...
