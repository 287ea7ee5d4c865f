from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import ExcalidrawDocument
from domain.ports.repositories import ExcalidrawRepository

EXCALIDRAW_SUFFIX = ".excalidraw"


class FileSystemExcalidrawRepository(ExcalidrawRepository):
    def load_by_path(self, path: Path) -> ExcalidrawDocument:
        data = load_json(path)
        return ExcalidrawDocument(
            elements=data.get("elements", []),
            app_state=data.get("appState", {}),
            files=data.get("files", {}),
        )

    def save(self, document: ExcalidrawDocument, path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(lock_path)):
            write_json_atomic(path, document.to_dict())

    def output_path(self, source: Path, output_dir: Path) -> Path:
        return output_dir / f"{source.stem}{EXCALIDRAW_SUFFIX}"
