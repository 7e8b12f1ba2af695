from __future__ import annotations

from pathlib import Path
import shutil
import tempfile
from typing import Protocol


class FileOperation(Protocol):
    name: str

    def execute(self, source: Path, destination: Path) -> bool:
        ...


class CopyFileOperation:
    name = "Copy"

    def execute(self, source: Path, destination: Path) -> bool:
        with tempfile.NamedTemporaryFile(delete=False, dir=str(destination.parent)) as tmp:
            tmp_path = Path(tmp.name)
        try:
            shutil.copy2(source, tmp_path)
            tmp_path.replace(destination)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)
        return True


class MoveFileOperation:
    name = "Move"

    def execute(self, source: Path, destination: Path) -> bool:
        if destination.is_file():
            destination.unlink()
        shutil.move(str(source), str(destination))
        return True


FILE_OPERATIONS: dict[str, type] = {
    "copy": CopyFileOperation,
    "move": MoveFileOperation,
}


def build_file_operation(name: str) -> FileOperation:
    try:
        operation_cls = FILE_OPERATIONS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown file operation '{name}'; expected one of: {', '.join(FILE_OPERATIONS)}") from None
    return operation_cls()
