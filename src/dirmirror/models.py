from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

from dirmirror.errors import ValidationError


@dataclass(slots=True, frozen=True)
class FileEntry:
    name: str

    @property
    def is_directory(self) -> bool:
        return False


@dataclass(slots=True)
class DirectoryEntry:
    name: str
    children: dict[str, "Node"] = field(default_factory=dict)

    @property
    def is_directory(self) -> bool:
        return True

    def add_child(self, child: "Node") -> None:
        self.children[child.name] = child

    def has_children(self) -> bool:
        return bool(self.children)

    def walk(self, prefix: Path = Path()) -> Iterator[tuple[Path, "Node"]]:
        """Yield ``(relative_path, node)`` for every descendant, depth-first."""
        for child in self.children.values():
            child_path = prefix / child.name
            yield child_path, child
            if isinstance(child, DirectoryEntry):
                yield from child.walk(child_path)

    def file_count(self) -> int:
        return sum(1 for _, node in self.walk() if isinstance(node, FileEntry))

    def item_count(self) -> int:
        return sum(1 for _ in self.walk())


Node = Union[FileEntry, DirectoryEntry]


@dataclass(slots=True)
class DiffResult:
    root: DirectoryEntry
    total_files: int = 0


@dataclass(slots=True)
class DirectoryPair:
    source_directory: Path
    destination_directory: Path

    def validate(self) -> bool:
        return self.source_directory.is_dir() and self.destination_directory.is_dir()

    def require_valid(self, allow_missing_destination: bool = False) -> None:
        if not self.source_directory.is_dir():
            raise ValidationError(
                f"Source directory does not exist or is not a directory: {self.source_directory}"
            )
        if allow_missing_destination and not self.destination_directory.exists():
            return
        if not self.destination_directory.is_dir():
            raise ValidationError(
                f"Destination directory does not exist or is not a directory: {self.destination_directory}"
            )


@dataclass(slots=True)
class ReplicationStats:
    transferred: int = 0
    directories_created: int = 0
    directories_failed: int = 0
