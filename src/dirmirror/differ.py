from __future__ import annotations

import logging
import os
from pathlib import Path

from dirmirror.ignore_engine import IgnoreEngine
from dirmirror.models import DiffResult, DirectoryEntry, FileEntry


log = logging.getLogger("dirmirror.differ")


def _list_entries(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as iterator:
            entries = list(iterator)
    except OSError as exc:
        log.warning("Cannot list directory %s, treating it as empty: %s", directory, exc)
        return []
    return sorted(entries, key=lambda entry: entry.name)


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


class _TreeDiffer:
    def __init__(self, ignore_engine: IgnoreEngine | None) -> None:
        self.ignore_engine = ignore_engine
        self.total_files = 0

    def _ignored(self, relative_path: Path, is_dir: bool) -> bool:
        return self.ignore_engine is not None and self.ignore_engine.is_ignored(relative_path, is_dir=is_dir)

    def diff(self, source_dir: Path, destination_dir: Path, relative: Path, parent: DirectoryEntry) -> None:
        for entry in _list_entries(source_dir):
            is_dir = _is_dir(entry)
            rel_path = relative / entry.name
            if self._ignored(rel_path, is_dir):
                continue

            destination_item = destination_dir / entry.name
            if not destination_item.exists():
                if is_dir:
                    node = DirectoryEntry(entry.name)
                    self.add_all(Path(entry.path), rel_path, node)
                    parent.add_child(node)
                else:
                    parent.add_child(FileEntry(entry.name))
                    self.total_files += 1
            elif is_dir and destination_item.is_dir():
                node = DirectoryEntry(entry.name)
                self.diff(Path(entry.path), destination_item, rel_path, node)
                if node.has_children():
                    parent.add_child(node)
            # Same name on both sides with any other type combination counts as present.

    def add_all(self, directory: Path, relative: Path, parent: DirectoryEntry) -> None:
        for entry in _list_entries(directory):
            is_dir = _is_dir(entry)
            rel_path = relative / entry.name
            if self._ignored(rel_path, is_dir):
                continue

            if is_dir:
                node = DirectoryEntry(entry.name)
                self.add_all(Path(entry.path), rel_path, node)
                parent.add_child(node)
            else:
                parent.add_child(FileEntry(entry.name))
                self.total_files += 1


def compare_directories(
    source_root: Path,
    destination_root: Path,
    ignore_engine: IgnoreEngine | None = None,
) -> DiffResult:
    """Build the tree of entries under ``source_root`` missing from ``destination_root``.

    Directories that exist on both sides only appear when something inside
    them is missing. Children are visited in name order.
    """
    root = DirectoryEntry(source_root.name)
    differ = _TreeDiffer(ignore_engine)
    differ.diff(source_root, destination_root, Path(), root)
    log.debug(
        "Compared %s -> %s: %s missing file(s), %s missing item(s)",
        source_root,
        destination_root,
        differ.total_files,
        root.item_count(),
    )
    return DiffResult(root=root, total_files=differ.total_files)
