from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from dirmirror.errors import FileTransferError
from dirmirror.file_operations import FileOperation
from dirmirror.models import DirectoryEntry, FileEntry, Node, ReplicationStats
from dirmirror.progress import ProgressState


@dataclass(slots=True)
class ReplicationOptions:
    dry_run: bool = False


class _Replicator:
    def __init__(
        self,
        source_root: Path,
        destination_root: Path,
        file_operation: FileOperation,
        progress: ProgressState,
        options: ReplicationOptions,
        logger: logging.Logger,
    ) -> None:
        self.source_root = source_root
        self.destination_root = destination_root
        self.file_operation = file_operation
        self.progress = progress
        self.options = options
        self.log = logger
        self.stats = ReplicationStats()

    def _ensure_parent(self, destination: Path, relative: Path) -> bool:
        parent = destination.parent
        if self.options.dry_run or parent.is_dir():
            return True
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.stats.directories_failed += 1
            self.log.error("Failed to create parent directories for %s: %s", relative.as_posix() or ".", exc)
            return False
        return True

    def _ensure_directory(self, destination: Path, relative: Path) -> bool:
        display = relative.as_posix() or "."
        if destination.is_dir():
            self.log.debug("%s directory already exists: %s", self.file_operation.name, display)
            return True
        if self.options.dry_run:
            if destination.exists():
                self.stats.directories_failed += 1
                self.log.error("Failed to create directory %s: a file is in the way", display)
                return False
            self.stats.directories_created += 1
            self.log.info("[dry-run] %s directory created: %s", self.file_operation.name, display)
            return True
        try:
            destination.mkdir()
        except FileExistsError:
            if not destination.is_dir():
                self.stats.directories_failed += 1
                self.log.error("Failed to create directory %s: a file is in the way", display)
                return False
        except OSError as exc:
            self.stats.directories_failed += 1
            self.log.error("Failed to create directory %s: %s", display, exc)
            return False
        else:
            self.stats.directories_created += 1
        self.log.info("%s directory created: %s", self.file_operation.name, display)
        return True

    def _transfer(self, source: Path, destination: Path, relative: Path) -> None:
        display = relative.as_posix()
        operation_name = self.file_operation.name
        if self.options.dry_run:
            self.log.info("[dry-run] %s file: %s", operation_name, display)
        else:
            try:
                succeeded = self.file_operation.execute(source, destination)
            except OSError as exc:
                self.log.error("Failed to %s file: %s (%s)", operation_name.lower(), display, exc)
                raise FileTransferError(source, destination, operation_name, str(exc)) from exc
            if not succeeded:
                self.log.warning("%s reported no change for file: %s", operation_name, display)
                return
            self.log.info("%s file: %s", operation_name, display)

        self.stats.transferred += 1
        self.progress.set_current_file(display)
        self.progress.increment_processed()

    def process(self, node: Node, relative: Path) -> None:
        source = self.source_root / relative
        destination = self.destination_root / relative

        if not self._ensure_parent(destination, relative):
            return

        match node:
            case DirectoryEntry(children=children):
                if not self._ensure_directory(destination, relative):
                    return
                for child in children.values():
                    self.process(child, relative / child.name)
            case FileEntry():
                self._transfer(source, destination, relative)


def replicate(
    diff_tree: DirectoryEntry,
    source_root: Path,
    destination_root: Path,
    file_operation: FileOperation,
    progress: ProgressState,
    options: ReplicationOptions | None = None,
    logger: logging.Logger | None = None,
) -> ReplicationStats:
    """Create every entry of ``diff_tree`` under ``destination_root``.

    The tree root maps to the roots themselves. A failing file transfer stops
    the run with :class:`FileTransferError`; directories that cannot be
    created are logged and their subtree skipped.
    """
    replicator = _Replicator(
        source_root=source_root,
        destination_root=destination_root,
        file_operation=file_operation,
        progress=progress,
        options=options or ReplicationOptions(),
        logger=logger or logging.getLogger("dirmirror.replicator"),
    )
    progress.begin_run()
    try:
        replicator.process(diff_tree, Path())
    except Exception:
        progress.finish(failed=True)
        raise
    progress.finish()
    return replicator.stats
