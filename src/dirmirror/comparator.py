from __future__ import annotations

import logging
from pathlib import Path

from dirmirror.differ import compare_directories
from dirmirror.errors import ComparisonRequiredError
from dirmirror.file_operations import CopyFileOperation, FileOperation
from dirmirror.ignore_engine import IgnoreEngine
from dirmirror.models import DirectoryEntry, DirectoryPair, ReplicationStats
from dirmirror.progress import ProgressSnapshot, ProgressState, ReplicationState
from dirmirror.replicator import ReplicationOptions, replicate


class DirectoryComparator:
    """Compares a source/destination pair and replicates what is missing.

    ``compare`` and ``replicate`` are blocking; callers that need a responsive
    foreground run them on a worker thread and poll :meth:`progress`.
    """

    def __init__(
        self,
        directory_pair: DirectoryPair | None = None,
        file_operation: FileOperation | None = None,
        ignore_engine: IgnoreEngine | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.directory_pair = directory_pair
        self.file_operation: FileOperation = file_operation or CopyFileOperation()
        self.ignore_engine = ignore_engine
        self.log = logger or logging.getLogger("dirmirror.comparator")
        self.comparison_result: DirectoryEntry | None = None
        self._progress = ProgressState()

    @staticmethod
    def _as_pair(source: DirectoryPair | Path | str, destination: Path | str | None) -> DirectoryPair:
        if isinstance(source, DirectoryPair):
            return source
        if destination is None:
            raise ValueError("A destination directory is required when source is a path")
        return DirectoryPair(Path(source), Path(destination))

    def validate(
        self,
        source: DirectoryPair | Path | str | None = None,
        destination: Path | str | None = None,
    ) -> bool:
        if source is None:
            return self.directory_pair is not None and self.directory_pair.validate()
        return self._as_pair(source, destination).validate()

    def compare(
        self,
        source: DirectoryPair | Path | str | None = None,
        destination: Path | str | None = None,
        allow_missing_destination: bool = False,
    ) -> DirectoryEntry:
        pair = self._as_pair(source, destination) if source is not None else self.directory_pair
        if pair is None:
            raise ComparisonRequiredError("No directory pair has been set")

        # A missing destination diffs as empty: everything under source is reported.
        pair.require_valid(allow_missing_destination=allow_missing_destination)
        self.directory_pair = pair

        result = compare_directories(pair.source_directory, pair.destination_directory, self.ignore_engine)
        self.comparison_result = result.root
        self._progress.set_total(result.total_files)
        self.log.info(
            "Compared %s -> %s: %s missing file(s)",
            pair.source_directory,
            pair.destination_directory,
            result.total_files,
        )
        return result.root

    def replicate(
        self,
        diff_tree: DirectoryEntry | None = None,
        options: ReplicationOptions | None = None,
    ) -> ReplicationStats:
        tree = diff_tree if diff_tree is not None else self.comparison_result
        if tree is None:
            raise ComparisonRequiredError("No comparison has been performed yet; call compare() first")
        if self.directory_pair is None:
            raise ComparisonRequiredError("No directory pair has been set")

        if tree is not self.comparison_result:
            self._progress.set_total(tree.file_count())

        pair = self.directory_pair
        stats = replicate(
            tree,
            pair.source_directory,
            pair.destination_directory,
            file_operation=self.file_operation,
            progress=self._progress,
            options=options,
            logger=self.log,
        )
        self.log.info(
            "%s finished: transferred=%s directoriesCreated=%s directoriesFailed=%s",
            self.file_operation.name,
            stats.transferred,
            stats.directories_created,
            stats.directories_failed,
        )
        return stats

    @property
    def total_file_count(self) -> int:
        return self._progress.total_file_count

    @property
    def processed_file_count(self) -> int:
        return self._progress.processed_file_count

    @property
    def currently_copying_file_name(self) -> str:
        return self._progress.currently_copying_file_name

    @property
    def state(self) -> ReplicationState:
        return self._progress.state

    def progress(self) -> ProgressSnapshot:
        return self._progress.snapshot()
