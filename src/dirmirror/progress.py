from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import threading


NOT_STARTED_SENTINEL = -1


class ReplicationState(str, Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class ProgressSnapshot:
    state: ReplicationState
    total_file_count: int
    processed_file_count: int
    currently_copying_file_name: str

    @property
    def finished(self) -> bool:
        return self.state in {ReplicationState.COMPLETED, ReplicationState.FAILED}


class ProgressState:
    """Counters written by one replication worker and polled by observers.

    Every write happens under the lock on its own, so the filename and the
    processed count are individually consistent but may be observed one
    update apart.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = ReplicationState.NOT_STARTED
        self._total_file_count = 0
        self._processed_file_count = NOT_STARTED_SENTINEL
        self._currently_copying_file_name = ""

    @property
    def state(self) -> ReplicationState:
        with self._lock:
            return self._state

    @property
    def total_file_count(self) -> int:
        with self._lock:
            return self._total_file_count

    @property
    def processed_file_count(self) -> int:
        with self._lock:
            return self._processed_file_count

    @property
    def currently_copying_file_name(self) -> str:
        with self._lock:
            return self._currently_copying_file_name

    def set_total(self, total_file_count: int) -> None:
        with self._lock:
            self._total_file_count = total_file_count

    def begin_run(self) -> None:
        with self._lock:
            self._state = ReplicationState.RUNNING
            self._processed_file_count = 0
            self._currently_copying_file_name = ""

    def set_current_file(self, name: str) -> None:
        with self._lock:
            self._currently_copying_file_name = name

    def increment_processed(self) -> int:
        with self._lock:
            if self._state is not ReplicationState.RUNNING:
                raise RuntimeError("Processed count can only change while a run is in progress")
            self._processed_file_count += 1
            return self._processed_file_count

    def finish(self, failed: bool = False) -> None:
        with self._lock:
            self._state = ReplicationState.FAILED if failed else ReplicationState.COMPLETED

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            return ProgressSnapshot(
                state=self._state,
                total_file_count=self._total_file_count,
                processed_file_count=self._processed_file_count,
                currently_copying_file_name=self._currently_copying_file_name,
            )
