from __future__ import annotations

from pathlib import Path


class DirMirrorError(Exception):
    pass


class ValidationError(DirMirrorError, ValueError):
    pass


class ComparisonRequiredError(DirMirrorError, RuntimeError):
    pass


class FileTransferError(DirMirrorError):
    def __init__(self, source: Path, destination: Path, operation_name: str, reason: str) -> None:
        super().__init__(f"Failed to {operation_name.lower()} file {source} -> {destination}: {reason}")
        self.source = source
        self.destination = destination
        self.operation_name = operation_name
