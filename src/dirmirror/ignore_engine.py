from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pathspec


def _read_ignore_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []


def _prefix_pattern(prefix: str, pattern: str) -> str:
    if not pattern or pattern.startswith("#"):
        return pattern

    negate = pattern.startswith("!")
    core = pattern[1:] if negate else pattern

    if core.startswith("/"):
        mapped = f"{prefix}{core}" if prefix else core
    else:
        mapped = f"{prefix}/{core}" if prefix else core

    return f"!{mapped}" if negate else mapped


def collect_gitignore_patterns(source_root: Path) -> list[str]:
    patterns: list[str] = []
    for gitignore in sorted(source_root.rglob(".gitignore")):
        rel_prefix = gitignore.parent.relative_to(source_root).as_posix().strip(".")
        for line in _read_ignore_lines(gitignore):
            if not line.strip():
                continue
            patterns.append(_prefix_pattern(rel_prefix, line))
    return patterns


class IgnoreEngine:
    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = [pattern for pattern in patterns if pattern.strip()]
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.patterns)

    def is_ignored(self, relative_path: Path, is_dir: bool = False) -> bool:
        unix_path = relative_path.as_posix()
        candidate = f"{unix_path}/" if is_dir and not unix_path.endswith("/") else unix_path
        return self._spec.match_file(candidate)


def build_ignore_engine(
    source_root: Path,
    excludes: Iterable[str] = (),
    use_gitignore: bool = False,
) -> IgnoreEngine | None:
    patterns = list(excludes)
    if use_gitignore:
        patterns.extend(collect_gitignore_patterns(source_root))
    if not patterns:
        return None
    return IgnoreEngine(patterns)
