from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json
import yaml

from dirmirror.file_operations import FILE_OPERATIONS


@dataclass(slots=True)
class JobConfig:
    name: str
    source: Path
    destination: Path
    operation: str = "copy"
    create_destination_if_missing: bool = False
    excludes: list[str] = field(default_factory=list)
    use_gitignore: bool = False


@dataclass(slots=True)
class AppConfig:
    jobs: list[JobConfig]


def _as_path(value: Any, field_name: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string path")
    return Path(value).expanduser()


def _as_bool(value: Any, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ValueError(f"{field_name} must be a boolean")


def _as_list_of_strings(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        raise ValueError(f"{field_name} must be a list of strings")
    return [item for item in value if item.strip()]


def _load_raw_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ValueError(f"Config file does not exist: {config_path}")

    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in {".yml", ".yaml"}:
        loaded = yaml.safe_load(text)
    elif suffix == ".json":
        loaded = json.loads(text)
    else:
        raise ValueError("Config file must be .yaml/.yml or .json")

    if not isinstance(loaded, dict):
        raise ValueError("Config root must be an object")
    return loaded


def _parse_job(raw_job: Any, index: int) -> JobConfig:
    if not isinstance(raw_job, dict):
        raise ValueError(f"jobs[{index}] must be an object")

    name = raw_job.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"jobs[{index}].name must be a non-empty string")

    operation = raw_job.get("operation", "copy")
    if not isinstance(operation, str) or operation.lower() not in FILE_OPERATIONS:
        raise ValueError(f"jobs[{index}].operation must be one of: {', '.join(FILE_OPERATIONS)}")

    return JobConfig(
        name=name,
        source=_as_path(raw_job.get("source"), f"jobs[{index}].source"),
        destination=_as_path(raw_job.get("destination"), f"jobs[{index}].destination"),
        operation=operation.lower(),
        create_destination_if_missing=_as_bool(
            raw_job.get("createDestinationIfMissing"),
            f"jobs[{index}].createDestinationIfMissing",
            default=False,
        ),
        excludes=_as_list_of_strings(raw_job.get("excludes"), f"jobs[{index}].excludes"),
        use_gitignore=_as_bool(raw_job.get("useGitignore"), f"jobs[{index}].useGitignore", default=False),
    )


def load_config(config_path: Path) -> AppConfig:
    raw = _load_raw_config(config_path)
    raw_jobs = raw.get("jobs")
    if not isinstance(raw_jobs, list) or not raw_jobs:
        raise ValueError("Config must contain non-empty 'jobs' list")

    jobs: list[JobConfig] = []
    names: set[str] = set()
    for index, raw_job in enumerate(raw_jobs):
        job = _parse_job(raw_job, index)
        if job.name in names:
            raise ValueError(f"Duplicate job name: {job.name}")
        names.add(job.name)
        jobs.append(job)

    return AppConfig(jobs=jobs)


def get_jobs(config: AppConfig, job_name: str | None) -> list[JobConfig]:
    if not job_name:
        return config.jobs
    matched = [job for job in config.jobs if job.name == job_name]
    if not matched:
        raise ValueError(f"No job named '{job_name}' found")
    return matched
