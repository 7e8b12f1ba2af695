from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging

from dirmirror.comparator import DirectoryComparator
from dirmirror.config import JobConfig, get_jobs, load_config
from dirmirror.file_operations import build_file_operation
from dirmirror.ignore_engine import build_ignore_engine
from dirmirror.models import DirectoryPair, ReplicationStats
from dirmirror.replicator import ReplicationOptions


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_PARTIAL_FAILURES = 2
EXIT_INVALID_CONFIG = 3


@dataclass(slots=True)
class RunSummary:
    missing: int = 0
    transferred: int = 0
    directories_created: int = 0
    directories_failed: int = 0
    processed_jobs: int = 0
    partial_failures: bool = False

    def absorb(self, missing: int, stats: ReplicationStats) -> None:
        self.missing += missing
        self.transferred += stats.transferred
        self.directories_created += stats.directories_created
        self.directories_failed += stats.directories_failed
        self.processed_jobs += 1
        if stats.directories_failed:
            self.partial_failures = True


def build_comparator(job: JobConfig, logger: logging.Logger | None = None) -> DirectoryComparator:
    return DirectoryComparator(
        directory_pair=DirectoryPair(job.source, job.destination),
        file_operation=build_file_operation(job.operation),
        ignore_engine=build_ignore_engine(job.source, job.excludes, job.use_gitignore),
        logger=logger,
    )


def run_job(job: JobConfig, dry_run: bool, log: logging.Logger) -> tuple[int, ReplicationStats]:
    if job.create_destination_if_missing and not dry_run:
        job.destination.mkdir(parents=True, exist_ok=True)

    comparator = build_comparator(job, logger=log)
    comparator.compare(allow_missing_destination=dry_run and job.create_destination_if_missing)
    missing = comparator.total_file_count
    stats = comparator.replicate(options=ReplicationOptions(dry_run=dry_run))
    return missing, stats


def run_jobs(
    config_path: Path,
    job_name: str | None = None,
    dry_run: bool = False,
    continue_on_error: bool = True,
    logger: logging.Logger | None = None,
) -> tuple[int, RunSummary]:
    log = logger or logging.getLogger("dirmirror.run")

    try:
        config = load_config(config_path)
        jobs = get_jobs(config, job_name)
    except Exception as exc:
        log.error("Config error: %s", exc)
        return EXIT_INVALID_CONFIG, RunSummary(partial_failures=True)

    summary = RunSummary()

    for job in jobs:
        try:
            missing, stats = run_job(job, dry_run=dry_run, log=log)
            summary.absorb(missing, stats)
            log.info(
                "[%s] %s -> %s | missing=%s transferred=%s directoriesCreated=%s directoriesFailed=%s",
                job.name,
                job.source,
                job.destination,
                missing,
                stats.transferred,
                stats.directories_created,
                stats.directories_failed,
            )
        except Exception as exc:
            summary.partial_failures = True
            log.error("[%s] failed for source %s: %s", job.name, job.source, exc)
            if not continue_on_error:
                return EXIT_RUNTIME_ERROR, summary

    exit_code = EXIT_PARTIAL_FAILURES if summary.partial_failures else EXIT_SUCCESS
    return exit_code, summary
