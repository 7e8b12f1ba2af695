from __future__ import annotations

import argparse
from pathlib import Path
import sys
import threading
from typing import cast

from dirmirror.comparator import DirectoryComparator
from dirmirror.config import get_jobs, load_config
from dirmirror.errors import DirMirrorError, ValidationError
from dirmirror.file_operations import FILE_OPERATIONS, build_file_operation
from dirmirror.ignore_engine import build_ignore_engine
from dirmirror.logging_setup import configure_logging
from dirmirror.models import DirectoryEntry, DirectoryPair, ReplicationStats
from dirmirror.progress import ProgressSnapshot
from dirmirror.replicator import ReplicationOptions
from dirmirror.run_service import (
    EXIT_INVALID_CONFIG,
    EXIT_PARTIAL_FAILURES,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    run_jobs,
)


DEFAULT_POLL_INTERVAL = 0.5


def _add_diff_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", type=Path)
    parser.add_argument("destination", type=Path)
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Gitignore-style pattern to leave out of the comparison (repeatable)",
    )
    parser.add_argument("--gitignore", action="store_true", help="Honor .gitignore files under the source")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirmirror",
        description="Find files missing from a destination directory and copy them over",
    )
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", type=Path, default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare_parser = subparsers.add_parser("compare", help="Show entries missing from the destination")
    _add_diff_arguments(compare_parser)

    replicate_parser = subparsers.add_parser("replicate", help="Copy missing entries into the destination")
    _add_diff_arguments(replicate_parser)
    replicate_parser.add_argument("--operation", choices=sorted(FILE_OPERATIONS), default="copy")
    replicate_parser.add_argument("--dry-run", action="store_true")
    replicate_parser.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL)

    run_parser = subparsers.add_parser("run", help="Run configured jobs")
    run_parser.add_argument("--config", required=True, type=Path)
    run_parser.add_argument("--job", help="Run only one job by name")
    run_parser.add_argument("--dry-run", action="store_true")
    run_parser.add_argument("--stop-on-error", action="store_true")

    validate_parser = subparsers.add_parser("validate-config", help="Validate config")
    validate_parser.add_argument("--config", required=True, type=Path)

    list_parser = subparsers.add_parser("list", help="List jobs and their source/destination mappings")
    list_parser.add_argument("--config", required=True, type=Path)
    list_parser.add_argument("--job", help="List only one job by name")

    return parser


def format_tree(root: DirectoryEntry) -> list[str]:
    lines = [f"{root.name}/ (root)"]
    for relative, node in root.walk():
        indent = "  " * len(relative.parts)
        suffix = "/" if node.is_directory else ""
        lines.append(f"{indent}{node.name}{suffix}")
    return lines


def _print_progress(snapshot: ProgressSnapshot) -> None:
    processed = max(snapshot.processed_file_count, 0)
    current = snapshot.currently_copying_file_name or "-"
    print(f"[{snapshot.state.value}] {processed}/{snapshot.total_file_count} {current}")


def _replicate_with_progress(
    comparator: DirectoryComparator,
    options: ReplicationOptions,
    poll_interval: float,
) -> ReplicationStats:
    outcome: dict[str, object] = {}

    def _worker() -> None:
        try:
            outcome["stats"] = comparator.replicate(options=options)
        except Exception as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_worker, name="dirmirror-replicate", daemon=True)
    worker.start()

    last_seen: tuple[int, str] | None = None
    while worker.is_alive():
        worker.join(poll_interval)
        snapshot = comparator.progress()
        key = (snapshot.processed_file_count, snapshot.currently_copying_file_name)
        if key != last_seen and snapshot.processed_file_count > 0:
            _print_progress(snapshot)
            last_seen = key

    error = outcome.get("error")
    if isinstance(error, Exception):
        raise error
    return cast(ReplicationStats, outcome["stats"])


def _diff_comparator(args: argparse.Namespace, operation: str = "copy") -> DirectoryComparator:
    return DirectoryComparator(
        directory_pair=DirectoryPair(args.source.expanduser(), args.destination.expanduser()),
        file_operation=build_file_operation(operation),
        ignore_engine=build_ignore_engine(args.source.expanduser(), args.exclude, args.gitignore),
    )


def cmd_compare(args: argparse.Namespace) -> int:
    comparator = _diff_comparator(args)
    try:
        diff_tree = comparator.compare()
    except ValidationError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    if not diff_tree.has_children():
        print("All files and directories from source exist in destination.")
        return EXIT_SUCCESS

    for line in format_tree(diff_tree):
        print(line)
    print(f"Missing: {comparator.total_file_count} file(s), {diff_tree.item_count()} item(s)")
    return EXIT_SUCCESS


def cmd_replicate(args: argparse.Namespace) -> int:
    comparator = _diff_comparator(args, operation=args.operation)
    try:
        diff_tree = comparator.compare()
    except ValidationError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    if not diff_tree.has_children():
        print("Nothing to replicate: destination is in sync.")
        return EXIT_SUCCESS

    options = ReplicationOptions(dry_run=args.dry_run)
    try:
        stats = _replicate_with_progress(comparator, options, args.poll_interval)
    except DirMirrorError as exc:
        snapshot = comparator.progress()
        print(
            f"Replication failed after {max(snapshot.processed_file_count, 0)}/{snapshot.total_file_count} "
            f"file(s): {exc}",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    prefix = "[dry-run] " if args.dry_run else ""
    print(
        f"{prefix}{comparator.file_operation.name}: transferred={stats.transferred}/{comparator.total_file_count} "
        f"directoriesCreated={stats.directories_created} directoriesFailed={stats.directories_failed}"
    )
    return EXIT_PARTIAL_FAILURES if stats.directories_failed else EXIT_SUCCESS


def cmd_run(args: argparse.Namespace) -> int:
    exit_code, summary = run_jobs(
        config_path=args.config,
        job_name=args.job,
        dry_run=args.dry_run,
        continue_on_error=not args.stop_on_error,
    )
    if exit_code == EXIT_INVALID_CONFIG:
        print(f"Invalid config: {args.config}", file=sys.stderr)
        return exit_code

    print(
        f"jobs={summary.processed_jobs} missing={summary.missing} transferred={summary.transferred} "
        f"directoriesCreated={summary.directories_created} directoriesFailed={summary.directories_failed}"
    )
    return exit_code


def cmd_validate(config_path: Path) -> int:
    try:
        config = load_config(config_path)
    except Exception as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    print(f"Valid config: {config_path} ({len(config.jobs)} job(s))")
    for job in config.jobs:
        print(
            f"  - job={job.name} "
            f"operation={job.operation} "
            f"excludes={len(job.excludes)} "
            f"createDestinationIfMissing={str(job.create_destination_if_missing).lower()}"
        )
    return EXIT_SUCCESS


def cmd_list(config_path: Path, job_name: str | None) -> int:
    try:
        config = load_config(config_path)
        jobs = get_jobs(config, job_name)
    except Exception as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    for job in jobs:
        print(f"job: {job.name} ({job.operation})")
        print(f"  - {job.source} -> {job.destination}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    if args.command == "compare":
        return cmd_compare(args)
    if args.command == "replicate":
        return cmd_replicate(args)
    if args.command == "run":
        return cmd_run(args)
    if args.command == "validate-config":
        return cmd_validate(args.config)
    if args.command == "list":
        return cmd_list(args.config, args.job)

    parser.print_help()
    return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
