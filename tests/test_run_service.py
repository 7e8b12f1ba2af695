from pathlib import Path

from dirmirror.run_service import (
    EXIT_INVALID_CONFIG,
    EXIT_PARTIAL_FAILURES,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    run_jobs,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _job_yaml(name: str, source: Path, destination: Path, extra: str = "") -> str:
    lines = [
        f"  - name: {name}",
        f"    source: {source.as_posix()}",
        f"    destination: {destination.as_posix()}",
    ]
    if extra:
        lines.append(f"    {extra}")
    return "\n".join(lines)


def test_run_service_replicates_missing_files(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    target = tmp_path / "target"
    _write(src / "a.txt", "1")
    _write(src / "nested" / "b.txt", "2")
    _write(target / "a.txt", "1")

    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(
        "jobs:\n" + _job_yaml("j", src, target, "createDestinationIfMissing: true"),
        encoding="utf-8",
    )

    exit_code, summary = run_jobs(config_path=config_file)

    assert exit_code == EXIT_SUCCESS
    assert summary.processed_jobs == 1
    assert summary.missing == 1
    assert summary.transferred == 1
    assert summary.directories_created == 1
    assert (target / "nested" / "b.txt").exists()


def test_run_service_dry_run_creates_nothing(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    target = tmp_path / "target"
    _write(src / "a.txt", "1")
    target.mkdir()

    config_file = tmp_path / "cfg.yaml"
    config_file.write_text("jobs:\n" + _job_yaml("j", src, target), encoding="utf-8")

    exit_code, summary = run_jobs(config_path=config_file, dry_run=True)

    assert exit_code == EXIT_SUCCESS
    assert summary.transferred == 1
    assert not (target / "a.txt").exists()


def test_run_service_dry_run_previews_destination_it_would_create(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    target = tmp_path / "new" / "target"
    _write(src / "a.txt", "1")
    _write(src / "nested" / "b.txt", "2")

    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(
        "jobs:\n" + _job_yaml("j", src, target, "createDestinationIfMissing: true"),
        encoding="utf-8",
    )

    exit_code, summary = run_jobs(config_path=config_file, dry_run=True)

    assert exit_code == EXIT_SUCCESS
    assert summary.missing == 2
    assert summary.transferred == 2
    assert summary.partial_failures is False
    assert not (tmp_path / "new").exists()


def test_run_service_missing_destination_is_partial_failure(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    good_target = tmp_path / "good"
    _write(src / "a.txt", "1")
    good_target.mkdir()

    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(
        "jobs:\n"
        + _job_yaml("broken", src, tmp_path / "absent")
        + "\n"
        + _job_yaml("good", src, good_target),
        encoding="utf-8",
    )

    exit_code, summary = run_jobs(config_path=config_file)

    assert exit_code == EXIT_PARTIAL_FAILURES
    assert summary.partial_failures is True
    assert summary.processed_jobs == 1
    assert (good_target / "a.txt").exists()


def test_run_service_stops_on_first_error_when_asked(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    good_target = tmp_path / "good"
    _write(src / "a.txt", "1")
    good_target.mkdir()

    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(
        "jobs:\n"
        + _job_yaml("broken", src, tmp_path / "absent")
        + "\n"
        + _job_yaml("good", src, good_target),
        encoding="utf-8",
    )

    exit_code, summary = run_jobs(config_path=config_file, continue_on_error=False)

    assert exit_code == EXIT_RUNTIME_ERROR
    assert summary.processed_jobs == 0
    assert not (good_target / "a.txt").exists()


def test_run_service_unknown_job_is_invalid_config(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    src.mkdir()
    config_file = tmp_path / "cfg.yaml"
    config_file.write_text("jobs:\n" + _job_yaml("j", src, tmp_path / "t"), encoding="utf-8")

    exit_code, summary = run_jobs(config_path=config_file, job_name="missing")

    assert exit_code == EXIT_INVALID_CONFIG
    assert summary.partial_failures is True
