from pathlib import Path

import pytest

from dirmirror.config import get_jobs, load_config


def test_load_config_reads_jobs_with_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "dirmirror.yaml"
    config_file.write_text(
        """
jobs:
  - name: photos
    source: /data/photos
    destination: /backup/photos
    operation: move
    createDestinationIfMissing: true
    excludes:
      - "*.tmp"
      - "cache/"
  - name: docs
    source: /data/docs
    destination: /backup/docs
""".strip(),
        encoding="utf-8",
    )

    loaded = load_config(config_file)

    assert [job.name for job in loaded.jobs] == ["photos", "docs"]
    photos, docs = loaded.jobs
    assert photos.source == Path("/data/photos")
    assert photos.operation == "move"
    assert photos.create_destination_if_missing is True
    assert photos.excludes == ["*.tmp", "cache/"]
    assert docs.operation == "copy"
    assert docs.create_destination_if_missing is False
    assert docs.excludes == []
    assert docs.use_gitignore is False


def test_load_config_supports_json(tmp_path: Path) -> None:
    config_file = tmp_path / "dirmirror.json"
    config_file.write_text(
        '{"jobs": [{"name": "j", "source": "/a", "destination": "/b", "useGitignore": true}]}',
        encoding="utf-8",
    )

    loaded = load_config(config_file)

    assert loaded.jobs[0].use_gitignore is True


@pytest.mark.parametrize(
    ("job_body", "message"),
    [
        ("source: /a\n    destination: /b", "jobs\\[0\\].name"),
        ("name: j\n    destination: /b", "jobs\\[0\\].source"),
        ("name: j\n    source: /a\n    destination: /b\n    operation: sync", "jobs\\[0\\].operation"),
        ("name: j\n    source: /a\n    destination: /b\n    excludes: nope", "jobs\\[0\\].excludes"),
    ],
)
def test_load_config_rejects_invalid_jobs(tmp_path: Path, job_body: str, message: str) -> None:
    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(f"jobs:\n  - {job_body}\n", encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_config(config_file)


def test_load_config_rejects_duplicate_names_and_unknown_suffix(tmp_path: Path) -> None:
    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(
        """
jobs:
  - name: j
    source: /a
    destination: /b
  - name: j
    source: /c
    destination: /d
""".strip(),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="Duplicate job name: j"):
        load_config(config_file)

    text_file = tmp_path / "cfg.txt"
    text_file.write_text("jobs: []", encoding="utf-8")
    with pytest.raises(ValueError, match=".yaml/.yml or .json"):
        load_config(text_file)


def test_get_jobs_filters_by_name(tmp_path: Path) -> None:
    config_file = tmp_path / "cfg.yaml"
    config_file.write_text(
        """
jobs:
  - name: one
    source: /a
    destination: /b
  - name: two
    source: /c
    destination: /d
""".strip(),
        encoding="utf-8",
    )
    config = load_config(config_file)

    assert len(get_jobs(config, None)) == 2
    assert [job.name for job in get_jobs(config, "two")] == ["two"]
    with pytest.raises(ValueError, match="No job named 'three'"):
        get_jobs(config, "three")
