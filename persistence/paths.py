from __future__ import annotations

from pathlib import Path

DATA_FILE_NAME = "data.json"


def project_root() -> Path:
    # persistence/paths.py -> persistence -> project root
    return Path(__file__).resolve().parents[1]


def default_data_file() -> Path:
    return project_root() / DATA_FILE_NAME


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_parent_dir(path: Path) -> Path:
    ensure_dir(path.parent)
    return path
