from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """
    A data file location inside a temp directory so tests never touch the real ./data.json.
    """
    return tmp_path / "data" / "data.json"


@pytest.fixture
def make_settings(data_file: Path):
    from settings import Settings

    def _make(**overrides):
        values = {
            "environment": "test",
            "data_file_path": data_file,
            "debug_log_requests": False,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def make_client(make_settings):
    from fastapi.testclient import TestClient

    import app as app_module

    def _make(**overrides) -> TestClient:
        return TestClient(app_module.create_app(make_settings(**overrides)))

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
