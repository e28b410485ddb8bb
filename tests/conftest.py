"""Pytest configuration for tests.

Sets up Python path and shared fixtures for all tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to Python path so imports work correctly
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays without waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.delays)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def pipeline_workdir(tmp_path, monkeypatch):
    """Working directory holding the files a pipeline publish commits."""
    (tmp_path / ".github" / "workflows").mkdir(parents=True)
    (tmp_path / ".github" / "workflows" / "postman-tests.yml").write_text(
        "name: Run Postman Collection\non: [push]\n"
    )
    (tmp_path / "collection.json").write_text(json.dumps({"info": {"name": "demo"}}))
    (tmp_path / "package.json").write_text(json.dumps({"name": "postman-collection-runner"}))
    (tmp_path / "package-lock.json").write_text(json.dumps({"lockfileVersion": 3}))
    monkeypatch.chdir(tmp_path)
    return Path.cwd()
