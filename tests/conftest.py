import os
import shutil
import tempfile

import pytest

from ideaforge import IdeaForge
from fakes import FakeDriver, FakeLLM
from workflows import ProjectStore


@pytest.fixture(autouse=True)
def quiet_log():
    """Collect IdeaForge log lines instead of printing them."""
    lines = []
    IdeaForge.set_sink(lines.append)
    yield lines
    IdeaForge.set_sink(None)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    dir_path = tempfile.mkdtemp(prefix="ideaforge_test_")
    yield dir_path
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def store(temp_dir):
    """A project store in a fresh database."""
    project_store = ProjectStore(os.path.join(temp_dir, "projects.db"))
    yield project_store
    project_store.close()


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def llm():
    return FakeLLM()
