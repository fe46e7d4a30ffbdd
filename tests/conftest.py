"""Pytest fixtures for Deepfield tests."""

import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from deepfield.config.settings import get_settings
from deepfield.state.manager import WorkspaceManager
from deepfield.state.schemas import StartAnswers


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep tests away from the user's ~/.deepfield config and env."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in list(os.environ):
        if key.startswith("DEEPFIELD_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def manager(tmp_path) -> WorkspaceManager:
    """Scaffolded workspace under a temporary root."""
    root = tmp_path / "project"
    root.mkdir()
    mgr = WorkspaceManager(root)
    mgr.scaffold()
    return mgr


@pytest.fixture
def answers() -> StartAnswers:
    """Typical start answers."""
    return StartAnswers(
        project_name="Billing",
        goal="Map the invoicing flow",
        focus_areas=["architecture", "data-models"],
    )


@pytest.fixture
def filled_brief() -> str:
    """Brief text long enough to count as filled in."""
    return "# Project Brief: Billing\n\n" + "The invoicing service is a Django monolith. " * 20


@pytest.fixture
def source_tree(tmp_path) -> Path:
    """Directory with two small text files."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.txt").write_text("hello")
    (src / "b.txt").write_text("world")
    return src
