"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from tests.sandbox import Sandbox


@pytest.fixture
def sandbox(tmp_path: Path) -> Sandbox:
    """Return an empty stackgen project."""
    return Sandbox(tmp_path / "project")
