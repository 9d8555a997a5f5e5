"""Shared test fixtures."""

from pathlib import Path

import pytest
from md2doc.config import Config, OutputConfig
from md2doc.themes import Theme, resolve_theme


@pytest.fixture
def theme() -> Theme:
    """Default theme."""
    return resolve_theme()


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a configuration writing HTML and DOCX into tmp_path/out."""
    return Config(output=OutputConfig(format="both", directory=tmp_path / "out"))
