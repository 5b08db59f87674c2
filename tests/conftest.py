# Pytest configuration file for the tests directory
import sys
import os
from pathlib import Path

import pytest

# Add the project root directory to the Python path
# This allows absolute imports like 'from core.registry import ...'
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from providers.filesystem import DirectoryResourceProvider


def _write_file(root: Path, relative: str, content: str = "x") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def write_file():
    """Returns a helper that writes a file (and its parents) under a root."""
    return _write_file


@pytest.fixture
def core_dir(tmp_path) -> Path:
    """Resource directory holding a.png and css/site.css."""
    root = tmp_path / "core"
    _write_file(root, "a.png", "core-a")
    _write_file(root, "css/site.css", "body {}")
    return root


@pytest.fixture
def module_dir(tmp_path) -> Path:
    """Resource directory holding b.png."""
    root = tmp_path / "module"
    _write_file(root, "b.png", "module-b")
    return root


@pytest.fixture
def core_provider(core_dir) -> DirectoryResourceProvider:
    return DirectoryResourceProvider(core_dir)


@pytest.fixture
def module_provider(module_dir) -> DirectoryResourceProvider:
    return DirectoryResourceProvider(module_dir)
