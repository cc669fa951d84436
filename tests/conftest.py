"""Shared fixtures for buildscope tests."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from buildscope.config.build_config import BuildConfig
from buildscope.core.registry import ProjectRegistry


@pytest.fixture
def config(tmp_path):
    """Sequential build configuration rooted at a temporary directory."""
    return BuildConfig(working_dir=tmp_path, parallel=False, verbose=False)


@pytest.fixture
def registry(config):
    """Fresh project registry."""
    return ProjectRegistry(config=config)


@pytest.fixture
def parallel_registry(tmp_path):
    """Project registry running recursive tasks concurrently."""
    return ProjectRegistry(
        config=BuildConfig(working_dir=tmp_path, parallel=True, max_parallelism=4)
    )
