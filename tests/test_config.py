"""Tests for build configuration and logging setup."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from buildscope.config.build_config import BuildConfig
from buildscope.utils.logging_utils import configure_logging


@pytest.fixture
def package_logger():
    """Restore the package logger level after each test."""
    logger = logging.getLogger("buildscope")
    level = logger.level
    yield logger
    logger.setLevel(level)


class TestBuildConfig:
    """Test BuildConfig defaults and environment loading."""

    def test_defaults(self, monkeypatch):
        for var in (
            "BUILDSCOPE_WORKING_DIR",
            "BUILDSCOPE_PARALLEL",
            "BUILDSCOPE_MAX_PARALLELISM",
            "BUILDSCOPE_VERBOSE",
            "BUILDSCOPE_LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)

        config = BuildConfig()

        assert config.working_dir == Path.cwd()
        assert config.parallel is False
        assert config.max_parallelism == 4
        assert config.verbose is False
        assert config.log_level == "WARNING"

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BUILDSCOPE_WORKING_DIR", str(tmp_path))
        monkeypatch.setenv("BUILDSCOPE_PARALLEL", "true")
        monkeypatch.setenv("BUILDSCOPE_MAX_PARALLELISM", "8")
        monkeypatch.setenv("BUILDSCOPE_VERBOSE", "TRUE")

        config = BuildConfig()

        assert config.working_dir == tmp_path
        assert config.parallel is True
        assert config.max_parallelism == 8
        assert config.verbose is True

    def test_explicit_values_win(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BUILDSCOPE_PARALLEL", "true")
        config = BuildConfig(working_dir=tmp_path, parallel=False)
        assert config.parallel is False

    def test_max_parallelism_must_be_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            BuildConfig(working_dir=tmp_path, max_parallelism=0)


class TestConfigureLogging:
    """Test logging configuration."""

    def test_verbose_is_debug(self, tmp_path, package_logger):
        level = configure_logging(BuildConfig(working_dir=tmp_path, verbose=True))
        assert level == logging.DEBUG
        assert package_logger.level == logging.DEBUG

    def test_named_level(self, tmp_path, package_logger):
        config = BuildConfig(working_dir=tmp_path, verbose=False, log_level="info")
        assert configure_logging(config) == logging.INFO
        assert package_logger.level == logging.INFO

    def test_unknown_level_falls_back(self, tmp_path, package_logger):
        config = BuildConfig(working_dir=tmp_path, verbose=False, log_level="chatty")
        assert configure_logging(config) == logging.WARNING
