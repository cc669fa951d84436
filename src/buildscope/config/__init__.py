"""Configuration package for buildscope."""

from .build_config import BuildConfig

__all__ = ["BuildConfig"]
