"""Models package for buildscope."""

from .project_models import ProjectState, ProjectSummary, TaskSummary

__all__ = [
    "ProjectState",
    "ProjectSummary",
    "TaskSummary",
]
