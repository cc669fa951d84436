"""Data models describing projects and tasks."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProjectState(str, Enum):
    """Evaluation state of a project definition."""

    PENDING = "pending"
    EVALUATING = "evaluating"
    EVALUATED = "evaluated"


class TaskSummary(BaseModel):
    """Snapshot of a task for reporting."""

    name: str = Field(description="Fully-qualified task name")
    kind: str = Field(description="Task class name")
    project: Optional[str] = Field(default=None, description="Owning project name")
    prerequisites: List[str] = Field(
        default_factory=list, description="Prerequisite names"
    )
    action_count: int = Field(default=0, description="Number of actions")
    invoked: bool = Field(default=False)


class ProjectSummary(BaseModel):
    """Snapshot of a project definition for reporting."""

    name: str = Field(description="Dotted project name")
    parent: Optional[str] = Field(default=None, description="Parent project name")
    base_dir: str = Field(description="Project base directory")
    state: ProjectState = Field(description="Evaluation state")
    attributes: Dict[str, Any] = Field(
        default_factory=dict, description="Resolved or explicitly set attributes"
    )
    tasks: List[TaskSummary] = Field(
        default_factory=list, description="Tasks owned by the project"
    )
