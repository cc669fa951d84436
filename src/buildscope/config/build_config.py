"""Build configuration with environment variable loading."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class BuildConfig(BaseModel):
    """Configuration for project definition and task execution."""

    working_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("BUILDSCOPE_WORKING_DIR", os.getcwd())),
        description="Base directory of top-level projects",
    )
    parallel: bool = Field(
        default_factory=lambda: os.getenv("BUILDSCOPE_PARALLEL", "false").lower() == "true",
        description="Run recursive task children concurrently",
    )
    max_parallelism: int = Field(
        default_factory=lambda: int(os.getenv("BUILDSCOPE_MAX_PARALLELISM", "4")),
        ge=1,
        description="Maximum concurrently running sibling tasks",
    )
    verbose: bool = Field(
        default_factory=lambda: os.getenv("BUILDSCOPE_VERBOSE", "false").lower() == "true",
        description="Enable verbose logging and task messages",
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("BUILDSCOPE_LOG_LEVEL", "WARNING"),
        description="Log level when not verbose",
    )
