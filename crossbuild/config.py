"""
Configuration

Settings come from the environment (or a .env file) with the CROSSBUILD_
prefix. A BuildConfig is assembled once from settings and parsed CLI
arguments, then passed explicitly to the orchestrator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from pydantic_settings import BaseSettings

from crossbuild.core.platform import DEFAULT_TARGETS, Platform, parse_targets


class Settings(BaseSettings):
    """crossbuild settings"""

    # Binary
    PROGRAM_NAME: str = "example-command"
    VERSION_VARIABLE: str = "main.version"
    TARGETS: str = ",".join(str(t) for t in DEFAULT_TARGETS)

    # Tools
    GO_BINARY: str = "go"
    GIT_BINARY: str = "git"

    # Paths
    SOURCE_DIR: str = "greeting"
    OUTPUT_DIR: str = "."

    # Fan-out
    BUILD_JOBS: Optional[int] = None  # None = one worker per target
    FAIL_FAST: bool = False

    @property
    def targets(self) -> Tuple[Platform, ...]:
        return parse_targets(self.TARGETS)

    class Config:
        env_prefix = "CROSSBUILD_"
        env_file = ".env"
        case_sensitive = True


@dataclass(frozen=True)
class BuildConfig:
    """Everything a build or clean pass needs, fixed for the whole run."""

    name: str = "example-command"
    targets: Tuple[Platform, ...] = DEFAULT_TARGETS
    toolchain: Tuple[str, ...] = ("go",)
    git: str = "git"
    version_variable: str = "main.version"
    source_dir: Path = field(default_factory=lambda: Path("greeting"))
    output_dir: Path = field(default_factory=Path.cwd)
    jobs: Optional[int] = None
    fail_fast: bool = False

    def __post_init__(self):
        if self.jobs is not None and self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        jobs: Optional[int] = None,
        fail_fast: Optional[bool] = None,
    ) -> BuildConfig:
        """Build a config from *settings*; explicit arguments win."""
        return cls(
            name=settings.PROGRAM_NAME,
            targets=settings.targets,
            toolchain=(settings.GO_BINARY,),
            git=settings.GIT_BINARY,
            version_variable=settings.VERSION_VARIABLE,
            source_dir=Path(settings.SOURCE_DIR),
            output_dir=Path(settings.OUTPUT_DIR),
            jobs=jobs if jobs is not None else settings.BUILD_JOBS,
            fail_fast=settings.FAIL_FAST if fail_fast is None else fail_fast,
        )
