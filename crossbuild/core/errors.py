"""
Error taxonomy for crossbuild.

ResolutionError and BuildError are fatal for a run; DeleteError is
isolated per target by the clean pass.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from crossbuild.core.platform import Platform
    from crossbuild.io.schema import PassReport


class CrossbuildError(RuntimeError):
    """Base class for every error raised by crossbuild."""


class ResolutionError(CrossbuildError):
    """The source-control version query could not be run or failed."""


class BuildError(CrossbuildError):
    """A toolchain invocation could not be started or exited non-zero."""

    def __init__(
        self,
        message: str,
        platform: Optional[Platform] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.platform = platform
        self.returncode = returncode
        # Filled in by the orchestrator once every unit has joined
        self.report: Optional[PassReport] = None


class DeleteError(CrossbuildError):
    """An artifact exists but could not be removed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
