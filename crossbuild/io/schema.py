"""
Pass report schema.

One PassReport per build or clean pass. Records what each unit did, in
target order, and with what outcome.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from crossbuild import PACKAGE_NAME, REPORT_SCHEMA_VERSION, __version__


# =============================================================================
# Enums
# =============================================================================

class PassAction(str, Enum):
    BUILD = "build"
    CLEAN = "clean"


class TargetStatus(str, Enum):
    """Outcome of one unit of work."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REMOVED = "REMOVED"
    MISSING = "MISSING"


class ArtifactFlag(str, Enum):
    """Non-fatal findings about a produced artifact."""
    NON_ELF_OUTPUT = "NON_ELF_OUTPUT"
    ARCH_MISMATCH = "ARCH_MISMATCH"
    UNKNOWN_ARCH = "UNKNOWN_ARCH"


# =============================================================================
# Artifact metadata
# =============================================================================

class ElfMeta(BaseModel):
    """ELF header facts (Linux targets only)."""
    elf_class: Optional[int] = None
    elf_type: Optional[str] = None
    machine: Optional[str] = None


class ArtifactMeta(BaseModel):
    """A produced binary on disk."""
    filename: str
    sha256: str
    size_bytes: int
    elf: Optional[ElfMeta] = None
    flags: List[ArtifactFlag] = Field(default_factory=list)


# =============================================================================
# Outcomes
# =============================================================================

class TargetOutcome(BaseModel):
    """What happened to one target platform during a pass."""
    os: str
    arch: str
    artifact_name: str
    status: TargetStatus
    exit_code: Optional[int] = None
    duration_ms: int = 0
    error: Optional[str] = None
    artifact: Optional[ArtifactMeta] = None


class ToolInfo(BaseModel):
    name: str = PACKAGE_NAME
    version: str = __version__
    schema_version: str = REPORT_SCHEMA_VERSION


class PassReport(BaseModel):
    """Report for a complete build or clean pass."""
    tool: ToolInfo = Field(default_factory=ToolInfo)
    action: PassAction
    name: str
    version: str
    started_at: str
    finished_at: Optional[str] = None
    outcomes: List[TargetOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> List[TargetOutcome]:
        return [o for o in self.outcomes if o.status == TargetStatus.FAILED]

    @property
    def ok(self) -> bool:
        """True when no unit failed or was cancelled."""
        return not any(
            o.status in (TargetStatus.FAILED, TargetStatus.CANCELLED)
            for o in self.outcomes
        )


def now_iso() -> str:
    """Current UTC time as ISO-8601."""
    return datetime.now(timezone.utc).isoformat()
