"""Resolve the project version from git."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from crossbuild.core.errors import ResolutionError

logger = logging.getLogger(__name__)

DESCRIBE_ARGS: List[str] = ["describe", "--tags", "--always"]


def normalize_version(raw: str) -> str:
    """Trim *raw* and drop a single leading ``v`` (``v1.2.3`` → ``1.2.3``)."""
    s = raw.strip()
    if s.startswith("v"):
        s = s[1:]
    return s


def resolve_version(git: str = "git", cwd: Optional[Path] = None) -> str:
    """
    Version of the working tree from ``git describe --tags --always``.

    The nearest tag is used when there is one, otherwise the abbreviated
    commit id. git's stderr is forwarded to ours.

    Raises
    ------
    ResolutionError
        git could not be started or exited non-zero.
    """
    cmd = [git] + DESCRIBE_ARGS
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=subprocess.PIPE,
            stderr=None,
            text=True,
        )
    except OSError as e:
        raise ResolutionError(f"Error running git describe: {e}") from e

    if result.returncode != 0:
        raise ResolutionError(
            f"Error running git describe: exit status {result.returncode}"
        )

    version = normalize_version(result.stdout)
    if not version:
        raise ResolutionError("git describe returned an empty version")
    logger.debug("Resolved version %s", version)
    return version
