"""
Environment snapshots for child toolchain processes.

Each build unit gets its own copy; ``os.environ`` is never modified.
"""
from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from crossbuild.core.platform import Platform

GOOS = "GOOS"
GOARCH = "GOARCH"


def snapshot_environ(source: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Copy of *source* (default ``os.environ``)."""
    if source is None:
        source = os.environ
    return dict(source)


def set_env(environ: Mapping[str, str], key: str, value: str) -> Dict[str, str]:
    """
    Return a copy of *environ* with *key* set to *value*.

    An existing key keeps its position and is replaced; a new key is
    appended. *environ* itself is left untouched.
    """
    merged = dict(environ)
    merged[key] = value
    return merged


def target_environ(target: Platform, source: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment for a toolchain run that targets *target*."""
    env = snapshot_environ(source)
    env = set_env(env, GOOS, target.os)
    env = set_env(env, GOARCH, target.arch)
    return env
