"""
Compile and delete actions — the external-process / filesystem boundary.

compile: one ``go build`` per target, output streamed live to our own
stdout/stderr, GOOS/GOARCH set on a private environment copy.
delete: remove one artifact; a missing file counts as done.
"""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from crossbuild.config import BuildConfig
from crossbuild.core.artifact import inspect_artifact
from crossbuild.core.environ import target_environ
from crossbuild.core.errors import BuildError, DeleteError
from crossbuild.core.platform import BinaryDescriptor, Platform
from crossbuild.io.schema import ArtifactMeta, TargetStatus

logger = logging.getLogger(__name__)


def artifact_path(descriptor: BinaryDescriptor, target: Platform, config: BuildConfig) -> Path:
    """Absolute path of the artifact for *target*."""
    return (config.output_dir / descriptor.artifact_name(target)).resolve()


def build_command(descriptor: BinaryDescriptor, target: Platform, config: BuildConfig) -> List[str]:
    """
    The toolchain invocation for *target*.

    The version is stamped through the linker: ``-X main.version=<version>``
    by default.
    """
    ldflags = f"-ldflags=-X {config.version_variable}={descriptor.version}"
    output = artifact_path(descriptor, target, config)
    return list(config.toolchain) + ["build", ldflags, "-o", str(output), "."]


async def build_binary(
    descriptor: BinaryDescriptor,
    target: Platform,
    config: BuildConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> ArtifactMeta:
    """
    Compile the binary for *target*.

    Child stdout/stderr are inherited, so concurrent builds interleave
    their output as it happens. If this coroutine is cancelled the child
    process is killed before the cancellation propagates.

    Raises
    ------
    BuildError
        The toolchain could not be started, exited non-zero, or left no
        readable file at the artifact path.
    """
    cmd = build_command(descriptor, target, config)
    env = target_environ(target, environ)

    logger.info(f"Building binary: {descriptor.artifact_name(target)}")
    logger.debug("Running %s in %s", " ".join(cmd), config.source_dir)

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(config.source_dir),
            env=env,
        )
    except OSError as e:
        raise BuildError(
            f"Error running {cmd[0]} build for {target}: {e}",
            platform=target,
        ) from e

    try:
        returncode = await proc.wait()
    except asyncio.CancelledError:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
        raise

    if returncode != 0:
        raise BuildError(
            f"Error running {cmd[0]} build for {target}: exit status {returncode}",
            platform=target,
            returncode=returncode,
        )

    output = artifact_path(descriptor, target, config)
    if not output.is_file():
        raise BuildError(
            f"{cmd[0]} build for {target} exited 0 but produced no file {output.name}",
            platform=target,
            returncode=returncode,
        )
    try:
        return await asyncio.to_thread(inspect_artifact, output, target)
    except OSError as e:
        raise BuildError(
            f"Error inspecting {output.name} for {target}: {e}",
            platform=target,
            returncode=returncode,
        ) from e


def remove_binary(descriptor: BinaryDescriptor, target: Platform, config: BuildConfig) -> TargetStatus:
    """
    Remove the artifact for *target*.

    Returns REMOVED, or MISSING when there was nothing to remove.

    Raises
    ------
    DeleteError
        The file exists but could not be removed.
    """
    path = artifact_path(descriptor, target, config)
    try:
        os.remove(path)
    except FileNotFoundError:
        return TargetStatus.MISSING
    except OSError as e:
        raise DeleteError(f"Error removing binary: {e}", path=str(path)) from e
    logger.debug(f"Removed {path}")
    return TargetStatus.REMOVED
