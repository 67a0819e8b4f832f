"""
Target build orchestrator — fan out one unit of work per target platform.

Every pass launches all units at once and joins all of them before
returning. By default nothing is cancelled: a failed build does not stop
its siblings, and the first failure reported is raised once everyone has
finished. ``BuildConfig.jobs`` bounds how many units run at a time and
``BuildConfig.fail_fast`` cancels the stragglers after the first failure.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional

from crossbuild.config import BuildConfig
from crossbuild.core.actions import build_binary, remove_binary
from crossbuild.core.errors import BuildError, DeleteError
from crossbuild.core.platform import BinaryDescriptor, Platform
from crossbuild.io.schema import (
    PassAction,
    PassReport,
    TargetOutcome,
    TargetStatus,
    now_iso,
)

logger = logging.getLogger(__name__)

UnitFn = Callable[[Platform], Awaitable[TargetOutcome]]


def _outcome(
    descriptor: BinaryDescriptor,
    target: Platform,
    status: TargetStatus,
    **kwargs,
) -> TargetOutcome:
    return TargetOutcome(
        os=target.os,
        arch=target.arch,
        artifact_name=descriptor.artifact_name(target),
        status=status,
        **kwargs,
    )


def _ms_since(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)


async def for_each_target(
    descriptor: BinaryDescriptor,
    targets: List[Platform],
    fn: UnitFn,
    jobs: Optional[int] = None,
    fail_fast: bool = False,
) -> List[TargetOutcome]:
    """
    Run ``fn(target)`` for every target concurrently and wait for all of them.

    *fn* reports failures through the returned outcome's status, it does not
    raise. Outcomes come back in target order. Units cancelled by
    *fail_fast* (including ones still waiting for a *jobs* slot) are
    reported as CANCELLED.
    """
    sem = asyncio.Semaphore(jobs) if jobs else None

    async def _unit(target: Platform) -> TargetOutcome:
        if sem is None:
            return await fn(target)
        async with sem:
            return await fn(target)

    tasks = [asyncio.create_task(_unit(t)) for t in targets]
    if not tasks:
        return []

    if not fail_fast:
        # Unexpected errors surface from task.result() below, after the join
        await asyncio.gather(*tasks, return_exceptions=True)
    else:
        pending = set(tasks)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            if any(t.result().status == TargetStatus.FAILED for t in done):
                for t in pending:
                    t.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                break

    outcomes: List[TargetOutcome] = []
    for target, task in zip(targets, tasks):
        if task.cancelled():
            outcomes.append(_outcome(descriptor, target, TargetStatus.CANCELLED))
        else:
            outcomes.append(task.result())
    return outcomes


# =============================================================================
# Build
# =============================================================================

async def _build_targets(
    descriptor: BinaryDescriptor,
    targets: List[Platform],
    config: BuildConfig,
) -> PassReport:
    report = PassReport(
        action=PassAction.BUILD,
        name=descriptor.name,
        version=descriptor.version,
        started_at=now_iso(),
    )
    # Failures in the order they were reported, not target order
    failures: List[BuildError] = []

    async def _build(target: Platform) -> TargetOutcome:
        t0 = time.monotonic()
        try:
            artifact = await build_binary(descriptor, target, config)
        except BuildError as e:
            failures.append(e)
            logger.error(str(e))
            return _outcome(
                descriptor, target, TargetStatus.FAILED,
                exit_code=e.returncode,
                duration_ms=_ms_since(t0),
                error=str(e),
            )
        return _outcome(
            descriptor, target, TargetStatus.SUCCESS,
            exit_code=0,
            duration_ms=_ms_since(t0),
            artifact=artifact,
        )

    report.outcomes = await for_each_target(
        descriptor, targets, _build,
        jobs=config.jobs,
        fail_fast=config.fail_fast,
    )
    report.finished_at = now_iso()

    built = sum(1 for o in report.outcomes if o.status == TargetStatus.SUCCESS)
    logger.info(f"Built {built}/{len(targets)} targets of {descriptor.name} {descriptor.version}")

    if failures:
        first = failures[0]
        first.report = report
        raise first
    return report


def build_all(descriptor: BinaryDescriptor, config: BuildConfig) -> PassReport:
    """
    Build every target of *descriptor* concurrently.

    Raises
    ------
    BuildError
        At least one build failed. The first failure reported is raised
        after all units have finished; ``error.report`` holds every outcome.
    """
    return asyncio.run(_build_targets(descriptor, list(descriptor.targets), config))


def build_one(descriptor: BinaryDescriptor, target: Platform, config: BuildConfig) -> PassReport:
    """Build a single target; same error contract as ``build_all``."""
    return asyncio.run(_build_targets(descriptor, [target], config))


# =============================================================================
# Clean
# =============================================================================

async def _clean_targets(descriptor: BinaryDescriptor, config: BuildConfig) -> PassReport:
    report = PassReport(
        action=PassAction.CLEAN,
        name=descriptor.name,
        version=descriptor.version,
        started_at=now_iso(),
    )

    async def _remove(target: Platform) -> TargetOutcome:
        t0 = time.monotonic()
        try:
            status = await asyncio.to_thread(remove_binary, descriptor, target, config)
        except DeleteError as e:
            logger.error(str(e))
            return _outcome(
                descriptor, target, TargetStatus.FAILED,
                duration_ms=_ms_since(t0),
                error=str(e),
            )
        return _outcome(descriptor, target, status, duration_ms=_ms_since(t0))

    # Deletions are best-effort, a failure never cancels its siblings
    report.outcomes = await for_each_target(
        descriptor, list(descriptor.targets), _remove, jobs=config.jobs,
    )
    report.finished_at = now_iso()

    removed = sum(1 for o in report.outcomes if o.status == TargetStatus.REMOVED)
    logger.info(f"Removed {removed} of {len(report.outcomes)} artifacts")
    return report


def clean_all(descriptor: BinaryDescriptor, config: BuildConfig) -> PassReport:
    """
    Remove the artifact of every target concurrently.

    Missing artifacts are not errors. Other failures are logged and
    recorded as FAILED in the report; this never raises for them.
    """
    return asyncio.run(_clean_targets(descriptor, config))
