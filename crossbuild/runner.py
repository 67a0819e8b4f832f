"""
Runner — command-line entry point for crossbuild.

Usage::

    crossbuild                      # build for the host (or --os/--arch)
    crossbuild --release            # build every configured target
    crossbuild --clean              # remove every target's artifact

``--release`` wins over ``--clean``. The version is resolved from git
before anything else; a failed resolution or a failed build exits 1.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from crossbuild.config import BuildConfig, Settings
from crossbuild.core.errors import BuildError, CrossbuildError
from crossbuild.core.platform import BinaryDescriptor, Platform, host_platform
from crossbuild.core.version import resolve_version
from crossbuild.io.schema import PassReport
from crossbuild.io.writer import write_report
from crossbuild.orchestrator import build_all, build_one, clean_all

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    host = host_platform()
    parser = argparse.ArgumentParser(
        prog="crossbuild",
        description="Cross-compile the greeting program with a git-derived version",
    )
    parser.add_argument(
        "--release",
        action="store_true",
        help="build binaries for all target platforms",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="remove all created binaries from the output directory",
    )
    parser.add_argument(
        "--os",
        dest="build_os",
        default=host.os,
        help="set operating system to build for (default: %(default)s)",
    )
    parser.add_argument(
        "--arch",
        dest="build_arch",
        default=host.arch,
        help="set architecture to build for (default: %(default)s)",
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        help="maximum concurrent units (default: one per target)",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="cancel remaining builds after the first failure",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="write a JSON report of the pass to this path",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def run(args: argparse.Namespace, settings: Optional[Settings] = None) -> PassReport:
    """
    Resolve the version, then build or clean according to *args*.

    Raises ResolutionError or BuildError on fatal failures.
    """
    if settings is None:
        settings = Settings()
    config = BuildConfig.from_settings(
        settings,
        jobs=args.jobs,
        fail_fast=args.fail_fast or None,
    )

    descriptor = BinaryDescriptor(name=config.name, targets=config.targets)
    descriptor = descriptor.with_version(resolve_version(config.git))
    logger.info(f"{descriptor.name} version {descriptor.version}")

    if args.release:
        return build_all(descriptor, config)
    if args.clean:
        return clean_all(descriptor, config)
    return build_one(descriptor, Platform(args.build_os, args.build_arch), config)


def main(argv: Optional[List[str]] = None):
    """CLI entry point for crossbuild."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        report = run(args)
    except BuildError as e:
        if args.report and e.report is not None:
            write_report(e.report, args.report)
        logger.error(f"Build failed: {e}")
        sys.exit(1)
    except CrossbuildError as e:
        logger.error(str(e))
        sys.exit(1)
    except ValueError as e:
        parser.error(str(e))

    if args.report:
        write_report(report, args.report)
        logger.info(f"Report written to {args.report}")


if __name__ == "__main__":
    main()
