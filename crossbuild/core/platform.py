"""
Target platforms and the binary descriptor.

Artifact names are always derived from (name, version, os, arch) and never
stored, so a build pass and a clean pass in the same run agree on filenames.
"""
from __future__ import annotations

import platform as _platform
import sys
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple


# Go spellings for what Python reports as sys.platform / platform.machine()
_GOOS_BY_SYS_PLATFORM = {
    "linux": "linux",
    "win32": "windows",
    "cygwin": "windows",
    "darwin": "darwin",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
}

_GOARCH_BY_MACHINE = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


@dataclass(frozen=True)
class Platform:
    """An (operating system, architecture) pair in Go's GOOS/GOARCH terms."""

    os: str
    arch: str

    def __post_init__(self):
        if not self.os or not self.arch:
            raise ValueError(f"Platform needs a non-empty os and arch, got {self.os!r}/{self.arch!r}")

    @classmethod
    def parse(cls, text: str) -> Platform:
        """Parse ``"linux/amd64"`` into a Platform."""
        os_name, sep, arch = text.strip().partition("/")
        if not sep:
            raise ValueError(f"Expected 'os/arch', got {text!r}")
        return cls(os=os_name.strip(), arch=arch.strip())

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


DEFAULT_TARGETS: Tuple[Platform, ...] = (
    Platform("linux", "386"),
    Platform("linux", "amd64"),
    Platform("windows", "386"),
    Platform("windows", "amd64"),
    Platform("darwin", "amd64"),
    Platform("darwin", "arm64"),
)


def parse_targets(text: str) -> Tuple[Platform, ...]:
    """Parse a comma-separated ``os/arch`` list; blank entries are skipped."""
    return tuple(Platform.parse(part) for part in text.split(",") if part.strip())


def host_platform() -> Platform:
    """The platform this interpreter runs on, spelled the way Go spells it."""
    sys_platform = sys.platform
    for prefix, goos in _GOOS_BY_SYS_PLATFORM.items():
        if sys_platform.startswith(prefix):
            break
    else:
        goos = sys_platform

    machine = _platform.machine().lower()
    goarch = _GOARCH_BY_MACHINE.get(machine, machine)
    return Platform(os=goos, arch=goarch)


def artifact_name(name: str, version: str, os: str, arch: str) -> str:
    """``<name>_<version>_<os>-<arch>``, with ``.exe`` for windows."""
    s = f"{name}_{version}_{os}-{arch}"
    if os == "windows":
        s += ".exe"
    return s


@dataclass(frozen=True)
class BinaryDescriptor:
    """
    The binary being built: its name, its version and its target platforms.

    ``version`` stays None until ``with_version`` stamps it, which may happen
    exactly once.
    """

    name: str
    targets: Tuple[Platform, ...] = DEFAULT_TARGETS
    version: Optional[str] = None

    def with_version(self, version: str) -> BinaryDescriptor:
        """Return a copy stamped with *version*."""
        if self.version is not None:
            raise ValueError(f"{self.name} is already stamped with version {self.version!r}")
        if not version:
            raise ValueError("version must be a non-empty string")
        return replace(self, version=version)

    def _require_version(self) -> str:
        if self.version is None:
            raise ValueError(f"{self.name} has not been stamped with a version")
        return self.version

    def artifact_name(self, target: Platform) -> str:
        return artifact_name(self.name, self._require_version(), target.os, target.arch)

    def artifact_names(self, targets: Optional[Iterable[Platform]] = None) -> List[str]:
        """Artifact names for *targets* (default: every configured target)."""
        if targets is None:
            targets = self.targets
        return [self.artifact_name(t) for t in targets]
