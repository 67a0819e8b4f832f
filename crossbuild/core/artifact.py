"""
Artifact inspection — hash a produced binary and sanity-check its header.

Only Linux targets are checked with pyelftools; windows (PE) and darwin
(Mach-O) artifacts are hashed but not parsed. Findings are flags, never
errors.
"""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional, Tuple

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from crossbuild.core.platform import Platform
from crossbuild.io.schema import ArtifactFlag, ArtifactMeta, ElfMeta

logger = logging.getLogger(__name__)

# GOARCH → e_machine written by the Go linker
EXPECTED_MACHINE = {
    "386": "EM_386",
    "amd64": "EM_X86_64",
    "arm": "EM_ARM",
    "arm64": "EM_AARCH64",
    "riscv64": "EM_RISCV",
    "ppc64le": "EM_PPC64",
    "s390x": "EM_S390",
}


def hash_file(path: Path) -> str:
    """SHA-256 hex digest of a file's contents."""
    sha256 = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def read_elf(path: Path) -> Tuple[bool, ElfMeta]:
    """
    Read the ELF header of *path*.
    Returns (is_elf, meta); meta is empty when the file is not ELF.
    """
    try:
        with open(path, "rb") as f:
            elf = ELFFile(f)
            return True, ElfMeta(
                elf_class=elf.elfclass,
                elf_type=elf.header["e_type"],
                machine=elf.header["e_machine"],
            )
    except ELFError as e:
        logger.debug(f"Not an ELF file {path}: {e}")
        return False, ElfMeta()


def inspect_artifact(path: Path, target: Platform) -> ArtifactMeta:
    """Describe the artifact built for *target* at *path*."""
    flags = []
    elf_meta: Optional[ElfMeta] = None

    if target.os == "linux":
        is_elf, elf_meta = read_elf(path)
        if not is_elf:
            flags.append(ArtifactFlag.NON_ELF_OUTPUT)
            logger.warning(f"{path.name}: expected an ELF binary for {target}")
        else:
            expected = EXPECTED_MACHINE.get(target.arch)
            if expected is None:
                flags.append(ArtifactFlag.UNKNOWN_ARCH)
            elif elf_meta.machine != expected:
                flags.append(ArtifactFlag.ARCH_MISMATCH)
                logger.warning(
                    f"{path.name}: machine {elf_meta.machine}, expected {expected}"
                )

    return ArtifactMeta(
        filename=path.name,
        sha256=hash_file(path),
        size_bytes=path.stat().st_size,
        elf=elf_meta,
        flags=flags,
    )
