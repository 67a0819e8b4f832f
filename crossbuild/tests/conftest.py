"""
Shared pytest fixtures for crossbuild tests.

Provides stand-ins for the Go toolchain and for git so orchestration can
be tested without either installed. The fakes are small Python scripts run
with the current interpreter.

Fake toolchain behaviour is driven by environment variables, which reach it
through the per-target environment snapshot:
  FAKE_GO_LOG    append one "GOOS/GOARCH version" line per invocation
  FAKE_GO_FAIL   comma-separated os/arch pairs that exit 2
  FAKE_GO_SLEEP  comma-separated os/arch=seconds delays before writing
"""
from __future__ import annotations

import os
import shutil
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from crossbuild.config import BuildConfig
from crossbuild.core.platform import BinaryDescriptor, Platform

FAKE_GO = textwrap.dedent("""\
    import os
    import sys
    import time

    args = sys.argv[1:]
    assert args[0] == "build", args
    ldflags = [a for a in args if a.startswith("-ldflags=")][0]
    version = ldflags.rsplit("=", 1)[1]
    output = args[args.index("-o") + 1]
    target = os.environ["GOOS"] + "/" + os.environ["GOARCH"]

    log = os.environ.get("FAKE_GO_LOG")
    if log:
        with open(log, "a") as f:
            f.write(target + " " + version + "\\n")

    for spec in filter(None, os.environ.get("FAKE_GO_SLEEP", "").split(",")):
        name, _, seconds = spec.partition("=")
        if name == target:
            time.sleep(float(seconds))

    if target in os.environ.get("FAKE_GO_FAIL", "").split(","):
        print("fake go: refusing to build " + target, file=sys.stderr)
        sys.exit(2)

    # Like go build, an existing directory at -o receives the binary inside it
    if os.path.isdir(output):
        output = os.path.join(output, os.path.basename(output))
    with open(output, "w") as f:
        f.write(target + " " + version + "\\n")
""")

FAKE_GIT = textwrap.dedent("""\
    #!{python}
    import os
    import sys

    if sys.argv[1:] != ["describe", "--tags", "--always"]:
        sys.exit(99)
    sys.stdout.write(os.environ.get("FAKE_GIT_OUTPUT", "v1.2.3") + "\\n")
    sys.exit(int(os.environ.get("FAKE_GIT_EXIT", "0")))
""")

THREE_TARGETS = (
    Platform("linux", "386"),
    Platform("windows", "amd64"),
    Platform("darwin", "arm64"),
)


@pytest.fixture
def fake_go(tmp_path: Path) -> Path:
    """Path to the fake toolchain script."""
    script = tmp_path / "fake_go.py"
    script.write_text(FAKE_GO)
    return script


@pytest.fixture
def fake_git(tmp_path: Path) -> Path:
    """Executable fake git (POSIX only, relies on a shebang)."""
    if sys.platform == "win32":
        pytest.skip("fake git relies on a shebang line")
    script = tmp_path / "fake-git"
    script.write_text(FAKE_GIT.format(python=sys.executable))
    script.chmod(0o755)
    return script


@pytest.fixture
def go_log(tmp_path: Path, monkeypatch) -> Path:
    """Invocation log written by the fake toolchain."""
    log = tmp_path / "go.log"
    monkeypatch.setenv("FAKE_GO_LOG", str(log))
    monkeypatch.delenv("FAKE_GO_FAIL", raising=False)
    monkeypatch.delenv("FAKE_GO_SLEEP", raising=False)
    return log


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir()
    return d


@pytest.fixture
def config(fake_go: Path, out_dir: Path, tmp_path: Path) -> BuildConfig:
    """BuildConfig wired to the fake toolchain."""
    return BuildConfig(
        name="app",
        targets=THREE_TARGETS,
        toolchain=(sys.executable, str(fake_go)),
        source_dir=tmp_path,
        output_dir=out_dir,
    )


@pytest.fixture
def descriptor() -> BinaryDescriptor:
    return BinaryDescriptor(name="app", targets=THREE_TARGETS).with_version("1.2.3")


# ── Real toolchains ─────────────────────────────────────────────────────────

def _go_available() -> bool:
    return shutil.which("go") is not None


def _git_available() -> bool:
    return shutil.which("git") is not None


@pytest.fixture(scope="session")
def go_ok():
    """Skip tests if the Go toolchain is not installed."""
    if not _go_available():
        pytest.skip("go not available - install Go to run these tests")


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A throwaway git repository with one commit."""
    if not _git_available():
        pytest.skip("git not available")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    (repo / "README").write_text("x\n")
    run_git(repo, "add", "README")
    run_git(repo, "-c", "commit.gpgsign=false", "commit", "-q", "-m", "init")
    return repo


def run_git(repo: Path, *args: str) -> None:
    env = dict(
        os.environ,
        GIT_AUTHOR_NAME="t", GIT_AUTHOR_EMAIL="t@example.com",
        GIT_COMMITTER_NAME="t", GIT_COMMITTER_EMAIL="t@example.com",
    )
    subprocess.run(["git", *args], cwd=repo, env=env, check=True, capture_output=True)


@pytest.fixture
def fake_go_exe(tmp_path: Path, fake_go: Path) -> Path:
    """The fake toolchain as a single executable, for settings-driven runs."""
    if sys.platform == "win32":
        pytest.skip("fake go executable relies on a shebang line")
    exe = tmp_path / "fake-go"
    exe.write_text(f"#!{sys.executable}\n" + FAKE_GO)
    exe.chmod(0o755)
    return exe
