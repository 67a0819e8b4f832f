"""Tests for crossbuild.core.platform — naming, descriptors, host detection."""
from __future__ import annotations

import pytest

from crossbuild.core import platform as platform_mod
from crossbuild.core.platform import (
    DEFAULT_TARGETS,
    BinaryDescriptor,
    Platform,
    artifact_name,
    host_platform,
    parse_targets,
)


class TestArtifactName:

    @pytest.mark.parametrize("target", DEFAULT_TARGETS, ids=str)
    def test_name_format(self, target: Platform):
        name = artifact_name("example-command", "1.2.3", target.os, target.arch)
        stem = f"example-command_1.2.3_{target.os}-{target.arch}"
        if target.os == "windows":
            assert name == stem + ".exe"
        else:
            assert name == stem
            assert not name.endswith(".exe")

    def test_exe_only_for_windows(self):
        assert artifact_name("app", "1.0", "windows", "386") == "app_1.0_windows-386.exe"
        assert artifact_name("app", "1.0", "darwin", "amd64") == "app_1.0_darwin-amd64"
        # A "windows"-like architecture does not trigger the suffix
        assert artifact_name("app", "1.0", "linux", "windows") == "app_1.0_linux-windows"

    def test_descriptor_names_follow_targets(self):
        bin = BinaryDescriptor(name="app").with_version("0.9.0-3-gabc123")
        names = bin.artifact_names()
        assert len(names) == len(DEFAULT_TARGETS)
        assert names[0] == "app_0.9.0-3-gabc123_linux-386"
        assert bin.artifact_name(Platform("windows", "amd64")) == "app_0.9.0-3-gabc123_windows-amd64.exe"


class TestBinaryDescriptor:

    def test_version_stamped_once(self):
        bin = BinaryDescriptor(name="app")
        stamped = bin.with_version("1.2.3")
        assert stamped.version == "1.2.3"
        assert bin.version is None
        with pytest.raises(ValueError):
            stamped.with_version("1.2.4")

    def test_unstamped_has_no_names(self):
        with pytest.raises(ValueError):
            BinaryDescriptor(name="app").artifact_names()

    def test_empty_version_rejected(self):
        with pytest.raises(ValueError):
            BinaryDescriptor(name="app").with_version("")

    def test_immutable(self):
        bin = BinaryDescriptor(name="app").with_version("1.0")
        with pytest.raises(AttributeError):
            bin.version = "2.0"  # type: ignore[misc]


class TestPlatform:

    def test_parse(self):
        assert Platform.parse("linux/amd64") == Platform("linux", "amd64")
        assert Platform.parse(" windows / 386 ") == Platform("windows", "386")

    @pytest.mark.parametrize("text", ["linux", "/amd64", "linux/", ""])
    def test_parse_rejects_incomplete(self, text):
        with pytest.raises(ValueError):
            Platform.parse(text)

    def test_parse_targets(self):
        targets = parse_targets("linux/386, darwin/arm64,,")
        assert targets == (Platform("linux", "386"), Platform("darwin", "arm64"))

    def test_str_roundtrips_through_parse(self):
        for t in DEFAULT_TARGETS:
            assert Platform.parse(str(t)) == t


class TestHostPlatform:

    @pytest.mark.parametrize(
        "sys_platform, machine, expected",
        [
            ("linux", "x86_64", Platform("linux", "amd64")),
            ("linux", "aarch64", Platform("linux", "arm64")),
            ("win32", "AMD64", Platform("windows", "amd64")),
            ("darwin", "arm64", Platform("darwin", "arm64")),
            ("linux", "i686", Platform("linux", "386")),
            ("sunos5", "sparc", Platform("sunos5", "sparc")),
        ],
    )
    def test_go_spelling(self, monkeypatch, sys_platform, machine, expected):
        monkeypatch.setattr(platform_mod.sys, "platform", sys_platform)
        monkeypatch.setattr(platform_mod._platform, "machine", lambda: machine)
        assert host_platform() == expected
