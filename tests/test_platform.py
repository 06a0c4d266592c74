import subprocess
from types import SimpleNamespace

import pytest

from automagik_forge.core import platform as plat
from automagik_forge.core.errors import UnsupportedPlatformError
from automagik_forge.core.platform import PlatformKey


def _never_translated():
    return False


def _always_translated():
    return True


@pytest.mark.parametrize(
    "system,machine,expected",
    [
        ("linux", "x86_64", "linux-x64"),
        ("linux", "aarch64", "linux-arm64"),
        ("win32", "AMD64", "windows-x64"),
        ("win32", "ARM64", "windows-arm64"),
        ("darwin", "x86_64", "macos-x64"),
        ("darwin", "arm64", "macos-arm64"),
    ],
)
def test_resolve_platform_supported_pairs(system, machine, expected):
    key = plat.resolve_platform(system, machine, translated=_never_translated)
    assert key is PlatformKey(expected)
    assert str(key) == expected


def test_resolve_platform_rejects_unknown_arch():
    with pytest.raises(UnsupportedPlatformError) as exc:
        plat.resolve_platform("linux", "riscv64", translated=_never_translated)
    rendered = exc.value.render()
    assert "Unsupported platform: linux-riscv64" in rendered
    for label in (
        "Linux x64",
        "Linux ARM64",
        "Windows x64",
        "Windows ARM64",
        "macOS x64 (Intel)",
        "macOS ARM64 (Apple Silicon)",
    ):
        assert f"  - {label}" in rendered
    assert exc.value.exit_code == 1


def test_resolve_platform_rejects_unknown_os():
    with pytest.raises(UnsupportedPlatformError):
        plat.resolve_platform("freebsd13", "amd64", translated=_never_translated)


def test_rosetta_translation_selects_arm64():
    key = plat.resolve_platform("darwin", "x86_64", translated=_always_translated)
    assert key is PlatformKey.MACOS_ARM64


def test_translation_query_skipped_for_native_arm_and_other_os():
    calls = []

    def _probe():
        calls.append(1)
        return True

    assert plat.resolve_platform("darwin", "arm64", translated=_probe) is PlatformKey.MACOS_ARM64
    assert plat.resolve_platform("linux", "x86_64", translated=_probe) is PlatformKey.LINUX_X64
    assert calls == []


class _FakeSubprocess:
    def __init__(self, stdout=None, exc=None):
        self.stdout = stdout
        self.exc = exc
        self.calls = []

    def run(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(stdout=self.stdout, returncode=0)


@pytest.mark.parametrize(
    "fake,expected",
    [
        (_FakeSubprocess(stdout="1\n"), True),
        (_FakeSubprocess(stdout="0\n"), False),
        (_FakeSubprocess(stdout=""), False),
        (_FakeSubprocess(exc=FileNotFoundError("sysctl")), False),
        (_FakeSubprocess(exc=subprocess.CalledProcessError(1, "sysctl")), False),
        (_FakeSubprocess(exc=subprocess.TimeoutExpired("sysctl", 5)), False),
    ],
)
def test_is_translated_reads_sysctl(fake, expected):
    assert plat.is_translated(subprocess_module=fake) is expected
    assert fake.calls == [["sysctl", "-in", "sysctl.proc_translated"]]


def test_intel_mac_with_failed_query_stays_x64():
    fake = _FakeSubprocess(exc=OSError("no sysctl"))
    key = plat.resolve_platform(
        "darwin", "x86_64", translated=lambda: plat.is_translated(subprocess_module=fake)
    )
    assert key is PlatformKey.MACOS_X64


def test_detect_platform_uses_live_host(monkeypatch):
    monkeypatch.setattr(plat.sys, "platform", "linux")
    monkeypatch.setattr(plat.platform, "machine", lambda: "aarch64")
    assert plat.detect_platform(translated=_never_translated) is PlatformKey.LINUX_ARM64


def test_binary_name_adds_exe_on_windows_only():
    assert plat.binary_name("automagik-forge", PlatformKey.WINDOWS_ARM64) == "automagik-forge.exe"
    assert plat.binary_name("automagik-forge", PlatformKey.MACOS_X64) == "automagik-forge"
