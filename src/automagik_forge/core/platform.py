"""Host platform detection.

Maps the interpreter's view of the OS and CPU onto one of the six
platform keys the bundled binaries are built for. On macOS an Intel
interpreter may be running under Rosetta on Apple silicon, in which case
the native arm64 binary is the one to pick.
"""

from __future__ import annotations

import platform
import subprocess
import sys
from enum import Enum

from automagik_forge.core.constants import SUPPORTED_PLATFORMS, TRANSLATION_SYSCTL
from automagik_forge.core.errors import UnsupportedPlatformError


class PlatformKey(str, Enum):
    LINUX_X64 = "linux-x64"
    LINUX_ARM64 = "linux-arm64"
    WINDOWS_X64 = "windows-x64"
    WINDOWS_ARM64 = "windows-arm64"
    MACOS_X64 = "macos-x64"
    MACOS_ARM64 = "macos-arm64"

    @property
    def os_family(self) -> str:
        return self.value.split("-", 1)[0]

    @property
    def arch(self) -> str:
        return self.value.split("-", 1)[1]

    @property
    def is_windows(self) -> bool:
        return self.os_family == "windows"

    def __str__(self) -> str:
        return self.value


_OS_ALIASES = {
    "linux": "linux",
    "win32": "windows",
    "windows": "windows",
    "cygwin": "windows",
    "msys": "windows",
    "darwin": "macos",
    "macos": "macos",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def normalize_os(name: str) -> str:
    key = (name or "").strip().lower()
    if key.startswith("linux"):
        return "linux"
    return _OS_ALIASES.get(key, key)


def normalize_arch(machine: str) -> str:
    key = (machine or "").strip().lower()
    return _ARCH_ALIASES.get(key, key)


def is_translated(*, subprocess_module=subprocess) -> bool:
    """True when the current process runs under Rosetta translation.

    Every failure of the query (no sysctl, unknown key, timeout) counts as
    "not translated".
    """
    try:
        proc = subprocess_module.run(
            list(TRANSLATION_SYSCTL),
            capture_output=True,
            text=True,
            timeout=5,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return False
    return (proc.stdout or "").strip() == "1"


def underlying_arch(os_family: str, machine: str, *, translated=is_translated) -> str:
    arch = normalize_arch(machine)
    if os_family != "macos":
        return arch
    if arch == "arm64":
        return arch
    if translated():
        return "arm64"
    return arch


def resolve_platform(system: str, machine: str, *, translated=is_translated) -> PlatformKey:
    os_family = normalize_os(system)
    arch = underlying_arch(os_family, machine, translated=translated)
    key = SUPPORTED_PLATFORMS.get((os_family, arch))
    if key is None:
        raise UnsupportedPlatformError(system, arch)
    return PlatformKey(key)


def detect_platform(*, translated=is_translated) -> PlatformKey:
    return resolve_platform(sys.platform, platform.machine(), translated=translated)


def binary_name(base: str, key: PlatformKey) -> str:
    return f"{base}.exe" if key.is_windows else base
