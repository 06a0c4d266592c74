from pathlib import Path
from typing import List

from automagik_forge.core.constants import PLATFORM_LABELS


class LauncherError(Exception):
    """Fatal condition that stops the launcher before a binary can run."""

    exit_code = 1

    def lines(self) -> List[str]:
        return [str(self)]

    def render(self) -> str:
        return "\n".join(f"❌ {line}" if i == 0 else line for i, line in enumerate(self.lines()))


class UnsupportedPlatformError(LauncherError):
    def __init__(self, os_name: str, arch: str):
        self.os_name = os_name
        self.arch = arch
        super().__init__(f"Unsupported platform: {os_name}-{arch}")

    def lines(self) -> List[str]:
        return [str(self), "Supported platforms:"] + [f"  - {label}" for label in PLATFORM_LABELS]


class ArchiveNotFoundError(LauncherError):
    def __init__(self, archive_path: Path, platform_key: str, host: str = ""):
        self.archive_path = Path(archive_path)
        self.platform_key = platform_key
        self.host = host or platform_key
        super().__init__(f"{self.archive_path.name} not found at: {self.archive_path}")

    def lines(self) -> List[str]:
        return [str(self), f"Current platform: {self.host} ({self.platform_key})"]


class ArchiveCorruptError(LauncherError):
    def __init__(self, archive_path: Path, reason: str):
        self.archive_path = Path(archive_path)
        super().__init__(f"Failed to extract {self.archive_path}: {reason}")


class BinaryMissingError(LauncherError):
    def __init__(self, binary_path: Path, archive_path: Path):
        self.binary_path = Path(binary_path)
        self.archive_path = Path(archive_path)
        super().__init__(f"{self.archive_path.name} did not contain {self.binary_path.name}")

    def lines(self) -> List[str]:
        return [str(self), f"Expected binary at: {self.binary_path}"]


class ExtractionBusyError(LauncherError):
    def __init__(self, extract_dir: Path, timeout: float):
        self.extract_dir = Path(extract_dir)
        self.timeout = timeout
        super().__init__(
            f"Another launcher is extracting into {self.extract_dir} (waited {timeout:g}s)"
        )
