import os
import zipfile
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from automagik_forge.core.constants import ARCHIVE_SUFFIX, DIST_DIR_NAME, EXTRACT_LOCK_NAME
from automagik_forge.core.errors import (
    ArchiveCorruptError,
    ArchiveNotFoundError,
    BinaryMissingError,
    ExtractionBusyError,
)
from automagik_forge.core.platform import PlatformKey, binary_name
from automagik_forge.core.utils.logging import get_logger

logger = get_logger("automagik_forge.extractor")


def extraction_dir(install_dir: Path, key: PlatformKey) -> Path:
    return Path(install_dir) / DIST_DIR_NAME / key.value


def archive_path(extract_dir: Path, base: str) -> Path:
    return Path(extract_dir) / f"{base}{ARCHIVE_SUFFIX}"


def make_executable(path: Path, *, os_module=os) -> bool:
    """Set mode 0755. Returns False instead of raising when chmod is refused."""
    try:
        os_module.chmod(str(path), 0o755)
    except OSError:
        return False
    return True


def remove_stale_binary(path: Path) -> bool:
    if not path.exists():
        return False
    path.unlink()
    return True


def unpack_archive(archive: Path, dest: Path) -> None:
    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(dest)
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveCorruptError(archive, str(e)) from e


def prepare_binary(
    base: str,
    key: PlatformKey,
    install_dir: Path,
    *,
    lock_timeout: float,
    host: Optional[str] = None,
) -> Path:
    """Unpack ``<base>.zip`` for ``key`` and return the runnable binary path.

    The previous extraction is always discarded so a binary from an older
    archive can never be launched by mistake.
    """
    extract_dir = extraction_dir(install_dir, key)
    extract_dir.mkdir(parents=True, exist_ok=True)

    bin_path = extract_dir / binary_name(base, key)
    zip_path = archive_path(extract_dir, base)

    lock = FileLock(str(extract_dir / EXTRACT_LOCK_NAME), timeout=lock_timeout)
    try:
        with lock:
            if not zip_path.exists():
                raise ArchiveNotFoundError(zip_path, key.value, host=host or "")
            if remove_stale_binary(bin_path):
                logger.debug("removed stale binary", path=str(bin_path))

            unpack_archive(zip_path, extract_dir)
            if not bin_path.is_file():
                raise BinaryMissingError(bin_path, zip_path)

            if not key.is_windows and not make_executable(bin_path):
                logger.warning("could not mark binary executable", path=str(bin_path))
    except Timeout as e:
        raise ExtractionBusyError(extract_dir, lock_timeout) from e

    logger.debug("binary ready", path=str(bin_path), platform=key.value)
    return bin_path
