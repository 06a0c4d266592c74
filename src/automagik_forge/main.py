import os
import subprocess
import sys
from pathlib import Path
from typing import List, Mapping, Optional

from automagik_forge.core.dispatcher import (
    LaunchMode,
    automation_args,
    parse_launch_mode,
    run_automation,
    run_primary,
)
from automagik_forge.core.environment import build_primary_environment
from automagik_forge.core.errors import LauncherError
from automagik_forge.core.extractor import prepare_binary
from automagik_forge.core.platform import PlatformKey, detect_platform
from automagik_forge.core.settings import Settings, load_settings
from automagik_forge.core.utils.logging import configure_logging, get_logger

logger = get_logger("automagik_forge.main")


def _launch(
    mode: LaunchMode,
    key: PlatformKey,
    *,
    cwd: Path,
    environ: Mapping[str, str],
    settings: Settings,
) -> int:
    base = mode.binary_base
    host = f"{sys.platform}-{key.arch}"

    if mode.is_automation:
        binary = prepare_binary(
            base, key, settings.install_dir,
            lock_timeout=settings.EXTRACT_LOCK_TIMEOUT, host=host,
        )
        return run_automation(binary, automation_args(mode), dict(environ))

    print(f"📦 Extracting {base}...")
    binary = prepare_binary(
        base, key, settings.install_dir,
        lock_timeout=settings.EXTRACT_LOCK_TIMEOUT, host=host,
    )
    print(f"🚀 Launching {base}...")
    env = build_primary_environment(environ, cwd, default_port=settings.DEFAULT_PORT)
    return run_primary(binary, env)


def main(
    argv: Optional[List[str]] = None,
    *,
    cwd: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    settings: Optional[Settings] = None,
) -> int:
    # Process-wide state is captured once here and passed down explicitly.
    argv = list(sys.argv[1:] if argv is None else argv)
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    environ = dict(os.environ if environ is None else environ)
    settings = settings or load_settings()

    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    mode = parse_launch_mode(argv)
    try:
        key = detect_platform()
        logger.debug("launch", version=settings.VERSION, mode=mode.value, platform=key.value)
        return _launch(mode, key, cwd=cwd, environ=environ, settings=settings)
    except LauncherError as e:
        print(e.render(), file=sys.stderr)
        return e.exit_code
    except subprocess.CalledProcessError as e:
        logger.error("application exited abnormally", returncode=e.returncode)
        return e.returncode if e.returncode > 0 else 1
    except KeyboardInterrupt:
        return 130
