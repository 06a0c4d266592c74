"""Child process environment for the primary application.

Precedence, lowest first: built-in port default, the ``.env`` file in the
working directory, the inherited process environment. Inherited variables
are never overwritten.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from automagik_forge.core.constants import DEFAULT_BACKEND_PORT, DOTENV_FILENAME, PORT_ENV_KEYS
from automagik_forge.core.utils.logging import get_logger

logger = get_logger("automagik_forge.environment")

EnvMap = dict[str, str]

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class DotenvResult:
    path: Path
    values: EnvMap = field(default_factory=dict)
    loaded: bool = False
    error: Optional[str] = None


def load_dotenv_file(path: Path) -> DotenvResult:
    """Read ``KEY=VALUE`` pairs without touching ``os.environ``.

    A missing file is not an error. Read failures are reported through
    ``DotenvResult.error`` and yield no values.
    """
    path = Path(path)
    if not path.is_file():
        return DotenvResult(path=path)
    try:
        raw = dotenv_values(path, interpolate=False, encoding="utf-8")
    except (OSError, ValueError) as e:
        return DotenvResult(path=path, error=str(e))
    values: EnvMap = {}
    for key, value in raw.items():
        if value is None or not _KEY_RE.match(key):
            continue
        values[key] = value
    return DotenvResult(path=path, values=values, loaded=True)


def merge_dotenv(inherited: Mapping[str, str], values: Mapping[str, str]) -> EnvMap:
    env = dict(inherited)
    for key, value in values.items():
        if key not in env:
            env[key] = value
    return env


def port_configured(env: Mapping[str, str]) -> bool:
    return any(env.get(key) for key in PORT_ENV_KEYS)


def apply_port_default(env: EnvMap, default_port: str = DEFAULT_BACKEND_PORT) -> EnvMap:
    if not port_configured(env):
        env[PORT_ENV_KEYS[0]] = str(default_port)
    return env


def build_primary_environment(
    inherited: Mapping[str, str],
    cwd: Path,
    *,
    default_port: str = DEFAULT_BACKEND_PORT,
    log=None,
) -> EnvMap:
    log = log or logger
    result = load_dotenv_file(Path(cwd) / DOTENV_FILENAME)
    if result.error is not None:
        log.warning("Failed to load .env", path=str(result.path), error=result.error)
    elif result.loaded:
        print(f"🔧 Loaded environment from {DOTENV_FILENAME} in {cwd}")
    env = merge_dotenv(inherited, result.values)
    return apply_port_default(env, default_port)
