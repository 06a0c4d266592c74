import asyncio
import os
import signal
import subprocess
import sys
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from automagik_forge.core.constants import (
    CHILD_FLAG_ADVANCED,
    FLAG_MCP,
    FLAG_MCP_ADVANCED,
    MCP_BINARY,
    PRIMARY_BINARY,
)
from automagik_forge.core.utils.logging import get_logger

logger = get_logger("automagik_forge.dispatcher")


class LaunchMode(Enum):
    NORMAL = "normal"
    AUTOMATION = "automation"
    AUTOMATION_ADVANCED = "automation-advanced"

    @property
    def is_automation(self) -> bool:
        return self is not LaunchMode.NORMAL

    @property
    def binary_base(self) -> str:
        return MCP_BINARY if self.is_automation else PRIMARY_BINARY


def parse_launch_mode(argv: Sequence[str]) -> LaunchMode:
    """Scan raw argv for the mode flags; every other argument is ignored."""
    args = set(argv)
    if FLAG_MCP_ADVANCED in args:
        return LaunchMode.AUTOMATION_ADVANCED
    if FLAG_MCP in args:
        return LaunchMode.AUTOMATION
    return LaunchMode.NORMAL


def automation_args(mode: LaunchMode) -> List[str]:
    if mode is LaunchMode.AUTOMATION_ADVANCED:
        return [CHILD_FLAG_ADVANCED]
    return []


def exit_code_from(returncode: Optional[int]) -> int:
    # No code, or death by signal (negative on POSIX), reads as a clean exit.
    if returncode is None or returncode < 0:
        return 0
    return int(returncode)


def _forward_signal(proc: asyncio.subprocess.Process, sig: int) -> None:
    if proc.returncode is not None:
        return
    try:
        proc.send_signal(sig)
    except ProcessLookupError:
        pass


async def supervise_automation(
    binary: Path,
    args: Sequence[str],
    env: Mapping[str, str],
    *,
    install_signal_handlers: bool = True,
) -> int:
    loop = asyncio.get_running_loop()
    children: List[asyncio.subprocess.Process] = []

    def _on_sigint() -> None:
        print("\n🛑 Shutting down MCP server...", file=sys.stderr)
        for proc in children:
            _forward_signal(proc, signal.SIGINT)

    def _on_sigterm() -> None:
        for proc in children:
            _forward_signal(proc, signal.SIGTERM)

    registered: List[int] = []
    # Installed before the spawn; an early Ctrl-C must not escape as KeyboardInterrupt.
    # add_signal_handler is not available on Windows
    if install_signal_handlers and os.name != "nt":
        for sig, handler in ((signal.SIGINT, _on_sigint), (signal.SIGTERM, _on_sigterm)):
            try:
                loop.add_signal_handler(sig, handler)
                registered.append(sig)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug("signal forwarding unavailable", signal=int(sig))

    try:
        try:
            proc = await asyncio.create_subprocess_exec(str(binary), *args, env=dict(env))
        except OSError as e:
            print(f"❌ MCP server error: {e}", file=sys.stderr)
            logger.error("mcp server spawn failed", binary=str(binary), error=str(e))
            return 1
        children.append(proc)
        returncode = await proc.wait()
    finally:
        for sig in registered:
            loop.remove_signal_handler(sig)

    logger.debug("mcp server exited", returncode=returncode)
    return exit_code_from(returncode)


def run_automation(binary: Path, args: Sequence[str], env: Mapping[str, str]) -> int:
    try:
        return asyncio.run(supervise_automation(binary, args, env))
    except KeyboardInterrupt:
        return 130


_NOT_INSTALLED = object()


def _swallow_sigint(signum, frame) -> None:
    pass


def _defer_sigint(signal_module=signal):
    # A Python handler, unlike SIG_IGN, is reset to the default in the child on exec.
    # Only the main thread may install handlers; elsewhere the child is waited on as-is.
    try:
        return signal_module.signal(signal_module.SIGINT, _swallow_sigint)
    except ValueError:
        return _NOT_INSTALLED


def run_primary(
    binary: Path,
    env: Mapping[str, str],
    *,
    args: Sequence[str] = (),
    subprocess_module=subprocess,
    signal_module=signal,
) -> int:
    """Run the application in the foreground until it exits.

    Ctrl-C reaches the whole process group, so the launcher swallows SIGINT
    while waiting and lets the application finish its own shutdown.
    A non-zero exit raises ``subprocess.CalledProcessError``.
    """
    cmd = [str(binary), *args]
    previous = _defer_sigint(signal_module)
    try:
        proc = subprocess_module.Popen(cmd, env=dict(env))
        returncode = proc.wait()
    finally:
        if previous is not _NOT_INSTALLED:
            signal_module.signal(signal_module.SIGINT, signal_module.SIG_DFL if previous is None else previous)
    if returncode != 0:
        raise subprocess.CalledProcessError(returncode, cmd)
    return 0
