from __future__ import annotations

import os
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

from ..exit_codes import ERR_TIMEOUT
from .logging import log_event

if TYPE_CHECKING:
    from .context import RunContext

TIMEOUT_EXIT_CODE = ERR_TIMEOUT
NOT_EXECUTABLE_EXIT_CODE = 126
NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    code: int
    stdout: str
    stderr: str
    duration_ms: int


def _merged_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if not env:
        return None
    merged = os.environ.copy()
    merged.update(env)
    return merged


def _spawn_failure(cmd: list[str], exc: OSError) -> tuple[int, str]:
    if isinstance(exc, FileNotFoundError):
        return NOT_FOUND_EXIT_CODE, f"command not found: {exc.filename or cmd[0]}"
    return NOT_EXECUTABLE_EXIT_CODE, f"cannot execute {exc.filename or cmd[0]}: {exc.strerror or exc}"


def run_command(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    timeout_seconds: int = 0,
    ctx: RunContext | None = None,
) -> CommandResult:
    started = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            env=_merged_env(env),
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            check=False,
            timeout=(timeout_seconds if timeout_seconds > 0 else None),
        )
        result = CommandResult(
            code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    except subprocess.TimeoutExpired as exc:
        stdout = exc.stdout.decode("utf-8", "replace") if isinstance(exc.stdout, bytes) else (exc.stdout or "")
        stderr = exc.stderr.decode("utf-8", "replace") if isinstance(exc.stderr, bytes) else (exc.stderr or "")
        result = CommandResult(
            code=TIMEOUT_EXIT_CODE,
            stdout=stdout,
            stderr=(stderr + f"\ncommand timed out after {timeout_seconds}s").strip(),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    except OSError as exc:
        code, message = _spawn_failure(cmd, exc)
        result = CommandResult(
            code=code,
            stdout="",
            stderr=message,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    if ctx is not None:
        log_event(
            ctx,
            "debug",
            "process",
            "run-command",
            command=" ".join(cmd),
            cwd=str(cwd),
            code=result.code,
            duration_ms=result.duration_ms,
        )
    return result


def stream_command(cmd: list[str], cwd: Path, env: Mapping[str, str] | None = None) -> int:
    """Run `cmd` attached to the current terminal and return its exit code."""
    try:
        proc = subprocess.run(cmd, cwd=cwd, env=_merged_env(env), check=False)
    except OSError as exc:
        code, message = _spawn_failure(cmd, exc)
        print(message, file=sys.stderr)
        return code
    return proc.returncode
