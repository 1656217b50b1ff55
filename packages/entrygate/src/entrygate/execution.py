from __future__ import annotations

from pathlib import Path
from typing import Mapping

from .config import DEFAULT_INTERPRETER_KEY, DEFAULT_INTERPRETERS, HarnessConfig, Interpreter
from .core.context import RunContext
from .core.process import CommandResult, run_command
from .errors import ExecutionFailed


def select_interpreter(file_name: str, interpreters: Mapping[str, Interpreter] = DEFAULT_INTERPRETERS) -> Interpreter:
    suffix = Path(file_name).suffix
    if suffix and suffix in interpreters:
        return interpreters[suffix]
    return interpreters[DEFAULT_INTERPRETER_KEY]


def resolve_command(
    file_path: Path,
    interpreters: Mapping[str, Interpreter] = DEFAULT_INTERPRETERS,
) -> Interpreter:
    """Return the interpreter for `file_path` with the path appended to its argv."""
    interpreter = select_interpreter(file_path.name, interpreters)
    return Interpreter((*interpreter.argv, str(file_path)), dict(interpreter.env))


def execute_entry(file_path: Path, config: HarnessConfig, ctx: RunContext) -> CommandResult:
    command = resolve_command(file_path, config.interpreters)
    return run_command(
        list(command.argv),
        cwd=ctx.root,
        env=command.env,
        timeout_seconds=config.timeout_seconds,
        ctx=ctx,
    )


def run_entry(file_path: Path, config: HarnessConfig, ctx: RunContext) -> str:
    result = execute_entry(file_path, config, ctx)
    if result.code != 0:
        raise ExecutionFailed(
            f"process exited with code {result.code}: {result.stderr.strip()}",
            stderr=result.stderr,
        )
    return result.stdout
