from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import (
    ERR_CONFIG,
    ERR_EXECUTION,
    ERR_INTERNAL,
    ERR_OUTPUT,
    ERR_RESOLUTION,
    ERR_STATIC,
    ERR_STRUCTURE,
)


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(ScriptError):
    code: int = ERR_CONFIG
    kind: str = "config_error"


@dataclass
class StructuralError(ScriptError):
    code: int = ERR_STRUCTURE
    kind: str = "structural_error"


@dataclass
class SizeExceeded(ScriptError):
    code: int = ERR_STATIC
    kind: str = "size_exceeded"


@dataclass
class BannedConstruct(ScriptError):
    code: int = ERR_STATIC
    kind: str = "banned_construct"


@dataclass
class SelfRecursion(ScriptError):
    code: int = ERR_STATIC
    kind: str = "self_recursion"


@dataclass
class ExecutionFailed(ScriptError):
    code: int = ERR_EXECUTION
    kind: str = "execution_failed"
    stderr: str = ""


@dataclass
class CountMismatch(ScriptError):
    code: int = ERR_OUTPUT
    kind: str = "count_mismatch"
    expected: int = 0
    actual: int = 0


@dataclass
class ResolutionError(ScriptError):
    code: int = ERR_RESOLUTION
    kind: str = "resolution_error"
