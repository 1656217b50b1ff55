from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from ..errors import ScriptError


@dataclass(frozen=True)
class CheckResult:
    id: str
    status: str
    kind: str | None = None
    errors: tuple[str, ...] = ()
    duration_ms: int = 0

    @property
    def passed(self) -> bool:
        return self.status == "pass"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "status": self.status,
            "kind": self.kind,
            "duration_ms": self.duration_ms,
            "errors": list(self.errors),
        }


def skipped(check_id: str) -> CheckResult:
    return CheckResult(check_id, "skip")


def run_check(check_id: str, fn: Callable[[], object]) -> CheckResult:
    start = time.perf_counter()
    try:
        fn()
    except ScriptError as exc:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return CheckResult(check_id, "fail", exc.kind, (str(exc),), elapsed_ms)
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    return CheckResult(check_id, "pass", duration_ms=elapsed_ms)
