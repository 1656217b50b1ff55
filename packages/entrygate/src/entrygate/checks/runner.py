from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from ..config import HarnessConfig
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import ResolutionError
from ..execution import run_entry
from ..rules import STATIC_CHECK_IDS, run_static_checks
from ..scanner import find_main_file, list_entries
from ..verifier import verify_output
from .base import CheckResult, run_check, skipped

RUNTIME_CHECK_IDS = ("execution", "output-count")


@dataclass
class EntryReport:
    entry: str
    file: str | None = None
    checks: list[CheckResult] = field(default_factory=list)
    count: int | None = None

    @property
    def status(self) -> str:
        return "pass" if all(c.status != "fail" for c in self.checks) else "fail"

    @property
    def errors(self) -> list[str]:
        return [err for c in self.checks for err in c.errors]

    def to_dict(self) -> dict[str, object]:
        return {
            "entry": self.entry,
            "file": self.file,
            "status": self.status,
            "count": self.count,
            "checks": [c.to_dict() for c in self.checks],
        }


def select_entries(root: Path, target: str | None) -> list[str]:
    entries = list_entries(root)
    if not target:
        return entries
    if target not in entries:
        raise ResolutionError(f"target `{target}` not found; available: {', '.join(entries) or '(none)'}")
    return [target]


def validate_entry(root: Path, name: str, config: HarnessConfig, ctx: RunContext) -> EntryReport:
    report = EntryReport(entry=name)
    entry_dir = root / name

    def _structure() -> None:
        report.file = find_main_file(entry_dir, config.allowed_filenames)

    report.checks.append(run_check("structure", _structure))
    if report.file is None:
        report.checks.extend(skipped(check_id) for check_id in (*STATIC_CHECK_IDS, *RUNTIME_CHECK_IDS))
        return report

    file_path = entry_dir / report.file
    report.checks.extend(run_static_checks(file_path.read_bytes(), config.max_file_size))
    if report.status == "fail":
        report.checks.extend(skipped(check_id) for check_id in RUNTIME_CHECK_IDS)
        return report

    stdout: list[str] = []
    report.checks.append(run_check("execution", lambda: stdout.append(run_entry(file_path, config, ctx))))
    if not stdout:
        report.checks.append(skipped("output-count"))
        return report

    def _count() -> None:
        report.count = verify_output(stdout[0], config.target_literal, config.expected_count)

    result = run_check("output-count", _count)
    if report.count is None and config.target_literal:
        report.count = stdout[0].count(config.target_literal)
    report.checks.append(result)
    return report


def validate_all(config: HarnessConfig, ctx: RunContext, jobs: int = 1) -> tuple[int, dict[str, object]]:
    root = config.entries_root
    names = select_entries(root, config.target)
    log_event(ctx, "info", "validate", "start", root=str(root), entries=len(names), jobs=jobs)

    def _run_one(name: str) -> EntryReport:
        report = validate_entry(root, name, config, ctx)
        level = "info" if report.status == "pass" else "warn"
        log_event(ctx, level, "validate", "entry", entry=name, status=report.status, file=report.file)
        return report

    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            reports = list(ex.map(_run_one, names))
    else:
        reports = [_run_one(name) for name in names]

    failed = sum(1 for r in reports if r.status != "pass")
    payload: dict[str, object] = {
        "schema_version": 1,
        "tool": "entrygate",
        "kind": "entry-validation",
        "run_id": ctx.run_id,
        "target": config.target,
        "status": "pass" if failed == 0 else "fail",
        "failed_count": failed,
        "total_count": len(reports),
        "entries": [r.to_dict() for r in reports],
    }
    log_event(ctx, "info", "validate", "finish", status=payload["status"], failed=failed, total=len(reports))
    return (0 if failed == 0 else 1), payload
