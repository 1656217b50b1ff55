from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from . import __version__
from .checks.runner import validate_all
from .config import HarnessConfig, load_config
from .core.context import RunContext
from .core.logging import log_event
from .dispatcher import run_dispatcher
from .errors import ScriptError
from .exit_codes import ERR_INTERNAL, ERR_RESOLUTION, ERR_STATIC, ERR_USAGE
from .rules import run_static_checks
from .scanner import list_entries


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="entrygate")
    p.add_argument("--version", action="version", version=f"entrygate {__version__}")
    p.add_argument("--root", help="working root (default: current directory)")
    p.add_argument("--entries", help="entries directory, relative to the root")
    p.add_argument("--config", help="path to an entrygate.yaml file")
    p.add_argument("--run-id", help="run identifier for log events and reports")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    list_p = sub.add_parser("list", help="list entry directories")
    list_p.add_argument("--json", action="store_true", help="emit JSON output")

    val_p = sub.add_parser("validate", help="run structural, static, execution and output checks")
    val_p.add_argument("--target", help="validate only this entry (default: $ENTRYGATE_TARGET or every entry)")
    val_p.add_argument("--jobs", type=int, default=1, help="entries validated concurrently")
    val_p.add_argument("--json", action="store_true", help="emit JSON output")
    val_p.add_argument("--out-file", help="also write the JSON report to this path")

    file_p = sub.add_parser("check-file", help="run only the static checks on one file")
    file_p.add_argument("path")
    file_p.add_argument("--json", action="store_true", help="emit JSON output")

    run_p = sub.add_parser("run", help="run one entry, or every entry when the name is empty")
    run_p.add_argument("name", nargs="?", help="entry name; prompts when omitted")
    return p


def _emit(payload: dict[str, object], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, sort_keys=True))
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))


def _print_validation_summary(payload: dict[str, object]) -> None:
    for row in payload["entries"]:  # type: ignore[union-attr]
        print(f"{row['status']:<4} {row['entry']} ({row['file'] or '-'})")
        for chk in row["checks"]:
            for err in chk["errors"]:
                print(f"     - {chk['id']}: {err}")
    print(f"validate: {payload['status']} ({payload['failed_count']}/{payload['total_count']} failed)")


def _write_report(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def _run_validate(ctx: RunContext, config: HarnessConfig, ns: argparse.Namespace, as_json: bool) -> int:
    if ns.jobs < 1:
        raise ScriptError("--jobs must be at least 1", ERR_USAGE)
    if ns.target:
        config = config.with_target(ns.target)
    code, payload = validate_all(config, ctx, jobs=ns.jobs)
    if ns.out_file:
        out_path = Path(ns.out_file)
        _write_report(out_path if out_path.is_absolute() else ctx.root / out_path, payload)
    if as_json:
        _emit(payload, True)
    else:
        _print_validation_summary(payload)
    return code


def _run_check_file(ctx: RunContext, config: HarnessConfig, ns: argparse.Namespace, as_json: bool) -> int:
    path = Path(ns.path)
    if not path.is_absolute():
        path = ctx.root / path
    if not path.is_file():
        raise ScriptError(f"file not found: {ns.path}", ERR_USAGE)
    results = run_static_checks(path.read_bytes(), config.max_file_size)
    failed = [r for r in results if not r.passed]
    if as_json:
        _emit(
            {
                "schema_version": 1,
                "tool": "entrygate",
                "kind": "static-checks",
                "file": str(path),
                "status": "fail" if failed else "pass",
                "checks": [r.to_dict() for r in results],
            },
            True,
        )
    else:
        for r in results:
            print(f"{r.status:<4} {r.id}" + (f": {r.errors[0]}" if r.errors else ""))
    return ERR_STATIC if failed else 0


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    ns = p.parse_args(argv)
    fmt = ns.format or ("json" if "CI" in os.environ else "text")
    ctx = RunContext.from_args(ns.run_id, ns.root, fmt, ns.verbose, ns.quiet, ns.log_json)
    try:
        config = load_config(ctx.root, Path(ns.config) if ns.config else None, ns.entries)
        log_event(ctx, "debug", "cli", "start", cmd=ns.cmd, entries_root=str(config.entries_root))
        as_json = ctx.output_format == "json" or bool(getattr(ns, "json", False))
        if ns.cmd == "list":
            entries = list_entries(config.entries_root)
            if as_json:
                _emit({"schema_version": 1, "tool": "entrygate", "status": "ok", "entries": entries}, True)
            else:
                for name in entries:
                    print(name)
            return 0
        if ns.cmd == "validate":
            return _run_validate(ctx, config, ns, as_json)
        if ns.cmd == "check-file":
            return _run_check_file(ctx, config, ns, as_json)
        if ns.cmd == "run":
            try:
                return run_dispatcher(config, ctx, ns.name)
            except ScriptError as exc:
                print(f"error: {exc}", file=sys.stderr)
                return ERR_RESOLUTION
        return ERR_USAGE
    except ScriptError as exc:
        if ctx.output_format == "json":
            print(
                json.dumps(
                    {
                        "schema_version": 1,
                        "tool": "entrygate",
                        "status": "fail",
                        "error": {"message": str(exc), "code": exc.code, "kind": exc.kind},
                    },
                    sort_keys=True,
                ),
                file=sys.stderr,
            )
        else:
            print(str(exc), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(f"internal error: {exc}", file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
