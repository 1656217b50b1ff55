"""Interactive runner for entries.

Runs one entry (by exact or approximate name) or every entry in order, with
the child process attached to the terminal. This is an operator convenience
and is independent of the validation pipeline.
"""

from __future__ import annotations

import argparse
import difflib
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Sequence, TextIO

from .config import HarnessConfig, load_config
from .core.context import RunContext
from .core.logging import log_event
from .core.process import stream_command
from .errors import ResolutionError, ScriptError
from .execution import resolve_command
from .exit_codes import ERR_RESOLUTION, OK
from .scanner import list_entries, resolve_entry_file

Matcher = Callable[[str, Sequence[str]], Sequence[str]]
Streamer = Callable[[list[str], Path, Mapping[str, str]], int]


def close_matches(cutoff: float = 0.6, limit: int = 3) -> Matcher:
    def _match(word: str, candidates: Sequence[str]) -> Sequence[str]:
        return difflib.get_close_matches(word, list(candidates), n=limit, cutoff=cutoff)

    return _match


def _stream(cmd: list[str], cwd: Path, env: Mapping[str, str]) -> int:
    return stream_command(cmd, cwd, env)


@dataclass
class Dispatcher:
    config: HarnessConfig
    ctx: RunContext
    matcher: Matcher | None = None
    streamer: Streamer = _stream
    out: TextIO = field(default_factory=lambda: sys.stdout)

    def entries(self) -> list[str]:
        return list_entries(self.config.entries_root)

    def _say(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def prompt(self, read: Callable[[str], str] | None = None) -> str:
        read = read or input
        self._say("available entries:")
        for name in self.entries():
            self._say(f"  - {name}")
        self._say("\npress Enter on an empty line to run every entry")
        try:
            return read("\nentry to run: ").strip()
        except EOFError as exc:
            raise ResolutionError("no entry name given (end of input)") from exc

    def resolve(self, name: str) -> str:
        entries = self.entries()
        if name in entries:
            return name
        available = ", ".join(entries) or "(none)"
        matcher = self.matcher or close_matches(self.config.match_cutoff)
        try:
            candidates = list(matcher(name, entries))
        except Exception as exc:
            raise ResolutionError(f"could not match `{name}`: {exc}; available: {available}") from exc
        if not candidates:
            raise ResolutionError(f"entry `{name}` not found; available: {available}")
        chosen = candidates[0]
        log_event(self.ctx, "warn", "dispatcher", "substitute", requested=name, resolved=chosen)
        self._say(f'\n"{name}" not found; running closest match "{chosen}"\n')
        return chosen

    def _launch(self, name: str) -> int:
        file_path = resolve_entry_file(self.config.entries_root, name, self.config.allowed_filenames)
        command = resolve_command(file_path, self.config.interpreters)
        self._say(f"file: {file_path.name}")
        code = self.streamer(list(command.argv), self.ctx.root, command.env)
        log_event(self.ctx, "debug", "dispatcher", "exit", entry=name, code=code)
        return code

    def run_one(self, name: str) -> int:
        self._say(f"\nrunning {name}...\n")
        return self._launch(name)

    def run_all(self) -> int:
        self._say("\nrunning every entry in order...\n")
        for name in self.entries():
            self._say(f"\n=== {name} ===")
            code = self._launch(name)
            if code != 0:
                log_event(self.ctx, "error", "dispatcher", "abort", entry=name, code=code)
                print(f"\nerror: {name} exited with code {code}", file=sys.stderr)
                return code
        self._say("\nall entries finished.")
        return OK

    def handle(self, name: str) -> int:
        if name == "":
            return self.run_all()
        return self.run_one(self.resolve(name))


def run_dispatcher(config: HarnessConfig, ctx: RunContext, name: str | None) -> int:
    dispatcher = Dispatcher(config, ctx)
    selection = name.strip() if name and name.strip() else dispatcher.prompt()
    return dispatcher.handle(selection)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="entrygate-run", description="run one entry, or every entry when no name is given")
    p.add_argument("name", nargs="?", help="entry name; prompts when omitted")
    p.add_argument("--root", help="working root (default: current directory)")
    p.add_argument("--entries", help="entries directory, relative to the root")
    p.add_argument("--config", help="path to an entrygate.yaml file")
    p.add_argument("--run-id", help="run identifier for log events")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    return p


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    ctx = RunContext.from_args(ns.run_id, ns.root, "text", ns.verbose, ns.quiet, ns.log_json)
    try:
        config = load_config(ctx.root, Path(ns.config) if ns.config else None, ns.entries)
        return run_dispatcher(config, ctx, ns.name)
    except ScriptError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ERR_RESOLUTION


if __name__ == "__main__":
    raise SystemExit(main())
