"""Harness configuration.

Defaults reproduce the reference rules: one `main.*` file per entry, at most
1000 bytes, and exactly one million `Hello, World!` lines on stdout. A YAML
file may override any field; it is validated against the packaged schema
before use.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import jsonschema
import yaml

from .errors import ConfigError

CONFIG_FILENAME = "entrygate.yaml"
SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"
CONFIG_SCHEMA = SCHEMA_ROOT / "config.schema.json"
REPORT_SCHEMA = SCHEMA_ROOT / "validation-report.schema.json"

DEFAULT_ALLOWED_FILENAMES: tuple[str, ...] = (
    "main.js",
    "main.cjs",
    "main.mjs",
    "main.ts",
    "main.coffee",
)


@dataclass(frozen=True)
class Interpreter:
    argv: tuple[str, ...]
    env: Mapping[str, str] = field(default_factory=dict)


DEFAULT_INTERPRETER_KEY = "default"

DEFAULT_INTERPRETERS: dict[str, Interpreter] = {
    ".ts": Interpreter(("npx", "ts-node", "--esm"), {"NODE_OPTIONS": "--loader ts-node/esm"}),
    ".coffee": Interpreter(("npx", "coffee")),
    DEFAULT_INTERPRETER_KEY: Interpreter(("node",)),
}


@dataclass(frozen=True)
class HarnessConfig:
    entries_root: Path
    allowed_filenames: tuple[str, ...] = DEFAULT_ALLOWED_FILENAMES
    max_file_size: int = 1000
    target_literal: str = "Hello, World!"
    expected_count: int = 1_000_000
    interpreters: Mapping[str, Interpreter] = field(default_factory=lambda: dict(DEFAULT_INTERPRETERS))
    timeout_seconds: int = 0
    target: str | None = None
    match_cutoff: float = 0.6

    def with_target(self, target: str | None) -> "HarnessConfig":
        return replace(self, target=target)


def load_schema(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _parse_interpreters(raw: Mapping[str, Any]) -> dict[str, Interpreter]:
    merged = dict(DEFAULT_INTERPRETERS)
    for key, row in raw.items():
        merged[key] = Interpreter(tuple(row["argv"]), dict(row.get("env", {})))
    return merged


def config_from_mapping(root: Path, data: Mapping[str, Any]) -> HarnessConfig:
    try:
        jsonschema.validate(dict(data), load_schema(CONFIG_SCHEMA))
    except jsonschema.ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ConfigError(f"invalid config at {path}: {exc.message}") from exc
    entries_root = Path(data.get("entries_root", "entries"))
    if not entries_root.is_absolute():
        entries_root = root / entries_root
    kwargs: dict[str, Any] = {"entries_root": entries_root}
    if "allowed_filenames" in data:
        kwargs["allowed_filenames"] = tuple(data["allowed_filenames"])
    for key in ("max_file_size", "target_literal", "expected_count", "timeout_seconds"):
        if key in data:
            kwargs[key] = data[key]
    if "match_cutoff" in data:
        kwargs["match_cutoff"] = float(data["match_cutoff"])
    if "interpreters" in data:
        kwargs["interpreters"] = _parse_interpreters(data["interpreters"])
    return HarnessConfig(**kwargs)


def load_config(
    root: Path,
    config_path: Path | None = None,
    entries_root: str | None = None,
    env: Mapping[str, str] | None = None,
) -> HarnessConfig:
    """Build the configuration for one run.

    Resolution order: explicit `config_path`, else `entrygate.yaml` under
    `root` when present, else defaults. `entries_root` overrides the file's
    value; the target selector comes from `ENTRYGATE_TARGET` (or `TARGET`).
    """
    env = os.environ if env is None else env
    path = config_path if config_path is not None else root / CONFIG_FILENAME
    data: Mapping[str, Any] = {}
    if config_path is not None and not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    if path.is_file():
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"config file is not valid YAML: {path}: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"config root must be a mapping: {path}")
        data = loaded
    cfg = config_from_mapping(root, data)
    if entries_root:
        override = Path(entries_root)
        cfg = replace(cfg, entries_root=override if override.is_absolute() else root / override)
    target = env.get("ENTRYGATE_TARGET") or env.get("TARGET") or None
    return cfg.with_target(target)
