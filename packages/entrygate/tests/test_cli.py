from __future__ import annotations

import json
import sys
from pathlib import Path

import jsonschema
import pytest

from entrygate.cli import build_parser, main
from entrygate.config import REPORT_SCHEMA
from helpers import make_entry, python_printer

LOOP_JS = "while (true) { console.log('Hello, World!'); }\n"


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("TARGET", raising=False)
    monkeypatch.delenv("ENTRYGATE_TARGET", raising=False)
    monkeypatch.setenv("RUN_ID", "pytest-cli")
    (tmp_path / "entrygate.yaml").write_text(
        "expected_count: 4\n"
        "interpreters:\n"
        f"  default: {{argv: [{json.dumps(sys.executable)}]}}\n",
        encoding="utf-8",
    )
    entries = tmp_path / "entries"
    make_entry(entries, "good", {"main.js": python_printer(4)})
    make_entry(entries, "loop", {"main.js": LOOP_JS})
    return tmp_path


def _run(workspace: Path, *args: str) -> int:
    return main(["--root", str(workspace), "--quiet", *args])


def test_parser_subcommands() -> None:
    parser = build_parser()
    ns = parser.parse_args(["validate", "--target", "x", "--jobs", "2"])
    assert (ns.cmd, ns.target, ns.jobs) == ("validate", "x", 2)
    assert parser.parse_args(["run"]).name is None


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith("entrygate 0.1.0")


def test_list_json(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "list", "--json") == 0
    assert json.loads(capsys.readouterr().out)["entries"] == ["good", "loop"]


@pytest.mark.integration
def test_validate_json_report(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "validate", "--json", "--out-file", "reports/validate.json") == 1
    payload = json.loads(capsys.readouterr().out)
    jsonschema.validate(payload, json.loads(REPORT_SCHEMA.read_text(encoding="utf-8")))
    assert payload["run_id"] == "pytest-cli"
    assert {row["entry"]: row["status"] for row in payload["entries"]} == {"good": "pass", "loop": "fail"}
    written = json.loads((workspace / "reports/validate.json").read_text(encoding="utf-8"))
    assert written == payload


@pytest.mark.integration
def test_validate_target_text_summary(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "validate", "--target", "good") == 0
    out = capsys.readouterr().out
    assert "pass good (main.js)" in out
    assert "validate: pass (0/1 failed)" in out


def test_validate_target_from_environment(
    workspace: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TARGET", "loop")
    assert _run(workspace, "validate") == 1
    out = capsys.readouterr().out
    assert "banned-constructs: banned construct used: while" in out
    assert "good" not in out


def test_validate_unknown_target(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "validate", "--target", "nope") == 1
    assert "available: good, loop" in capsys.readouterr().err


def test_validate_json_error_payload(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "--format", "json", "validate", "--target", "nope") == 1
    err = json.loads(capsys.readouterr().err)
    assert err["error"]["kind"] == "resolution_error"


def test_check_file(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "check-file", "entries/loop/main.js") == 12
    assert "fail banned-constructs" in capsys.readouterr().out
    assert _run(workspace, "check-file", "--json", "entries/good/main.js") == 0
    assert json.loads(capsys.readouterr().out)["status"] == "pass"


def test_invalid_config_exit_code(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "entrygate.yaml").write_text("max_file_size: nope\n", encoding="utf-8")
    assert _run(workspace, "list") == 10
    assert "max_file_size" in capsys.readouterr().err


def test_run_subcommand_unknown_entry(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(workspace, "run", "qqqqqq") == 1
    assert "available: good, loop" in capsys.readouterr().err
