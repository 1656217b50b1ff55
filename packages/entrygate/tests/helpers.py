from __future__ import annotations

from pathlib import Path

HELLO = "Hello, World!"


def make_entry(root: Path, name: str, files: dict[str, str]) -> Path:
    entry = root / name
    entry.mkdir(parents=True)
    for file_name, body in files.items():
        (entry / file_name).write_text(body, encoding="utf-8")
    return entry


def python_printer(times: int, literal: str = HELLO) -> str:
    """Python source printing `literal` `times` times; used where entries run under Python."""
    return f"import sys\nsys.stdout.write({(literal + chr(10))!r} * {times})\n"


def python_exit(code: int) -> str:
    return f"import sys\nsys.stderr.write('boom\\n')\nsys.exit({code})\n"
