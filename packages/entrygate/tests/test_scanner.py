from __future__ import annotations

from pathlib import Path

import pytest

from entrygate.errors import StructuralError
from entrygate.scanner import find_main_file, list_entries, resolve_entry_file
from helpers import make_entry


def test_list_entries_sorted_directories_only(entries_root: Path) -> None:
    make_entry(entries_root, "zeta", {"main.js": ""})
    make_entry(entries_root, "alpha", {"main.mjs": ""})
    (entries_root / "README.md").write_text("not an entry", encoding="utf-8")
    assert list_entries(entries_root) == ["alpha", "zeta"]


def test_list_entries_missing_root(tmp_path: Path) -> None:
    with pytest.raises(StructuralError, match="not a directory"):
        list_entries(tmp_path / "missing")


@pytest.mark.parametrize("name", ["main.js", "main.cjs", "main.mjs", "main.ts", "main.coffee"])
def test_find_main_file_accepts_allowed_names(entries_root: Path, name: str) -> None:
    entry = make_entry(entries_root, "one", {name: "console.log(1)"})
    assert find_main_file(entry) == name


def test_find_main_file_rejects_empty_directory(entries_root: Path) -> None:
    entry = make_entry(entries_root, "empty", {})
    with pytest.raises(StructuralError, match="no file"):
        find_main_file(entry)


def test_find_main_file_rejects_multiple_files(entries_root: Path) -> None:
    entry = make_entry(entries_root, "two", {"main.js": "", "notes.txt": ""})
    with pytest.raises(StructuralError, match="main.js, notes.txt"):
        find_main_file(entry)


def test_find_main_file_rejects_unknown_name(entries_root: Path) -> None:
    entry = make_entry(entries_root, "py", {"main.py": ""})
    with pytest.raises(StructuralError, match="not allowed: main.py"):
        find_main_file(entry)


def test_find_main_file_ignores_subdirectories(entries_root: Path) -> None:
    entry = make_entry(entries_root, "nested", {"main.ts": ""})
    (entry / "node_modules").mkdir()
    assert find_main_file(entry) == "main.ts"


def test_resolve_entry_file_custom_allow_list(entries_root: Path) -> None:
    make_entry(entries_root, "py", {"main.py": ""})
    assert resolve_entry_file(entries_root, "py", ("main.py",)) == entries_root / "py" / "main.py"
