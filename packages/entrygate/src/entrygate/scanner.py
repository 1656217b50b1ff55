from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .config import DEFAULT_ALLOWED_FILENAMES
from .errors import StructuralError


def list_entries(root: Path) -> list[str]:
    if not root.is_dir():
        raise StructuralError(f"entries root is not a directory: {root}")
    return sorted(p.name for p in root.iterdir() if p.is_dir())


def list_files(entry_dir: Path) -> list[str]:
    return sorted(p.name for p in entry_dir.iterdir() if p.is_file())


def find_main_file(entry_dir: Path, allowed: Iterable[str] = DEFAULT_ALLOWED_FILENAMES) -> str:
    allowed = tuple(allowed)
    if not entry_dir.is_dir():
        raise StructuralError(f"entry directory does not exist: {entry_dir}")
    files = list_files(entry_dir)
    if not files:
        raise StructuralError(f"no file found in entry directory: {entry_dir}")
    if len(files) > 1:
        raise StructuralError(f"more than one file in entry directory {entry_dir}: {', '.join(files)}")
    name = files[0]
    if name not in allowed:
        raise StructuralError(f"file name not allowed: {name}; allowed: {', '.join(allowed)}")
    return name


def resolve_entry_file(root: Path, name: str, allowed: Iterable[str] = DEFAULT_ALLOWED_FILENAMES) -> Path:
    entry_dir = root / name
    return entry_dir / find_main_file(entry_dir, allowed)
