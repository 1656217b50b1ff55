"""Text-level rules applied to an entry file without running it.

These are deliberately shallow: comments are removed with regular
expressions, string literals are not understood, and recursion detection
only looks for a function calling itself by name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .checks.base import CheckResult, run_check
from .errors import BannedConstruct, SelfRecursion, SizeExceeded

BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
LINE_COMMENT_RE = re.compile(r"//.*")

BANNED_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("for", re.compile(r"\bfor\s*\(")),
    ("while", re.compile(r"\bwhile\s*\(")),
    ("forEach", re.compile(r"\.forEach\s*\(")),
)

FUNCTION_DECL_RE = re.compile(r"function\s+(\w+)\s*\([^)]*\)\s*\{")
ARROW_DECL_RE = re.compile(r"(?:const|let|var)\s+(\w+)\s*=\s*\([^)]*\)\s*=>\s*")

STATIC_CHECK_IDS = ("size", "banned-constructs", "self-recursion")


@dataclass(frozen=True)
class FunctionDef:
    name: str
    body: str
    offset: int


def check_size(data: bytes, limit: int) -> None:
    size = len(data)
    if size > limit:
        raise SizeExceeded(f"file is {size} bytes; limit is {limit} bytes")


def strip_comments(text: str) -> str:
    return LINE_COMMENT_RE.sub("", BLOCK_COMMENT_RE.sub("", text))


def check_banned_constructs(text: str) -> None:
    code = strip_comments(text)
    found = [label for label, pattern in BANNED_PATTERNS if pattern.search(code)]
    if found:
        raise BannedConstruct(f"banned construct used: {', '.join(found)}")


def _closing_brace(text: str, open_index: int) -> int:
    """Return the index of the brace closing `text[open_index]`.

    An unterminated body runs to the end of the text.
    """
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return len(text)


def extract_functions(text: str) -> list[FunctionDef]:
    found: list[FunctionDef] = []
    for match in FUNCTION_DECL_RE.finditer(text):
        open_index = match.end() - 1
        body = text[open_index + 1 : _closing_brace(text, open_index)]
        found.append(FunctionDef(match.group(1), body, match.start()))
    for match in ARROW_DECL_RE.finditer(text):
        start = match.end()
        if text.startswith("{", start):
            body = text[start + 1 : _closing_brace(text, start)]
        else:
            stop = text.find(";", start)
            body = text[start:] if stop < 0 else text[start:stop]
        found.append(FunctionDef(match.group(1), body, match.start()))
    return sorted(found, key=lambda fn: fn.offset)


def find_self_recursive(text: str) -> list[str]:
    names: list[str] = []
    for fn in extract_functions(text):
        call = re.compile(rf"\b{re.escape(fn.name)}\s*\(")
        if call.search(fn.body) and fn.name not in names:
            names.append(fn.name)
    return names


def check_self_recursion(text: str) -> None:
    names = find_self_recursive(text)
    if names:
        raise SelfRecursion(f"self-recursive call detected: {', '.join(names)} calls itself")


def run_static_checks(data: bytes, limit: int) -> list[CheckResult]:
    text = data.decode("utf-8", errors="replace")
    return [
        run_check("size", lambda: check_size(data, limit)),
        run_check("banned-constructs", lambda: check_banned_constructs(text)),
        run_check("self-recursion", lambda: check_self_recursion(text)),
    ]
