from __future__ import annotations

from .errors import ConfigError, CountMismatch


def count_occurrences(text: str, literal: str) -> int:
    if not literal:
        raise ConfigError("target literal must not be empty")
    return text.count(literal)


def verify_output(text: str, literal: str, expected: int) -> int:
    actual = count_occurrences(text, literal)
    if actual != expected:
        raise CountMismatch(
            f"expected {expected} occurrences of {literal!r}, found {actual}",
            expected=expected,
            actual=actual,
        )
    return actual
