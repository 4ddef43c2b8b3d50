"""Recover a JSON object from imperfect model output.

The cascade tries increasingly permissive strategies and stops at the first
one that yields a JSON object:

1. ``fenced``: strip leading/trailing code fences and parse.
2. ``brace_span``: parse from the first ``{`` to the last ``}``.
3. ``repaired``: fix raw newlines in strings, single quotes, trailing commas.
4. ``longest_candidate``: scan for brace-balanced objects, longest first.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from app.conversation.errors import ExtractionError

_LEADING_FENCE_RE = re.compile(r"^\s*(?:```+|~~~+)[ \t]*(?:json5?|javascript|js)?[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\r?\n?[ \t]*(?:```+|~~~+)\s*$")
_SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})
_STRING_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


class ParseError(ValueError):
    """One strategy could not produce a JSON object."""


@dataclass(slots=True, frozen=True)
class ParseAttempt:
    """Tagged result of a single strategy."""

    strategy: str
    value: dict[str, Any] | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


Strategy = Callable[[str], dict[str, Any]]


def strip_code_fences(text: str) -> str:
    """Remove markdown fence markers and stray backticks around the payload."""

    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip().strip("`").strip()


def _loads_object(text: str) -> dict[str, Any]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ParseError(f"expected a JSON object, got {type(value).__name__}")
    return value


def parse_direct(text: str) -> dict[str, Any]:
    return _loads_object(strip_code_fences(text))


def _brace_span(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ParseError("no {...} span found")
    return text[start : end + 1]


def parse_brace_span(text: str) -> dict[str, Any]:
    return _loads_object(_brace_span(strip_code_fences(text)))


def repair_json_text(text: str) -> str:
    """Apply targeted repairs for the malformed JSON models commonly emit.

    - raw newlines/tabs inside string values are escaped
    - single-quoted strings become double-quoted
    - trailing commas before ``}`` or ``]`` are dropped
    """

    source = text.translate(_SMART_QUOTES)
    out: list[str] = []
    quote: str | None = None
    i = 0
    length = len(source)
    while i < length:
        ch = source[i]
        if quote is not None:
            if ch == "\\" and i + 1 < length:
                nxt = source[i + 1]
                if nxt == "'" and quote == "'":
                    out.append("'")
                else:
                    out.append(ch)
                    out.append(nxt)
                i += 2
                continue
            if ch == quote:
                out.append('"')
                quote = None
            elif ch == '"':
                out.append('\\"')
            elif ch in _STRING_ESCAPES:
                out.append(_STRING_ESCAPES[ch])
            else:
                out.append(ch)
            i += 1
            continue

        if ch in ('"', "'"):
            quote = ch
            out.append('"')
        elif ch in "}]":
            while out and out[-1].isspace():
                out.pop()
            if out and out[-1] == ",":
                out.pop()
            out.append(ch)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def parse_repaired(text: str) -> dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        candidate = _brace_span(cleaned)
    except ParseError:
        candidate = cleaned
    return _loads_object(repair_json_text(candidate))


def find_object_candidates(text: str) -> list[str]:
    """Return every brace-balanced ``{...}`` substring, string-literal aware."""

    candidates: list[str] = []
    for match in re.finditer(r"\{", text):
        start = match.start()
        depth = 0
        quote: str | None = None
        escaped = False
        for index in range(start, len(text)):
            ch = text[index]
            if quote is not None:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == quote:
                    quote = None
                continue
            if ch == '"':
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    candidates.append(text[start : index + 1])
                    break
    return candidates


def parse_longest_candidate(text: str) -> dict[str, Any]:
    candidates = sorted(set(find_object_candidates(text or "")), key=len, reverse=True)
    if not candidates:
        raise ParseError("no brace-balanced object found")
    last_error: Exception | None = None
    for candidate in candidates:
        for attempt in (candidate, repair_json_text(candidate)):
            try:
                return _loads_object(attempt)
            except ParseError as exc:
                last_error = exc
    raise ParseError(f"no candidate parsed: {last_error}")


DEFAULT_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("fenced", parse_direct),
    ("brace_span", parse_brace_span),
    ("repaired", parse_repaired),
    ("longest_candidate", parse_longest_candidate),
)


def try_in_order(
    text: str,
    strategies: Sequence[tuple[str, Strategy]] = DEFAULT_STRATEGIES,
) -> list[ParseAttempt]:
    """Run strategies until one succeeds; return every attempt made."""

    attempts: list[ParseAttempt] = []
    for name, strategy in strategies:
        try:
            attempts.append(ParseAttempt(strategy=name, value=strategy(text)))
        except ParseError as exc:
            attempts.append(ParseAttempt(strategy=name, error=exc))
            continue
        break
    return attempts


def parse_json_object(
    text: str,
    strategies: Sequence[tuple[str, Strategy]] = DEFAULT_STRATEGIES,
) -> ParseAttempt:
    """Return the first successful attempt or raise ``ExtractionError``."""

    attempts = try_in_order(text, strategies)
    if attempts and attempts[-1].ok:
        return attempts[-1]
    last_error = attempts[-1].error if attempts else None
    raise ExtractionError(
        "Could not recover a JSON object from the model output.",
        cause=last_error,
        raw_text=text,
    )
