"""
portal_cohesion - Identifier extraction.

Pulls identifier sets out of JavaScript/JSX configuration files read as
plain text. This is best-effort static analysis, not a parser: malformed
input yields an incomplete or empty set, never an exception.

Handles:
- Locating `name = { ... }` declarations
- Balanced-brace literal extraction (string- and comment-aware)
- Top-level key extraction (quoted, bare and computed keys)
- Repeated `attribute="value"` extraction
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .config import SourceSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentifierSet:
    """A named, deduplicated collection of identifier tokens."""
    name: str
    label: str
    source: str
    tokens: frozenset[str]
    available: bool = True
    note: Optional[str] = None

    def sorted(self) -> list[str]:
        return sorted(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self):
        return iter(self.sorted())


# =============================================================================
# Literal scanning
# =============================================================================

_NAME_CHARS = re.compile(r"[\w$]")
_QUOTES = {"'": "string", '"': "string", "`": "template"}


@dataclass(frozen=True)
class _Token:
    kind: str  # "string" | "template" | "name" | "punct"
    value: str


def find_declaration(text: str, name: str) -> int:
    """Return the index of the opening brace of `name = {`, or -1."""
    m = re.search(rf"(?<![\w$.]){re.escape(name)}\s*=\s*\{{", text)
    if m is None:
        return -1
    return m.end() - 1


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the string literal opening at *start*."""
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return n


def _scan_literal(text: str, start: int) -> tuple[list[_Token], int]:
    """
    Walk the object literal whose `{` is at *start*.

    Returns the tokens sitting directly inside the literal (brace depth 1)
    and the index just past the matching `}`, or -1 if it never closes.
    """
    tokens: list[_Token] = []
    depth = 0
    i = start
    n = len(text)

    while i < n:
        ch = text[i]

        if ch in _QUOTES:
            end = _skip_string(text, i)
            if depth == 1:
                tokens.append(_Token(_QUOTES[ch], text[i + 1:end - 1]))
            i = end
            continue

        if ch == "/" and text.startswith("//", i):
            nl = text.find("\n", i)
            i = n if nl == -1 else nl + 1
            continue
        if ch == "/" and text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close == -1 else close + 2
            continue

        if ch == "{":
            depth += 1
            if depth == 1:
                tokens.append(_Token("punct", "{"))
            i += 1
            continue
        if ch == "}":
            depth -= 1
            if depth == 0:
                return tokens, i + 1
            i += 1
            continue

        if depth == 1:
            if _NAME_CHARS.match(ch):
                j = i + 1
                while j < n and _NAME_CHARS.match(text[j]):
                    j += 1
                tokens.append(_Token("name", text[i:j]))
                i = j
                continue
            if not ch.isspace():
                tokens.append(_Token("punct", ch))
        i += 1

    return tokens, -1


def extract_balanced_literal(text: str, name: str) -> str:
    """Return the source of the `name = { ... }` literal, or "" if absent or unclosed."""
    start = find_declaration(text, name)
    if start == -1:
        return ""
    _, end = _scan_literal(text, start)
    if end == -1:
        return ""
    return text[start:end]


# =============================================================================
# Key extraction
# =============================================================================

def _is_key_position(tokens: list[_Token], index: int) -> bool:
    """Keys follow the opening brace or a comma."""
    if index < 0:
        return False
    prev = tokens[index]
    return prev.kind == "punct" and prev.value in ("{", ",")


def _computed_key(tokens: list[_Token], close: int) -> Optional[str]:
    """Resolve `[A.B.NAME]` ending at *close*; returns NAME."""
    j = close - 1
    while j >= 0 and not (tokens[j].kind == "punct" and tokens[j].value == "["):
        j -= 1
    if j < 0 or not _is_key_position(tokens, j - 1):
        return None
    inner = tokens[j + 1:close]
    if len(inner) == 1 and inner[0].kind == "string":
        return inner[0].value
    if not inner or len(inner) % 2 == 0:
        return None
    for k, tok in enumerate(inner):
        expected = "name" if k % 2 == 0 else "punct"
        if tok.kind != expected or (expected == "punct" and tok.value != "."):
            return None
    return inner[-1].value


def _top_level_keys(tokens: list[_Token], key_style: str) -> Iterable[str]:
    for i, tok in enumerate(tokens):
        if tok.kind != "punct" or tok.value != ":" or i == 0:
            continue
        prev = tokens[i - 1]
        if key_style == "quoted":
            if prev.kind == "string" and _is_key_position(tokens, i - 2):
                yield prev.value
        elif key_style == "bare":
            if prev.kind == "name" and _is_key_position(tokens, i - 2):
                yield prev.value
        elif key_style == "computed":
            if prev.kind == "punct" and prev.value == "]":
                key = _computed_key(tokens, i - 1)
                if key:
                    yield key
        else:
            raise ValueError(f"Unknown key style: {key_style}")


def extract_object_keys(text: str, name: str, key_style: str = "quoted") -> list[str]:
    """
    Return the keys declared directly inside the `name = { ... }` literal.

    Nested objects are skipped, as are braces and colons inside strings
    and comments. Returns a sorted, deduplicated list; empty when the
    declaration is missing or the literal never closes.
    """
    start = find_declaration(text, name)
    if start == -1:
        return []
    tokens, end = _scan_literal(text, start)
    if end == -1:
        return []
    return sorted(set(_top_level_keys(tokens, key_style)))


def extract_attribute_values(text: str, attribute: str) -> list[str]:
    """Return every value of `attribute="value"` in *text*, sorted and deduplicated."""
    pattern = re.compile(
        rf"(?<![\w$-]){re.escape(attribute)}\s*=\s*(?:\"([^\"\n]*)\"|'([^'\n]*)')"
    )
    values = {m.group(1) if m.group(1) is not None else m.group(2)
              for m in pattern.finditer(text)}
    values.discard("")
    return sorted(values)


# =============================================================================
# Source loading
# =============================================================================

def extract_from_text(text: str, spec: SourceSpec) -> tuple[list[str], Optional[str]]:
    """Apply *spec*'s extraction to *text*; returns (tokens, note on a miss)."""
    if spec.kind == "attribute":
        values = extract_attribute_values(text, spec.target)
        if not values:
            return [], f"no {spec.target}=\"...\" attributes found"
        return values, None
    if find_declaration(text, spec.target) == -1:
        return [], f"declaration '{spec.target}' not found"
    if not extract_balanced_literal(text, spec.target):
        return [], f"declaration '{spec.target}' is never closed"
    return extract_object_keys(text, spec.target, spec.key_style), None


def load_identifier_set(root: Path, spec: SourceSpec) -> IdentifierSet:
    """Read the file named by *spec* under *root* and extract its identifier set."""
    path = root / spec.path
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read %s: %s", spec.path, e)
        reason = "file not found" if isinstance(e, FileNotFoundError) else str(e)
        return IdentifierSet(
            name=spec.name,
            label=spec.label,
            source=spec.path,
            tokens=frozenset(),
            available=False,
            note=reason,
        )

    tokens, note = extract_from_text(text, spec)
    if note:
        logger.warning("%s: %s", spec.path, note)

    return IdentifierSet(
        name=spec.name,
        label=spec.label,
        source=spec.path,
        tokens=frozenset(tokens),
        note=note,
    )
