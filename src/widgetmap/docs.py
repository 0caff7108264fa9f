"""Documentation comment normalization."""

from __future__ import annotations

import enum


class DocsMode(str, enum.Enum):
    FULL = "full"
    SUMMARY = "summary"


def strip_comment_markers(line: str) -> str:
    """Remove doc-comment markers (``///``, ``/**``, ``*``, ``*/``) from one line."""
    s = line.lstrip()
    if s.startswith("///"):
        s = s[3:]
    elif s.startswith("/**"):
        s = s[3:]
    elif s.startswith("/*"):
        s = s[2:]
    elif s.startswith("*") and not s.startswith("*/"):
        s = s[1:]
    if s.rstrip().endswith("*/"):
        s = s.rstrip()[:-2]
    return s


def is_doc_comment(text: str) -> bool:
    """Return True if *text* is a raw ``///`` or ``/* */`` comment block."""
    first = next((line.lstrip() for line in text.split("\n") if line.strip()), "")
    return first.startswith(("///", "/*"))


def normalize_documentation(text: str | None) -> str | None:
    """Return *text* with comment markers stripped and lines trimmed.

    Markers are only stripped from raw comment blocks; already-clean text
    such as a Python docstring keeps its ``*`` bullets and emphasis.
    Returns None when nothing but markers and whitespace remains.
    """
    if text is None:
        return None
    lines = text.split("\n")
    if is_doc_comment(text):
        lines = [strip_comment_markers(line) for line in lines]
    result = "\n".join(line.strip() for line in lines).strip()
    return result or None


def summarize_documentation(text: str | None) -> str | None:
    """Return the first paragraph of *text*, joined onto a single line."""
    normalized = normalize_documentation(text)
    if normalized is None:
        return None
    summary: list[str] = []
    for line in normalized.split("\n"):
        if not line:
            break
        summary.append(line)
    return " ".join(summary)


def render_documentation(text: str | None, mode: DocsMode) -> str | None:
    if mode is DocsMode.SUMMARY:
        return summarize_documentation(text)
    return normalize_documentation(text)
