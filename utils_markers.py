#!/usr/bin/env python3
"""
Free-text marker parsing for approval workflow comments
Everything that depends on how an "Approved in W12" / "Rejected in W13" note is
laid out lives here, so Event never has to know about text layout.
Used by normalizer.py, tabular_source.py and jira_source.py
"""

import re
from typing import Any, List, Optional

from config import APPROVED_MARKER, REJECTED_MARKER, CYCLE_LABEL_PREFIX
from models import EventKind


def _marker_pattern(marker: str) -> 're.Pattern':
    # "Approved in" tolerates case changes and runs of whitespace
    words = [re.escape(word) for word in marker.split()]
    return re.compile(r'\b' + r'\s+'.join(words) + r'\b', re.IGNORECASE)


_APPROVED_RE = _marker_pattern(APPROVED_MARKER)
_REJECTED_RE = _marker_pattern(REJECTED_MARKER)
_CYCLE_LABEL_RE = re.compile(r'(?<![A-Za-z0-9])' + re.escape(CYCLE_LABEL_PREFIX) + r'(\d+)\b', re.IGNORECASE)


def find_marker(text: Optional[str]) -> Optional[EventKind]:
    """
    Classify a free-text fragment as an approval or rejection note.

    Args:
        text: Comment body or spreadsheet cell

    Returns:
        EventKind.APPROVED if an approval marker is present (it wins over a
        rejection marker in the same text), EventKind.REJECTED if only a
        rejection marker is present, None otherwise
    """
    if not text:
        return None
    if _APPROVED_RE.search(text):
        return EventKind.APPROVED
    if _REJECTED_RE.search(text):
        return EventKind.REJECTED
    return None


def extract_cycle_label(text: Optional[str]) -> Optional[str]:
    """
    Find the cycle label token (e.g. "W12") belonging to an event note.

    The token following the marker is preferred; otherwise the first token on
    the note's first line is used.

    Returns:
        The raw token including its prefix, or None if none is present
    """
    if not text:
        return None

    marker = _APPROVED_RE.search(text) or _REJECTED_RE.search(text)
    if marker:
        match = _CYCLE_LABEL_RE.search(text, marker.end())
        if match:
            return match.group(0)

    first_line = text.splitlines()[0] if text.splitlines() else text
    match = _CYCLE_LABEL_RE.search(first_line)
    return match.group(0) if match else None


def parse_cycle_label(token: Optional[str]) -> int:
    """
    Convert a cycle label token to its integer value.

    Args:
        token: "W12", "w07" or a bare "12"

    Returns:
        Non-negative integer label

    Raises:
        ValueError: if the token is missing or not a prefixed integer
    """
    if token is None:
        raise ValueError("missing cycle label")

    value = token.strip()
    if value[:len(CYCLE_LABEL_PREFIX)].upper() == CYCLE_LABEL_PREFIX.upper():
        value = value[len(CYCLE_LABEL_PREFIX):]

    if not value.isdigit():
        raise ValueError(f"malformed cycle label {token!r}")
    return int(value)


def adf_to_text(node: Any) -> str:
    """
    Flatten an Atlassian Document Format body into plain text.

    Paragraph-like blocks end with a newline and hard breaks become newlines,
    so the first line of the result is the first line the author wrote.
    Plain string bodies (API v2) are returned unchanged.
    """
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(adf_to_text(child) for child in node)
    if not isinstance(node, dict):
        return str(node)

    node_type = node.get('type')
    if node_type == 'text':
        return node.get('text', '')
    if node_type == 'hardBreak':
        return "\n"
    if node_type in ('mention', 'emoji'):
        attrs = node.get('attrs', {})
        return attrs.get('text') or attrs.get('shortName') or ''

    inner = adf_to_text(node.get('content', []))
    if node_type in ('paragraph', 'heading', 'listItem', 'codeBlock', 'blockquote'):
        return inner.rstrip("\n") + "\n"
    if node_type == 'doc':
        return inner.rstrip("\n")
    return inner


def split_first_line(text: str) -> List[str]:
    """Whitespace tokens of the first line of a note"""
    lines = text.splitlines()
    return lines[0].split() if lines else []
