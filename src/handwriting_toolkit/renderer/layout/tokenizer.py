"""
Module: renderer.layout.tokenizer

Purpose:
    Split page input into lines and word/whitespace tokens, keeping
    absolute offsets so remainders can be sliced from the original text.

Key Functions:
    - split_lines(): Lines with their start offsets
    - tokenize_line(): Alternating word and whitespace tokens
    - measurable_space(): Whitespace as it is measured (tabs widened)

Dependencies:
    - re (std)

Used By:
    - renderer.layout.engine
"""

from __future__ import annotations

import re
from typing import List, Tuple

from .models import Token

TAB_WIDTH = 4

_SEGMENT_RE = re.compile(r"\s+|\S+")


def split_lines(text: str) -> List[Tuple[int, str]]:
    """
    Split text on explicit line breaks.

    Args:
        text: Page input

    Returns:
        List of (start_offset, line) pairs; a trailing newline yields a
        final empty line, matching str.split("\\n").

    Example:
        >>> split_lines("ab\\ncd")
        [(0, 'ab'), (3, 'cd')]
    """
    lines = []
    offset = 0
    for line in text.split("\n"):
        lines.append((offset, line))
        offset += len(line) + 1
    return lines


def tokenize_line(line: str, line_start: int = 0) -> List[Token]:
    """
    Split one line into word and whitespace tokens.

    Whitespace is preserved as its own tokens so it can be measured.

    Args:
        line: Line without newline characters
        line_start: Offset of the line in the page input

    Returns:
        Tokens in order, covering the whole line
    """
    return [
        Token(
            text=match.group(),
            start=line_start + match.start(),
            is_space=match.group()[0].isspace(),
        )
        for match in _SEGMENT_RE.finditer(line)
    ]


def measurable_space(token: str) -> str:
    """Whitespace as measured: tabs count as TAB_WIDTH spaces."""
    return token.replace("\t", " " * TAB_WIDTH)
