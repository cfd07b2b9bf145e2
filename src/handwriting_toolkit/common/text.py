"""Text clean-up applied to extracted documents before they are stored.

PDF and DOCX extractors tend to put a list marker on its own line, with
the item text on the next one. Rendering that verbatim wastes a whole
handwritten line per bullet, so the marker is joined back onto its item.
"""

from __future__ import annotations

import re

# A bullet (•, -, *) or "12." alone on a line, followed by a non-blank line.
_ORPHAN_MARKER_RE = re.compile(r"^([•\-*]|\d+\.)\n(?=\S)", re.MULTILINE)


def normalise_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def clean_extracted_text(text: str) -> str:
    """Merge orphaned list markers with the line that follows them.

    Example:
        >>> clean_extracted_text("•\\nMilk\\n2.\\nEggs")
        '• Milk\\n2. Eggs'
    """
    return _ORPHAN_MARKER_RE.sub(r"\1 ", normalise_newlines(text))
