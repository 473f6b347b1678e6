"""Parser for the leading ``---`` frontmatter block of a markdown note.

Only the small subset of YAML that notes in a knowledge base actually use is
understood: ``key: value`` scalars, quoted strings, booleans, null, inline
``[a, b]`` sequences and block sequences of ``- item`` lines. Anything else is
ignored rather than rejected, so parsing never raises.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from obsidian_kb.data_models import ParsedNote

_OPENING_DELIMITER = re.compile(r"\A---\r?\n")
_CLOSING_DELIMITER = re.compile(r"^---\r?$\n?", re.MULTILINE)
_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def split_frontmatter_block(text: str) -> Optional[tuple[str, str]]:
    """Split ``text`` into ``(block, body)`` when it opens with a frontmatter block.

    The block must start on the very first line with a line that is exactly
    ``---`` and ends at the first following line that is exactly ``---``.

    Returns:
        ``None`` when no complete block is present.
    """
    opening = _OPENING_DELIMITER.match(text)
    if opening is None:
        return None

    closing = _CLOSING_DELIMITER.search(text, opening.end())
    if closing is None:
        return None

    block = text[opening.end():closing.start()]
    return block, text[closing.end():]


def split_flow_sequence(inner: str) -> list[str]:
    """Split the inside of a ``[...]`` sequence on top-level commas.

    Commas inside quotes or nested brackets do not split. Items are returned
    stripped but otherwise untouched.
    """
    items: list[str] = []
    current: list[str] = []
    quote: Optional[str] = None
    depth = 0

    escaped = False

    for char in inner:
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\" and quote == '"':
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in {'"', "'"}:
            quote = char
        elif char == "[":
            depth += 1
        elif char == "]" and depth:
            depth -= 1
        elif char == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    items.append("".join(current).strip())
    return items


def coerce_scalar(value: str) -> Any:
    """Convert a raw frontmatter value into a Python scalar or list.

    Priority: quoted string, boolean, null, inline sequence, number, plain string.
    Quoted strings are returned verbatim with only the surrounding quotes removed.
    """
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]

    if value == "true":
        return True
    if value == "false":
        return False

    if value in {"null", "~"}:
        return None

    if value.startswith("[") and value.endswith("]"):
        items = [coerce_scalar(item) for item in split_flow_sequence(value[1:-1])]
        return [item for item in items if item != ""]

    if _NUMBER.fullmatch(value):
        if re.fullmatch(r"[+-]?[0-9]+", value):
            return int(value)
        return float(value)

    return value


def parse_frontmatter_block(block: str) -> dict[str, Any]:
    """Parse the lines between the ``---`` delimiters into a mapping."""
    result: dict[str, Any] = {}
    current_list: Optional[list[Any]] = None

    for line in block.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith("- ") and current_list is not None:
            current_list.append(coerce_scalar(stripped[2:].strip()))
            continue

        colon = stripped.find(":")
        if colon <= 0:
            continue

        key = stripped[:colon].strip()
        value = stripped[colon + 1:].strip()

        if value in {"", "[]"}:
            # Opens a block sequence; ``- item`` lines that follow extend it
            current_list = []
            result[key] = current_list
        else:
            result[key] = coerce_scalar(value)
            current_list = None

    return result


# ==============================================================================
# PUBLIC API
# ==============================================================================


def parse_note(text: str) -> ParsedNote:
    """Split a note into frontmatter, body and raw text.

    Notes without a complete frontmatter block come back with an empty mapping
    and the whole document as body.
    """
    split = split_frontmatter_block(text)
    if split is None:
        return ParsedNote(frontmatter={}, body=text, raw=text)

    block, body = split
    return ParsedNote(frontmatter=parse_frontmatter_block(block), body=body, raw=text)
