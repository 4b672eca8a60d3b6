"""
ASCII Section Segmenter
=======================
Splits the text that follows the header into named ``$Name ... $EndName``
blocks. The scanner walks the text with an explicit cursor: every block must
start exactly at the cursor, its end marker is found by plain substring
search, and anything that is not a block is reported as stray text.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging

from meshpreview.model.errors import SectionMissingError, SectionSyntaxError
from meshpreview.model.header import WHITESPACE

logger = logging.getLogger(__name__)

SECTION_PREFIX = "$"
END_PREFIX = "$End"

# TAB, LF, VT, FF, CR, SPACE as characters, matching the header
BLANKS = "".join(map(chr, sorted(WHITESPACE)))


@dataclass(frozen=True)
class RawSection:
    """One named block of an ASCII file."""
    name: str
    content: str
    offset: int  # byte offset of the content in the input buffer


def _skip_whitespace(text: str, pos: int) -> int:
    end = len(text)
    while pos < end and text[pos] in BLANKS:
        pos += 1
    return pos


def _find_end_marker(text: str, marker: str, pos: int) -> int:
    """Find ``marker`` standing alone on its line at or after ``pos``, or return -1."""
    while True:
        idx = text.find(marker, pos)
        if idx < 0:
            return -1
        after = idx + len(marker)
        starts_line = idx == 0 or text[idx - 1] in BLANKS
        ends_token = after == len(text) or text[after] in BLANKS
        if starts_line and ends_token:
            return idx
        pos = idx + 1


def _check_not_nested(name: str, content: str, offset: int) -> None:
    """A ``$`` opening any line of a section body means a misnested block."""
    pos = content.find(SECTION_PREFIX)
    while pos >= 0:
        line_start = content.rfind("\n", 0, pos) + 1
        if not content[line_start:pos].strip(BLANKS):
            line_end = content.find("\n", pos)
            raise SectionSyntaxError(
                f"Section '{name}' contains a nested or unterminated block.",
                offset=offset + pos,
                excerpt=content[pos:line_end] if line_end >= 0 else content[pos:],
            )
        pos = content.find(SECTION_PREFIX, pos + 1)


def split_sections(text: str, base_offset: int = 0) -> list[RawSection]:
    """
    Split ``text`` into its top-level sections, preserving file order.

    Args:
        text: Everything after ``$EndMeshFormat``, decoded byte for byte.
        base_offset: Position of ``text`` in the input buffer, used for
            diagnostics only.

    Raises:
        SectionSyntaxError: On stray text, a nameless or unmatched marker, or a
            nested block.
    """
    sections: list[RawSection] = []
    pos = _skip_whitespace(text, 0)

    while pos < len(text):
        if not text.startswith(SECTION_PREFIX, pos):
            raise SectionSyntaxError(
                "Found unknown text between sections.", offset=base_offset + pos, excerpt=text[pos:]
            )

        name_end = pos + 1
        while name_end < len(text) and text[name_end] not in BLANKS:
            name_end += 1
        name = text[pos + 1:name_end]

        if not name:
            raise SectionSyntaxError("Section doesn't have a name.", offset=base_offset + pos, excerpt=text[pos:])
        if name.startswith("End"):
            raise SectionSyntaxError(
                "Found an end marker without a matching section start.",
                offset=base_offset + pos,
                excerpt=text[pos:],
            )

        end_marker = END_PREFIX + name
        end_idx = _find_end_marker(text, end_marker, name_end)
        if end_idx < 0:
            raise SectionSyntaxError(
                f"Section '{name}' doesn't have an end marker.", offset=base_offset + pos, excerpt=text[pos:]
            )

        content = text[name_end:end_idx]
        _check_not_nested(name, content, base_offset + name_end)

        sections.append(RawSection(name=name, content=content, offset=base_offset + name_end))
        logger.debug(f"Section '{name}' spans bytes {base_offset + pos}..{base_offset + end_idx + len(end_marker)}")

        pos = _skip_whitespace(text, end_idx + len(end_marker))

    return sections


def find_section(sections: list[RawSection], name: str) -> RawSection:
    """Return the first section called ``name``."""
    for section in sections:
        if section.name == name:
            return section
    raise SectionMissingError(f"Did not find ${name} in msh file!")
