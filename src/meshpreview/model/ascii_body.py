"""
ASCII Body Parser
=================
Tokenizes the ``Nodes`` and ``Elements`` sections of a plain-text file.

Nodes:    N, then N x (id, x, y, z)
Elements: M, then M x (id, type, numTags, tags..., nodeIds...)

Every token of a section is consumed exactly once; leftovers are an error.
Tokens are separated by the same six whitespace bytes the header uses, and
numbers must be plain ASCII literals.
"""
from __future__ import annotations

import logging
import re

import numpy as np

from meshpreview.model.element_types import nodes_per_element
from meshpreview.model.errors import SectionSyntaxError
from meshpreview.model.geometry import GeometryAssembler, TriangleCollector
from meshpreview.model.node_map import NodeIndexMap
from meshpreview.model.sections import BLANKS, RawSection

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(f"[^{re.escape(BLANKS)}]+")
INT_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


class TokenStream:
    """Sequential reader over the whitespace-separated tokens of one section."""

    def __init__(self, section: RawSection) -> None:
        self.section = section
        self.tokens: list[str] = []
        self.starts: list[int] = []
        for match in TOKEN_PATTERN.finditer(section.content):
            self.tokens.append(match.group())
            self.starts.append(match.start())
        self.pos = 0

    def offset_of(self, index: int) -> int:
        """Byte offset of token ``index`` in the input buffer."""
        if index < len(self.starts):
            return self.section.offset + self.starts[index]
        return self.section.offset + len(self.section.content)

    def error(self, message: str, index: int, excerpt: str | None = None) -> SectionSyntaxError:
        if excerpt is None and index < len(self.tokens):
            excerpt = self.tokens[index]
        return SectionSyntaxError(
            f"${self.section.name}: {message}", offset=self.offset_of(index), excerpt=excerpt
        )

    def take(self, count: int, what: str) -> list[str]:
        end = self.pos + count
        if end > len(self.tokens):
            raise self.error(f"section ended while reading {what}.", len(self.tokens))
        tokens = self.tokens[self.pos:end]
        self.pos = end
        return tokens

    def next_int(self, what: str) -> int:
        index = self.pos
        token = self.take(1, what)[0]
        if not INT_PATTERN.fullmatch(token):
            raise self.error(f"expected an integer for {what}.", index)
        return int(token)

    def skip(self, count: int, what: str) -> None:
        self.take(count, what)

    def expect_exhausted(self) -> None:
        if self.pos != len(self.tokens):
            leftover = " ".join(self.tokens[self.pos:self.pos + 8])
            raise self.error(
                f"{len(self.tokens) - self.pos} tokens left over after the declared records.",
                self.pos,
                excerpt=leftover,
            )


def parse_ascii_nodes(section: RawSection, node_map: NodeIndexMap, assembler: GeometryAssembler) -> int:
    """
    Read the Nodes section into ``node_map`` and ``assembler``.

    Returns:
        The number of nodes read.
    """
    stream = TokenStream(section)
    n_nodes = stream.next_int("the node count")
    if n_nodes < 0:
        raise stream.error(f"node count must not be negative, got {n_nodes}.", 0)

    first = stream.pos
    records = stream.take(4 * n_nodes, f"{n_nodes} node records")
    stream.expect_exhausted()

    for i, token in enumerate(records):
        if i % 4 == 0:
            if not INT_PATTERN.fullmatch(token):
                raise stream.error(f"expected an integer id for node record {i // 4}.", first + i)
            node_map.add(int(token), offset=stream.offset_of(first + i))
        elif not FLOAT_PATTERN.fullmatch(token):
            raise stream.error(f"invalid coordinate in node record {i // 4}.", first + i)

    coords = np.array(records, dtype=str).reshape(-1, 4)[:, 1:].astype(np.float64)
    assembler.add_vertices(coords)
    node_map.freeze()

    logger.debug(f"Read {n_nodes} ASCII nodes")
    return n_nodes


def parse_ascii_elements(section: RawSection, triangles: TriangleCollector) -> int:
    """
    Read the Elements section, handing each element to ``triangles``.

    Returns:
        The number of elements read.
    """
    stream = TokenStream(section)
    n_elements = stream.next_int("the element count")
    if n_elements < 0:
        raise stream.error(f"element count must not be negative, got {n_elements}.", 0)

    for _ in range(n_elements):
        stream.next_int("an element id")
        type_index = stream.pos
        elem_type = stream.next_int("an element type")
        num_tags = stream.next_int("an element tag count")
        if num_tags < 0:
            raise stream.error(f"negative tag count {num_tags}.", type_index + 1)
        stream.skip(num_tags, "element tags")

        n_refs = nodes_per_element(elem_type, offset=stream.offset_of(type_index))
        nodes_index = stream.pos
        node_ids = [stream.next_int("element node ids") for _ in range(n_refs)]
        triangles.add(elem_type, node_ids, offset=stream.offset_of(nodes_index))

    stream.expect_exhausted()
    logger.debug(f"Read {n_elements} ASCII elements")
    return n_elements
