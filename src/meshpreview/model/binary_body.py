"""
Binary Body Parser
==================
Reads the ``Nodes`` and ``Elements`` sections of a binary MSH 2.2 file
straight from the byte buffer.

Layout after each marker line:
    $Nodes
    <N in ASCII digits>
    N x (u32 id | f64 x | f64 y | f64 z)
    $EndNodes
    $Elements
    <M in ASCII digits>
    groups of: u32 type | u32 count | u32 numTags,
               count x (u32 id | numTags x u32 tag | table[type] x u32 node id)
    $EndElements

All binary values use the byte order announced in the header. Every read is
bounds-checked against the buffer before NumPy touches it.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from meshpreview.model.element_types import nodes_per_element
from meshpreview.model.errors import (
    SectionMissingError,
    SectionSyntaxError,
    TruncatedBinaryDataError,
)
from meshpreview.model.geometry import GeometryAssembler, TriangleCollector
from meshpreview.model.header import WHITESPACE, Endianness, MeshFormatHeader, skip_whitespace
from meshpreview.model.node_map import NodeIndexMap

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

NODES_MARKER = b"$Nodes"
END_NODES_MARKER = b"$EndNodes"
ELEMENTS_MARKER = b"$Elements"
END_ELEMENTS_MARKER = b"$EndElements"

U32_SIZE = 4
GROUP_HEADER_SIZE = 3 * U32_SIZE
LINE_PADDING = frozenset(b" \t\r")


class BinaryReader:
    """Random-access reader over one binary MSH buffer."""

    def __init__(self, data: bytes, header: MeshFormatHeader) -> None:
        if header.endianness is Endianness.NONE:
            raise ValueError("Binary records need a header with a byte order.")
        self.data = data
        self.header = header
        prefix = header.endianness.struct_prefix
        self.u32 = np.dtype(prefix + "u4")
        self.node_dtype = np.dtype([
            ("id", prefix + "u4"),
            ("xyz", prefix + f"f{header.float_byte_width}", (3,)),
        ])

    @property
    def node_record_size(self) -> int:
        return U32_SIZE + 3 * self.header.float_byte_width

    def require(self, offset: int, size: int, what: str) -> None:
        if offset + size > len(self.data):
            raise TruncatedBinaryDataError(
                f"Reading {what} needs {size} bytes but the buffer ends at byte {len(self.data)}.",
                offset=offset,
            )

    def _is_marker_at(self, marker: bytes, offset: int) -> bool:
        after = offset + len(marker)
        return self.data.startswith(marker, offset) and (
            after == len(self.data) or self.data[after] in WHITESPACE
        )

    def find_marker(self, marker: bytes, start: int = 0) -> int:
        """
        Search for ``marker`` from ``start`` and return the offset of the first
        data byte after it and its trailing whitespace.

        Raises:
            SectionMissingError: If the marker does not occur.
        """
        offset = self.data.find(marker, start)
        while offset >= 0 and not self._is_marker_at(marker, offset):
            offset = self.data.find(marker, offset + 1)
        if offset < 0:
            raise SectionMissingError(f"Did not find {marker.decode()} in msh file!", offset=start)
        return skip_whitespace(self.data, offset + len(marker))

    def expect_marker(self, marker: bytes, offset: int) -> int:
        """Require ``marker`` right after optional whitespace at ``offset``."""
        pos = skip_whitespace(self.data, offset)
        if not self._is_marker_at(marker, pos):
            raise SectionSyntaxError(
                f"Expected {marker.decode()} after the binary records.",
                offset=pos,
                excerpt=self.data[pos:pos + 40],
            )
        return pos + len(marker)

    def read_count(self, offset: int) -> tuple[int, int]:
        """
        Read a record count written as ASCII digits.

        Leading whitespace is skipped. After the digits, blanks and at most one
        line break are consumed; binary data starts right after that.

        Returns:
            The count and the offset of the next byte.
        """
        data = self.data
        pos = skip_whitespace(data, offset)
        digits_start = pos
        while pos < len(data) and 0x30 <= data[pos] <= 0x39:
            pos += 1

        if pos == digits_start:
            if pos >= len(data):
                raise TruncatedBinaryDataError("Buffer ends before the record count.", offset=pos)
            raise SectionSyntaxError(
                "Expected a decimal record count.", offset=pos, excerpt=data[pos:pos + 40]
            )
        value = int(data[digits_start:pos])

        while pos < len(data) and data[pos] in LINE_PADDING:
            pos += 1
        if pos < len(data) and data[pos] == 0x0A:
            pos += 1
        return value, pos

    def read_u32s(self, offset: int, count: int, what: str) -> npt.NDArray[np.uint32]:
        self.require(offset, count * U32_SIZE, what)
        if count == 0:
            return np.empty(0, dtype=self.u32)
        return np.frombuffer(self.data, dtype=self.u32, count=count, offset=offset)

    def read_nodes(self, offset: int, count: int) -> np.ndarray:
        """Read ``count`` packed node records as a structured array."""
        self.require(offset, count * self.node_record_size, f"{count} node records")
        if count == 0:
            return np.empty(0, dtype=self.node_dtype)
        return np.frombuffer(self.data, dtype=self.node_dtype, count=count, offset=offset)

    def read_element_group(self, offset: int) -> tuple[int, npt.NDArray[np.uint32], int]:
        """
        Read one element group.

        Returns:
            The element type code, a (count, nodes_per_element) array of node ids
            and the offset after the group.
        """
        type_code, count, num_tags = self.read_u32s(offset, 3, "an element group header").tolist()
        n_refs = nodes_per_element(type_code, offset=offset)
        if count == 0:
            raise SectionSyntaxError(f"Element group of type {type_code} declares no elements.", offset=offset)

        width = 1 + num_tags + n_refs
        body = offset + GROUP_HEADER_SIZE
        records = self.read_u32s(body, count * width, f"{count} elements of type {type_code}")
        node_ids = records.reshape(count, width)[:, 1 + num_tags:]
        return type_code, node_ids, body + count * width * U32_SIZE


def parse_binary_body(
    data: bytes,
    header: MeshFormatHeader,
    start: int,
    node_map: NodeIndexMap,
    assembler: GeometryAssembler,
    triangles: TriangleCollector,
) -> tuple[int, int]:
    """
    Read nodes and elements of a binary file, searching from ``start``.

    Returns:
        The number of nodes and the number of elements read.
    """
    reader = BinaryReader(data, header)

    # First the nodes, every element refers to them
    offset = reader.find_marker(NODES_MARKER, start)
    n_nodes, offset = reader.read_count(offset)
    logger.debug(f"Preparing to read {n_nodes} nodes from byte {offset}")

    records = reader.read_nodes(offset, n_nodes)
    node_map.add_many(records["id"].tolist(), offset=offset)
    node_map.freeze()
    assembler.add_vertices(records["xyz"])
    offset = reader.expect_marker(END_NODES_MARKER, offset + n_nodes * reader.node_record_size)

    offset = reader.find_marker(ELEMENTS_MARKER, offset)
    n_elements, offset = reader.read_count(offset)
    logger.debug(f"Preparing to read {n_elements} elements from byte {offset}")

    read_so_far = 0
    while read_so_far < n_elements:
        group_offset = offset
        type_code, node_ids, offset = reader.read_element_group(offset)
        if read_so_far + len(node_ids) > n_elements:
            raise SectionSyntaxError(
                f"Element groups hold more than the declared {n_elements} elements.", offset=group_offset
            )
        triangles.add_block(type_code, node_ids, offset=group_offset)
        read_so_far += len(node_ids)

    reader.expect_marker(END_ELEMENTS_MARKER, offset)
    return n_nodes, n_elements
