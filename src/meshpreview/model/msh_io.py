"""
MSH Loader
==========
Entry points that turn a GMSH MSH 2.2 file (ASCII or binary) into a
``ParsedGeometry``.

Flow:
    buffer -> header -> ASCII sections -> ASCII nodes/elements
                     \\-> binary nodes/elements
    nodes feed the node map, elements go through the triangle filter,
    the assembler produces the result.

Each call owns its own node map and collectors, so independent calls may run
concurrently on different buffers.
"""
from __future__ import annotations

import logging
import os
from typing import Union

from meshpreview.model.ascii_body import parse_ascii_elements, parse_ascii_nodes
from meshpreview.model.binary_body import parse_binary_body
from meshpreview.model.errors import SectionSyntaxError
from meshpreview.model.geometry import GeometryAssembler, ParsedGeometry, TriangleCollector
from meshpreview.model.header import parse_header
from meshpreview.model.node_map import NodeIndexMap
from meshpreview.model.sections import find_section, split_sections

logger = logging.getLogger(__name__)

MshData = Union[bytes, bytearray, memoryview, str]


def _ensure_bytes(data: MshData) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def parse(data: MshData) -> ParsedGeometry:
    """
    Parse a complete MSH 2.2 file held in memory.

    Args:
        data: The whole file. A ``str`` is encoded as UTF-8 first.

    Returns:
        The vertices of every node and the indices of every 3-node triangle.

    Raises:
        MshError: Any subclass, when the file is malformed or unsupported.
    """
    buffer = _ensure_bytes(data)
    logger.debug(f"Starting parsing of {len(buffer)} bytes")

    header, rest = parse_header(buffer)
    logger.info(f"MSH {header.version} file, {'ASCII' if header.is_ascii else 'binary'} encoding")

    node_map = NodeIndexMap()
    assembler = GeometryAssembler()
    triangles = TriangleCollector(node_map)

    if header.is_ascii:
        n_nodes, n_elements = _parse_ascii(buffer, rest, node_map, assembler, triangles)
    else:
        n_nodes, n_elements = parse_binary_body(buffer, header, rest, node_map, assembler, triangles)

    geometry = assembler.assemble(triangles, header=header)
    logger.info(
        f"Loaded geometry with {geometry.num_triangles} triangles "
        f"({n_elements} elements) and {n_nodes} points"
    )
    return geometry


def _parse_ascii(
    buffer: bytes,
    rest: int,
    node_map: NodeIndexMap,
    assembler: GeometryAssembler,
    triangles: TriangleCollector,
) -> tuple[int, int]:
    # latin-1 maps each byte to one character, so text offsets stay byte offsets
    sections = split_sections(buffer[rest:].decode("latin-1"), base_offset=rest)
    logger.debug(f"Found sections: {[section.name for section in sections]}")

    for section in sections:
        if section.name == "MeshFormat":
            raise SectionSyntaxError("Found a second $MeshFormat block.", offset=section.offset)

    nodes = find_section(sections, "Nodes")
    elements = find_section(sections, "Elements")

    n_nodes = parse_ascii_nodes(nodes, node_map, assembler)
    n_elements = parse_ascii_elements(elements, triangles)
    return n_nodes, n_elements


def load(path: Union[str, os.PathLike]) -> ParsedGeometry:
    """Read a whole file from disk and parse it."""
    logger.info(f"Loading mesh from: {path}")
    with open(path, "rb") as f:
        data = f.read()
    return parse(data)
