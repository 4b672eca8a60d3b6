"""Shared fixtures: in-memory MSH 2.2 files in both encodings."""

import struct
from itertools import groupby

import pytest


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_ascii_msh(nodes, elements, extra="", header="2.2 0 8"):
    """
    nodes:    [(id, x, y, z), ...]
    elements: [(id, type, [tags], [node ids]), ...]
    extra:    raw text appended after $EndElements
    """
    lines = ["$MeshFormat", header, "$EndMeshFormat", "$Nodes", str(len(nodes))]
    lines += [f"{nid} {x!r} {y!r} {z!r}" for nid, x, y, z in nodes]
    lines += ["$EndNodes", "$Elements", str(len(elements))]
    for eid, etype, tags, node_ids in elements:
        fields = [eid, etype, len(tags), *tags, *node_ids]
        lines.append(" ".join(str(f) for f in fields))
    lines.append("$EndElements")
    return ("\n".join(lines) + "\n" + extra).encode("ascii")


def binary_header(endian="<"):
    return b"$MeshFormat\n2.2 1 8\n" + struct.pack(endian + "i", 1) + b"\n$EndMeshFormat\n"


def binary_nodes(nodes, endian="<", declared=None):
    count = len(nodes) if declared is None else declared
    body = b"".join(struct.pack(endian + "I3d", nid, x, y, z) for nid, x, y, z in nodes)
    return b"$Nodes\n%d\n" % count + body + b"\n$EndNodes\n"


def binary_elements(elements, endian="<", declared=None):
    count = len(elements) if declared is None else declared
    body = b""
    # Consecutive elements of the same type and tag count share one group
    for (etype, ntags), group in groupby(elements, key=lambda e: (e[1], len(e[2]))):
        group = list(group)
        body += struct.pack(endian + "3I", etype, len(group), ntags)
        for eid, _, tags, node_ids in group:
            fields = [eid, *tags, *node_ids]
            body += struct.pack(endian + f"{len(fields)}I", *fields)
    return b"$Elements\n%d\n" % count + body + b"\n$EndElements\n"


def make_binary_msh(nodes, elements, endian="<"):
    return binary_header(endian) + binary_nodes(nodes, endian) + binary_elements(elements, endian)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def ascii_msh():
    return make_ascii_msh


@pytest.fixture
def binary_msh():
    return make_binary_msh


@pytest.fixture
def binary_parts():
    """Section-level builders for hand-assembling broken binary files."""
    return {
        "header": binary_header,
        "nodes": binary_nodes,
        "elements": binary_elements,
    }


@pytest.fixture
def sparse_nodes():
    """Five nodes with unsorted, non-contiguous ids; 10 and 13 are whitespace bytes."""
    return [
        (10, 1.0, 0.0, 0.0),
        (40, 0.0, 0.0, 0.0),
        (13, 1.0, 1.0, 0.0),
        (7, 0.0, 1.0, 0.0),
        (32, 0.5, 0.5, 1.25),
    ]


@pytest.fixture
def mixed_elements():
    """Two triangles between a point, lines and a tetrahedron."""
    return [
        (1, 15, [0, 1], [40]),
        (2, 1, [1, 1], [40, 10]),
        (3, 1, [1, 1], [10, 13]),
        (4, 2, [2, 1], [40, 10, 13]),
        (5, 2, [2, 1], [40, 13, 7]),
        (6, 4, [3, 1], [40, 10, 13, 32]),
        (7, 2, [], [7, 13, 32]),
    ]
