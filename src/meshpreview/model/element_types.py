"""
Element Type Table
==================
Maps every MSH 2.2 element type code to the number of node references an
element of that type carries. Both body parsers use it to consume exactly the
right number of node ids per element, even for types they discard.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from meshpreview.model.errors import UnknownElementTypeError

TRIANGLE = 2  # 3-node triangle, the only type turned into render geometry

ELEMENT_NODE_COUNTS: Mapping[int, int] = MappingProxyType({
    1: 2,     # 2-node line
    2: 3,     # 3-node triangle
    3: 4,     # 4-node quadrangle
    4: 4,     # 4-node tetrahedron
    5: 8,     # 8-node hexahedron
    6: 6,     # 6-node prism
    7: 5,     # 5-node pyramid
    8: 3,     # 3-node second order line
    9: 6,     # 6-node second order triangle
    10: 9,    # 9-node second order quadrangle
    11: 10,   # 10-node second order tetrahedron
    12: 27,   # 27-node second order hexahedron
    13: 18,   # 18-node second order prism
    14: 14,   # 14-node second order pyramid
    15: 1,    # 1-node point
    16: 8,    # 8-node second order quadrangle (serendipity)
    17: 20,   # 20-node second order hexahedron (serendipity)
    18: 15,   # 15-node second order prism (serendipity)
    19: 13,   # 13-node second order pyramid (serendipity)
    20: 9,    # 9-node third order incomplete triangle
    21: 10,   # 10-node third order triangle
    22: 12,   # 12-node fourth order incomplete triangle
    23: 15,   # 15-node fourth order triangle
    24: 15,   # 15-node fifth order incomplete triangle
    25: 21,   # 21-node fifth order complete triangle
    26: 4,    # 4-node third order edge
    27: 5,    # 5-node fourth order edge
    28: 6,    # 6-node fifth order edge
    29: 20,   # 20-node third order tetrahedron
    30: 35,   # 35-node fourth order tetrahedron
    31: 56,   # 56-node fifth order tetrahedron
    32: 22,   # 22-node fourth order incomplete tetrahedron
    33: 28,   # 28-node fifth order incomplete tetrahedron
    36: 16,   # 16-node third order quadrangle
    37: 25,   # 25-node fourth order quadrangle
    38: 36,   # 36-node fifth order quadrangle
    39: 12,   # 12-node third order incomplete quadrangle
    40: 16,   # 16-node fourth order incomplete quadrangle
    41: 20,   # 20-node fifth order incomplete quadrangle
    42: 28,   # 28-node sixth order triangle
    43: 36,   # 36-node seventh order triangle
    44: 45,   # 45-node eighth order triangle
    45: 55,   # 55-node ninth order triangle
    46: 66,   # 66-node tenth order triangle
    92: 64,   # 64-node third order hexahedron
    93: 125,  # 125-node fourth order hexahedron
})


def nodes_per_element(type_code: int, offset: int | None = None) -> int:
    """
    Return the number of node references carried by an element type.

    Args:
        type_code: MSH element type code.
        offset: Byte offset of the element record, reported on failure.

    Raises:
        UnknownElementTypeError: If the code is not in the table.
    """
    try:
        return ELEMENT_NODE_COUNTS[type_code]
    except KeyError:
        raise UnknownElementTypeError(
            f"Found an element of unknown type {type_code}.", offset=offset, excerpt=str(type_code)
        ) from None
