"""
Parsed Geometry
===============
The output of a parse and the two helpers that build it.

Classes:
    ParsedGeometry: Flat vertex and triangle index arrays handed to the renderer.
    TriangleCollector: Keeps triangle elements, counts everything it discards.
    GeometryAssembler: Concatenates collected chunks into a ParsedGeometry.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging
from typing import Iterable, Optional, TYPE_CHECKING

import numpy as np

from meshpreview.model.element_types import TRIANGLE
from meshpreview.model.header import MeshFormatHeader
from meshpreview.model.node_map import NodeIndexMap

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ParsedGeometry:
    """
    Triangle mesh ready for rendering.

    Attributes:
        vertices: Flat float64 array, three coordinates per vertex, in the order
            the nodes appear in the file.
        indices: Flat uint32 array, three vertex indices per triangle.
        skipped_elements: Number of discarded elements per element type code.
        header: The file's MeshFormat block, if the geometry came from a file.
    """
    vertices: npt.NDArray[np.float64]
    indices: npt.NDArray[np.uint32]
    skipped_elements: dict[int, int] = field(default_factory=dict)
    header: Optional[MeshFormatHeader] = None

    @property
    def num_vertices(self) -> int:
        return self.vertices.size // 3

    @property
    def num_triangles(self) -> int:
        return self.indices.size // 3

    @property
    def positions(self) -> npt.NDArray[np.float64]:
        """(N, 3) view of the vertex coordinates."""
        return self.vertices.reshape(-1, 3)

    @property
    def faces(self) -> npt.NDArray[np.uint32]:
        """(T, 3) view of the triangle indices."""
        return self.indices.reshape(-1, 3)

    def vertex_normals(self) -> npt.NDArray[np.float64]:
        """
        Area-weighted vertex normals, shape (N, 3).

        Unnormalised face normals (whose length is twice the triangle area) are
        summed onto their three corners and the sums are normalised. Vertices
        that belong to no triangle keep a zero normal.
        """
        points = self.positions
        normals = np.zeros_like(points)
        if self.num_triangles == 0:
            return normals

        faces = self.faces.astype(np.intp)
        a, b, c = points[faces[:, 0]], points[faces[:, 1]], points[faces[:, 2]]
        face_normals = np.cross(b - a, c - a)
        for corner in range(3):
            np.add.at(normals, faces[:, corner], face_normals)

        lengths = np.linalg.norm(normals, axis=1)
        mask = lengths > 0.0
        normals[mask] /= lengths[mask, np.newaxis]
        return normals


class TriangleCollector:
    """
    Element filter: turns triangle node ids into output indices through the
    node map and only counts every other element type.
    """
    def __init__(self, node_map: NodeIndexMap) -> None:
        self.node_map = node_map
        self.chunks: list[npt.NDArray[np.uint32]] = []
        self.skipped: Counter[int] = Counter()

    def add(self, type_code: int, node_ids: Iterable[int], offset: int | None = None) -> None:
        """Offer a single element."""
        if type_code != TRIANGLE:
            self.skipped[type_code] += 1
            return
        self.chunks.append(self.node_map.lookup_many(node_ids, offset))

    def add_block(
        self,
        type_code: int,
        node_ids: npt.NDArray[np.integer],
        offset: int | None = None,
    ) -> None:
        """Offer a (count, nodes_per_element) block of elements of one type."""
        if type_code != TRIANGLE:
            self.skipped[type_code] += len(node_ids)
            return
        self.chunks.append(self.node_map.lookup_many(node_ids, offset))

    @property
    def num_triangles(self) -> int:
        return sum(chunk.size for chunk in self.chunks) // 3


class GeometryAssembler:
    """Collects vertex coordinate chunks and hands out the final geometry."""

    def __init__(self) -> None:
        self.vertex_chunks: list[npt.NDArray[np.float64]] = []

    def add_vertices(self, coords: npt.NDArray[np.float64]) -> None:
        self.vertex_chunks.append(np.asarray(coords, dtype=np.float64).ravel())

    def assemble(
        self,
        triangles: TriangleCollector,
        header: Optional[MeshFormatHeader] = None,
    ) -> ParsedGeometry:
        vertices = _concat(self.vertex_chunks, np.float64)
        indices = _concat(triangles.chunks, np.uint32)
        if triangles.skipped:
            logger.debug(f"Skipped unsupported element types (type: count): {dict(triangles.skipped)}")
        return ParsedGeometry(
            vertices=vertices,
            indices=indices,
            skipped_elements=dict(triangles.skipped),
            header=header,
        )


def _concat(chunks: list[np.ndarray], dtype: type) -> np.ndarray:
    if not chunks:
        return np.empty(0, dtype=dtype)
    return np.concatenate(chunks).astype(dtype, copy=False)
