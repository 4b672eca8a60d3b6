"""
PyVista Hand-off
Converts ParsedGeometry into the PolyData the preview viewport renders.
"""
from __future__ import annotations

import logging

import numpy as np
import pyvista as pv

from meshpreview.model.geometry import ParsedGeometry

logger = logging.getLogger(__name__)

TRIANGLE_VERTEX_COUNT = 3


def vtk_faces(geometry: ParsedGeometry) -> np.ndarray:
    """
    Build the VTK cell array ``[3, a, b, c, 3, d, e, f, ...]``.
    """
    faces = geometry.faces.astype(np.int64)
    sizes = np.full((len(faces), 1), TRIANGLE_VERTEX_COUNT, dtype=np.int64)
    return np.hstack([sizes, faces]).ravel()


def to_polydata(geometry: ParsedGeometry, with_normals: bool = True) -> pv.PolyData:
    """
    Create a surface mesh from parsed geometry.

    Args:
        geometry: Result of ``meshpreview.parse`` / ``meshpreview.load``.
        with_normals: Attach area-weighted vertex normals as "Normals" point data.
    """
    points = np.ascontiguousarray(geometry.positions, dtype=np.float64)
    if geometry.num_triangles:
        mesh = pv.PolyData(points, vtk_faces(geometry))
    else:
        mesh = pv.PolyData(points)

    if with_normals:
        mesh.point_data["Normals"] = geometry.vertex_normals()

    logger.debug(f"Built PolyData with {mesh.n_points} points and {mesh.n_cells} cells")
    return mesh
