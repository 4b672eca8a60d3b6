"""
meshpreview
===========
Loads GMSH MSH 2.2 meshes (ASCII or binary) into flat triangle geometry for
previewing.

    >>> from meshpreview import load
    >>> geometry = load("assets/square.msh")
    >>> geometry.vertices, geometry.indices
"""
from meshpreview.model.errors import MshError, MshErrorKind
from meshpreview.model.geometry import ParsedGeometry
from meshpreview.model.msh_io import load, parse

__all__ = ["MshError", "MshErrorKind", "ParsedGeometry", "load", "parse"]
