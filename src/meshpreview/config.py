"""
Configuration & Path Management
===============================
Central registry for file paths used outside the parsing engine.

Resolves the assets directory both in a source checkout and when the tool is
frozen with PyInstaller (sys._MEIPASS).

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    SAMPLE_MESH_PATH (str): Absolute path to the bundled two-triangle ASCII mesh.
"""
import sys
import os
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/meshpreview/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


ASSETS_PATH: str = get_resource_path("assets")
SAMPLE_MESH_PATH: str = os.path.join(ASSETS_PATH, "square.msh")
