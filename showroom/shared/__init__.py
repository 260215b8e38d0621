"""
#WHERE
    Imported by every module (M1–M5), session.py, main.py and the tests.

#WHAT
    Shared scene graph types, colour parsing, compiled-in constants and
    frame writers.

#INPUT
    None (library code and constant registries).

#OUTPUT
    Node/Group/Mesh/Material, lights, PerspectiveCamera, Scene, Fog,
    Surface; parse_color/to_hex; open_video_writer/write_png.
"""

from .colors import parse_color, to_hex
from .scene_graph import (
    Color,
    DirectionalLight,
    Fog,
    Group,
    HemisphereLight,
    Light,
    Material,
    Mesh,
    Node,
    PerspectiveCamera,
    Scene,
    Surface,
    compose_matrix,
)
from .video_io import open_video_writer, write_png

__all__ = [
    "Color",
    "DirectionalLight",
    "Fog",
    "Group",
    "HemisphereLight",
    "Light",
    "Material",
    "Mesh",
    "Node",
    "PerspectiveCamera",
    "Scene",
    "Surface",
    "compose_matrix",
    "parse_color",
    "to_hex",
    "open_video_writer",
    "write_png",
]
