"""
#WHERE
    Imported by session.py, M5 (colour overrides) and test_scene_assembler.py.

#WHAT
    Scene Assembler Module (Module 3) — applies descriptor transforms to
    loaded asset roots, marks meshes as shadow casters/receivers, fixes up
    secondary UVs, normalises oversized/off-centre models from their
    bounding box and applies ordered material rules.

#INPUT
    Loaded Group from M2, AssetDescriptor from M1, scene root.

#OUTPUT
    Attached, configured scene graph nodes.
"""

from .assembler import SceneAssembler, compute_bounds, normalization_for
from .materials import apply_material_rules, apply_override, set_base_color

__all__ = [
    "SceneAssembler", "compute_bounds", "normalization_for",
    "apply_material_rules", "apply_override", "set_base_color",
]
