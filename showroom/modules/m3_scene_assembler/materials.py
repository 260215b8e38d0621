"""Material overrides keyed on case-insensitive material-name substrings."""

import logging
from typing import Iterable

from showroom.modules.m1_scene_description.models import MaterialOverride, MaterialRule
from showroom.shared.scene_graph import Color, Material, Node

log = logging.getLogger(__name__)


def apply_override(material: Material, override: MaterialOverride) -> None:
    if override.color is not None:
        material.color = tuple(float(c) for c in override.color)
    if override.roughness is not None:
        material.roughness = float(override.roughness)
    if override.metalness is not None:
        material.metalness = float(override.metalness)
    if override.opacity is not None:
        material.opacity = float(override.opacity)
        material.transparent = material.opacity < 1.0
    if override.visible is not None:
        material.visible = bool(override.visible)
    if override.env_map_intensity is not None:
        material.env_map_intensity = float(override.env_map_intensity)


def apply_material_rules(root: Node, rules: Iterable[MaterialRule]) -> int:
    """Apply rules in declared order (last write wins); returns meshes touched."""
    rules = list(rules)
    if not rules:
        return 0
    touched = 0
    for mesh in root.meshes():
        hit = False
        for rule in rules:
            if rule.matches(mesh.material_name):
                apply_override(mesh.material, rule.override)
                hit = True
        touched += hit
    return touched


def set_base_color(root: Node, pattern: str, color: Color) -> int:
    """Overwrite the base colour of every mesh whose material name contains *pattern*."""
    rule = MaterialRule(pattern, MaterialOverride(color=color))
    count = 0
    for mesh in root.meshes():
        if rule.matches(mesh.material_name):
            apply_override(mesh.material, rule.override)
            count += 1
    return count
