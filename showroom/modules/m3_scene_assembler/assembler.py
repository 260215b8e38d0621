"""Scene assembly: place loaded assets, normalise oversized models, apply materials."""

import logging
from typing import Dict, Optional, Tuple

import numpy as np
import trimesh

from showroom.modules.m1_scene_description.models import AssetDescriptor
from showroom.shared.scene_graph import Group, Node

from .materials import apply_material_rules

log = logging.getLogger(__name__)

Bounds = Tuple[np.ndarray, np.ndarray]


def compute_bounds(node: Node, relative_to: Optional[Node] = None) -> Bounds:
    """Axis-aligned (min, max) of every mesh under *node*.

    Coordinates are expressed in *relative_to*'s local frame (world space
    when omitted).
    """
    reference = np.eye(4)
    if relative_to is not None:
        reference = np.linalg.inv(relative_to.world_matrix())

    points = []
    for mesh in node.meshes():
        if len(mesh.geometry.vertices) == 0:
            continue
        matrix = reference @ mesh.world_matrix()
        points.append(trimesh.transform_points(mesh.geometry.vertices, matrix))
    if not points:
        raise ValueError(f"'{node.name}' has no geometry to bound")

    stacked = np.vstack(points)
    return stacked.min(axis=0), stacked.max(axis=0)


def normalization_for(bounds: Bounds, max_size: float) -> Tuple[float, np.ndarray]:
    """Uniform scale and offset that put the box centre (x, z) on the origin
    and its bottom on y=0, shrinking it when the largest side exceeds max_size.
    """
    low, high = bounds
    size = high - low
    largest = float(size.max())
    scale = max_size / largest if largest > max_size else 1.0
    center = (low + high) / 2.0
    offset = -np.array([center[0], low[1], center[2]]) * scale
    return scale, offset


class SceneAssembler:
    """Attaches loaded asset roots to the scene graph, once per descriptor."""

    def __init__(self):
        self._attached: Dict[str, Node] = {}

    def is_attached(self, name: str) -> bool:
        return name in self._attached

    def node(self, name: str) -> Optional[Node]:
        return self._attached.get(name)

    @property
    def attached(self) -> Dict[str, Node]:
        return dict(self._attached)

    def attach(self, root: Node, descriptor: AssetDescriptor, parent: Node) -> Node:
        if descriptor.name in self._attached:
            raise ValueError(f"Asset '{descriptor.name}' is already attached")

        t = descriptor.transform
        root.set_transform(t.position, t.rotation, t.scale)

        if descriptor.normalization is not None:
            self._normalize(root, descriptor.normalization.max_size)

        for mesh in root.meshes():
            mesh.cast_shadow = True
            mesh.receive_shadow = True
            if mesh.uv is not None and mesh.uv2 is None:
                mesh.uv2 = mesh.uv

        touched = apply_material_rules(root, descriptor.material_rules)
        parent.add(root)
        self._attached[descriptor.name] = root
        log.info("[M3] attached '%s' (%d meshes, %d material overrides)",
                 descriptor.name, len(root.meshes()), touched)
        return root

    @staticmethod
    def _normalize(root: Node, max_size: float) -> Group:
        """Insert a pivot between *root* and its content; root keeps its own transform."""
        bounds = compute_bounds(root, relative_to=root)
        scale, offset = normalization_for(bounds, max_size)

        pivot = Group(f"{root.name}:pivot", position=offset, scale=(scale, scale, scale))
        for child in list(root.children):
            pivot.add(child)
        root.add(pivot)
        log.debug("[M3] normalised '%s': scale=%.3f offset=%s",
                  root.name, scale, np.round(offset, 3).tolist())
        return pivot
