"""Asset parsing backends (Strategy pattern) — GLB/glTF via trimesh."""

import logging
import os
from typing import Protocol

import numpy as np
import trimesh

from showroom.modules.m1_scene_description.models import AssetDescriptor
from showroom.shared.scene_graph import Group, Material, Mesh

log = logging.getLogger(__name__)


class AssetBackend(Protocol):
    """Strategy interface: turn a descriptor's source into a scene graph root.

    Runs on a worker thread; raise on any failure.
    """

    def parse(self, descriptor: AssetDescriptor) -> Group: ...


def material_from_visual(visual) -> Material:
    """Read name/base colour/roughness/metalness from trimesh visuals.

    Unset glTF roughness/metallic factors default to 1.0.
    """
    source = getattr(visual, "material", None)
    name = getattr(source, "name", None) or ""

    rgba = getattr(source, "baseColorFactor", None)
    if rgba is None and source is not None:
        rgba = getattr(source, "main_color", None)
    if rgba is None:
        rgba = getattr(visual, "main_color", None)
    rgba = np.asarray(rgba if rgba is not None else [255, 255, 255, 255], dtype=np.float64)
    if rgba.max() > 1.0:
        rgba = rgba / 255.0
    if rgba.shape[0] == 3:
        rgba = np.append(rgba, 1.0)

    roughness = getattr(source, "roughnessFactor", None)
    metalness = getattr(source, "metallicFactor", None)
    alpha_mode = getattr(source, "alphaMode", None)

    return Material(
        name=name,
        color=(float(rgba[0]), float(rgba[1]), float(rgba[2])),
        roughness=1.0 if roughness is None else float(roughness),
        metalness=1.0 if metalness is None else float(metalness),
        opacity=float(rgba[3]),
        transparent=str(alpha_mode).upper() == "BLEND",
    )


class GltfBackend:
    """GLB/glTF parser built on trimesh.

    The node hierarchy is flattened: every geometry instance is baked into
    asset space and becomes one Mesh child of the returned Group.
    """

    def parse(self, descriptor: AssetDescriptor) -> Group:
        path = descriptor.source_path
        if not os.path.exists(path):
            raise FileNotFoundError(f"Model not found: {path}")

        loaded = trimesh.load(path, force="scene")
        root = Group(descriptor.name)

        for node_name in loaded.graph.nodes_geometry:
            transform, geometry_name = loaded.graph[node_name]
            geometry = loaded.geometry.get(geometry_name)
            if not isinstance(geometry, trimesh.Trimesh):
                continue
            baked = geometry.copy()
            baked.apply_transform(transform)

            mesh = Mesh(str(node_name), baked, material_from_visual(geometry.visual))
            uv = getattr(geometry.visual, "uv", None)
            if uv is not None:
                mesh.uv = np.asarray(uv)
            root.add(mesh)

        if not root.children:
            raise ValueError(f"No mesh geometry in {path}")
        log.debug("[M2] parsed %s: %d meshes", path, len(root.children))
        return root
