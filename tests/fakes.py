"""Test doubles shared by the showroom tests."""

import time
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import trimesh

from showroom.modules.m1_scene_description.models import AssetDescriptor
from showroom.shared.scene_graph import Group, Material, Mesh


def box_mesh(name: str, material_name: str = "", extents=(1.0, 1.0, 1.0),
             center=(0.0, 0.0, 0.0), color=(0.5, 0.5, 0.5)) -> Mesh:
    geometry = trimesh.creation.box(extents=extents)
    geometry.apply_translation(center)
    return Mesh(name, geometry, Material(name=material_name, color=color))


def car_group(name: str = "car") -> Group:
    group = Group(name)
    group.add(box_mesh("Body", "CarPaint_Body", extents=(4.0, 1.2, 2.0), center=(0.0, 0.6, 0.0)))
    group.add(box_mesh("Hood", "carpaint_hood", extents=(1.0, 0.1, 1.8), center=(1.5, 1.25, 0.0)))
    group.add(box_mesh("Glass_Front", "Glass_Front", extents=(0.8, 0.5, 1.6), center=(0.4, 1.45, 0.0)))
    group.add(box_mesh("Tyre", "Rubber", extents=(0.7, 0.7, 0.3), center=(-1.3, 0.35, 1.0)))
    return group


def lift_group(name: str = "lift") -> Group:
    group = Group(name)
    group.add(box_mesh("Platform", "Steel", extents=(5.0, 0.2, 2.5), center=(0.0, 0.1, 0.0)))
    return group


class StubBackend:
    """AssetBackend returning prebuilt groups, raising, or sleeping first.

    ``plan`` maps descriptor name to a factory, an exception instance, or a
    (delay_seconds, factory) pair.
    """

    def __init__(self, plan: Dict[str, object]):
        self.plan = plan
        self.calls: List[str] = []

    def parse(self, descriptor: AssetDescriptor) -> Group:
        self.calls.append(descriptor.name)
        entry = self.plan[descriptor.name]
        if isinstance(entry, tuple):
            delay, entry = entry
            time.sleep(delay)
        if isinstance(entry, BaseException):
            raise entry
        return entry(descriptor.name)


class FakeRenderer:
    """Renderer that records what it saw instead of drawing."""

    def __init__(self, setup_ok: bool = True):
        self.setup_ok = setup_ok
        self.width = 0
        self.height = 0
        self.frames = 0
        self.mesh_counts: List[int] = []
        self.camera_positions: List[Tuple[float, ...]] = []
        self.closed = False
        self.on_render: Optional[Callable] = None

    def setup(self) -> bool:
        return self.setup_ok

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height

    def render(self, scene, camera) -> np.ndarray:
        self.frames += 1
        self.mesh_counts.append(len(scene.meshes()))
        self.camera_positions.append(tuple(camera.position))
        if self.on_render is not None:
            self.on_render(scene, camera)
        return np.zeros((4, 4, 3), dtype=np.uint8)

    def close(self) -> None:
        self.closed = True
