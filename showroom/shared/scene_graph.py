"""
#WHERE
    Used by every module: M2 (loaded assets become Group/Mesh trees),
    M3 (transforms, materials, bounds), M4 (renderer walks the graph),
    M5 (colour overrides) and session.py (static scene construction).

#WHAT
    Minimal scene graph: transform nodes, meshes with PBR-ish materials,
    lights, a perspective camera, linear fog and the scene root.
    Coordinates are Y-up, rotations are intrinsic XYZ Euler angles in radians.

#INPUT
    trimesh geometry, colours as RGB floats in [0, 1].

#OUTPUT
    Node trees with local/world 4x4 matrices (numpy).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from trimesh import transformations as tf

Color = Tuple[float, float, float]


def _vec3(values: Optional[Sequence[float]], default: float) -> np.ndarray:
    if values is None:
        return np.full(3, default, dtype=np.float64)
    return np.array(values, dtype=np.float64).reshape(3)


def compose_matrix(position: Sequence[float], rotation: Sequence[float],
                   scale: Sequence[float]) -> np.ndarray:
    """T · R · S, with R built from intrinsic XYZ Euler angles."""
    translate = tf.translation_matrix(position)
    rotate = tf.euler_matrix(rotation[0], rotation[1], rotation[2], "rxyz")
    matrix = translate @ rotate
    matrix[:3, :3] = matrix[:3, :3] * np.asarray(scale, dtype=np.float64)
    return matrix


@dataclass(slots=True)
class Material:
    name: str = ""
    color: Color = (1.0, 1.0, 1.0)
    roughness: float = 1.0
    metalness: float = 0.0
    opacity: float = 1.0
    transparent: bool = False
    visible: bool = True
    env_map_intensity: float = 1.0

    def copy(self) -> "Material":
        return replace(self)

    def rgba(self) -> List[float]:
        return [self.color[0], self.color[1], self.color[2], self.opacity]


class Node:
    """Transform node. Children inherit the parent's world matrix."""

    is_mesh = False

    def __init__(self, name: str = "", position: Sequence[float] = None,
                 rotation: Sequence[float] = None, scale: Sequence[float] = None):
        self.name = name
        self.position = _vec3(position, 0.0)
        self.rotation = _vec3(rotation, 0.0)
        self.scale = _vec3(scale, 1.0)
        self.parent: Optional[Node] = None
        self.children: List[Node] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, children={len(self.children)})"

    # ── hierarchy ────────────────────────────────────────────────

    def add(self, child: "Node") -> "Node":
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove(self, child: "Node") -> None:
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def traverse(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.traverse()

    def meshes(self) -> List["Mesh"]:
        return [node for node in self.traverse() if node.is_mesh]

    def find(self, name: str) -> Optional["Node"]:
        for node in self.traverse():
            if node.name == name:
                return node
        return None

    # ── transforms ───────────────────────────────────────────────

    def set_transform(self, position: Sequence[float] = None,
                      rotation: Sequence[float] = None,
                      scale: Sequence[float] = None) -> None:
        if position is not None:
            self.position = _vec3(position, 0.0)
        if rotation is not None:
            self.rotation = _vec3(rotation, 0.0)
        if scale is not None:
            self.scale = _vec3(scale, 1.0)

    def local_matrix(self) -> np.ndarray:
        return compose_matrix(self.position, self.rotation, self.scale)

    def world_matrix(self) -> np.ndarray:
        matrix = self.local_matrix()
        node = self.parent
        while node is not None:
            matrix = node.local_matrix() @ matrix
            node = node.parent
        return matrix


class Group(Node):
    pass


class Mesh(Node):
    is_mesh = True

    def __init__(self, name: str, geometry: trimesh.Trimesh,
                 material: Optional[Material] = None, **kwargs):
        super().__init__(name, **kwargs)
        self.geometry = geometry
        self.material = material or Material()
        self.cast_shadow = False
        self.receive_shadow = False
        self.uv: Optional[np.ndarray] = None
        self.uv2: Optional[np.ndarray] = None

    @property
    def material_name(self) -> str:
        return self.material.name or self.name


# ── lights ───────────────────────────────────────────────────────────────

class Light(Node):
    def __init__(self, name: str = "", color: Color = (1.0, 1.0, 1.0),
                 intensity: float = 1.0, **kwargs):
        super().__init__(name, **kwargs)
        self.color = color
        self.intensity = intensity


class HemisphereLight(Light):
    def __init__(self, name: str = "hemisphere", sky_color: Color = (1.0, 1.0, 1.0),
                 ground_color: Color = (0.27, 0.27, 0.27), intensity: float = 1.0,
                 **kwargs):
        super().__init__(name, color=sky_color, intensity=intensity, **kwargs)
        self.ground_color = ground_color


class DirectionalLight(Light):
    """Light shining from its position towards the origin."""

    def __init__(self, name: str = "directional", color: Color = (1.0, 1.0, 1.0),
                 intensity: float = 1.0, cast_shadow: bool = False,
                 shadow_map_size: int = 512, **kwargs):
        super().__init__(name, color=color, intensity=intensity, **kwargs)
        self.cast_shadow = cast_shadow
        self.shadow_map_size = shadow_map_size

    def direction(self) -> np.ndarray:
        """Unit vector from the origin towards the light."""
        pos = self.world_matrix()[:3, 3]
        norm = np.linalg.norm(pos)
        return pos / norm if norm > 0 else np.array([0.0, 1.0, 0.0])


# ── camera ───────────────────────────────────────────────────────────────

class PerspectiveCamera(Node):
    def __init__(self, fov: float = 50.0, aspect: float = 1.0,
                 near: float = 0.1, far: float = 2000.0, **kwargs):
        super().__init__(kwargs.pop("name", "camera"), **kwargs)
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.target = np.zeros(3)
        self.up = np.array([0.0, 1.0, 0.0])
        self.projection_matrix = np.eye(4)
        self.update_projection_matrix()

    def look_at(self, target: Sequence[float]) -> None:
        self.target = np.array(target, dtype=np.float64).reshape(3)

    def update_projection_matrix(self) -> None:
        """OpenGL-style projection from fov (vertical, degrees), aspect, near, far."""
        f = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        n, far = self.near, self.far
        self.projection_matrix = np.array([
            [f / self.aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (far + n) / (n - far), 2.0 * far * n / (n - far)],
            [0.0, 0.0, -1.0, 0.0],
        ])


# ── scene ────────────────────────────────────────────────────────────────

@dataclass(slots=True)
class Fog:
    """Linear fog between ``near`` and ``far`` camera distances."""
    color: Color
    near: float = 1.0
    far: float = 1000.0

    def factor(self, depth: np.ndarray) -> np.ndarray:
        span = max(self.far - self.near, 1e-6)
        return np.clip((depth - self.near) / span, 0.0, 1.0)


class Scene(Node):
    def __init__(self, name: str = "scene"):
        super().__init__(name)
        self.background: Optional[Color] = None
        self.fog: Optional[Fog] = None

    def lights(self) -> List[Light]:
        return [node for node in self.traverse() if isinstance(node, Light)]


@dataclass
class Surface:
    """Off-screen display surface the renderer draws into."""
    width: int = 1280
    height: int = 720
    pixel_ratio: float = 1.0
    status_text: Optional[str] = field(default=None)

    @property
    def aspect(self) -> float:
        return self.width / self.height if self.height else 1.0

    @property
    def buffer_size(self) -> Tuple[int, int]:
        """Drawing-buffer size in device pixels."""
        return (max(1, round(self.width * self.pixel_ratio)),
                max(1, round(self.height * self.pixel_ratio)))

    def set_size(self, width: int, height: int) -> None:
        self.width, self.height = int(width), int(height)
