"""
#WHERE
    Used by profiles.py, M2 (descriptors), M3 (transforms, material rules,
    normalisation), M4 (renderer/controls settings), M5 (palette) and
    session.py.

#WHAT
    Frozen declarative scene data: transforms, material rules, asset
    descriptors, camera/light/geometry/fog specs, renderer and orbit
    settings, lift motion variants and the SceneDescription container.

#INPUT
    Compiled-in constants from shared/constants.py.

#OUTPUT
    Immutable dataclass instances — never mutated after startup.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from showroom.shared.scene_graph import Color

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class Transform:
    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    @classmethod
    def place(cls, x: float = 0.0, y: float = 0.0, z: float = 0.0,
              yaw: float = 0.0, scale: float = 1.0) -> "Transform":
        return cls(position=(x, y, z), rotation=(0.0, yaw, 0.0),
                   scale=(scale, scale, scale))


@dataclass(frozen=True, slots=True)
class MaterialOverride:
    """Fields left as None are not touched."""
    color: Optional[Color] = None
    roughness: Optional[float] = None
    metalness: Optional[float] = None
    opacity: Optional[float] = None
    visible: Optional[bool] = None
    env_map_intensity: Optional[float] = None


@dataclass(frozen=True, slots=True)
class MaterialRule:
    """Case-insensitive substring match against a material name.

    Asset authors name materials after their role ("CarPaint_Body",
    "Glass_Front", ...); an empty pattern matches every mesh.
    """
    pattern: str
    override: MaterialOverride

    def matches(self, material_name: str) -> bool:
        return self.pattern.lower() in (material_name or "").lower()

    @classmethod
    def glass(cls, pattern: str = "glass") -> "MaterialRule":
        return cls(pattern, MaterialOverride(
            color=(0.0, 0.0, 0.0), opacity=1.0, roughness=0.05, metalness=0.95,
        ))


@dataclass(frozen=True, slots=True)
class Normalization:
    """Recentre on the origin baseline and shrink models larger than max_size."""
    max_size: float


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    name: str
    source_path: str
    transform: Transform = Transform()
    material_rules: Tuple[MaterialRule, ...] = ()
    normalization: Optional[Normalization] = None
    rides_lift: bool = False
    missing_hint: Optional[str] = None


# ── environment ──────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class CameraSpec:
    fov: float = 45.0
    near: float = 0.1
    far: float = 100.0
    position: Vec3 = (8.0, 5.0, 10.0)
    target: Vec3 = (0.0, 0.0, 0.0)


class LightKind(Enum):
    HEMISPHERE = auto()
    DIRECTIONAL = auto()


@dataclass(frozen=True, slots=True)
class LightSpec:
    kind: LightKind
    name: str
    color: Color = (1.0, 1.0, 1.0)
    intensity: float = 1.0
    position: Vec3 = (0.0, 20.0, 0.0)
    ground_color: Color = (0.27, 0.27, 0.27)
    cast_shadow: bool = False
    shadow_map_size: int = 512


class GeometryKind(Enum):
    PLANE = auto()
    BOX = auto()


@dataclass(frozen=True, slots=True)
class GeometrySpec:
    """Static environment geometry (floor plane, backdrop wall)."""
    name: str
    kind: GeometryKind
    size: Tuple[float, ...]
    transform: Transform = Transform()
    color: Color = (0.5, 0.5, 0.5)
    roughness: float = 1.0
    metalness: float = 0.0
    receive_shadow: bool = True


@dataclass(frozen=True, slots=True)
class FogSpec:
    color: Color
    near: float = 10.0
    far: float = 50.0


@dataclass(frozen=True, slots=True)
class RendererSettings:
    antialias: bool = True
    shadows: bool = True
    tone_mapping: str = "aces"   # "aces" | "none"
    exposure: float = 1.2


@dataclass(frozen=True, slots=True)
class ControlsSpec:
    damping_factor: float = 0.05
    min_distance: float = 5.0
    max_distance: float = 20.0
    max_polar_angle: float = math.pi / 2 - 0.05   # keeps the camera above the floor


class ReadyGate(Enum):
    ALL_SETTLED = auto()   # first frame only after every asset settled
    EAGER = auto()         # render immediately, attach assets as they arrive


@dataclass(frozen=True, slots=True)
class LiftMotion:
    """Lift height variant: fixed (static) or animated (slow up/down cycle)."""
    low: float = 0.0
    amplitude: float = 0.0
    period: float = 0.0

    @classmethod
    def fixed(cls, height: float) -> "LiftMotion":
        return cls(low=height)

    @classmethod
    def animated(cls, amplitude: float, period: float, low: float = 0.0) -> "LiftMotion":
        if period <= 0:
            raise ValueError("Animated lift needs a positive period")
        return cls(low=low, amplitude=amplitude, period=period)

    @property
    def is_animated(self) -> bool:
        return self.period > 0 and self.amplitude != 0

    def height_at(self, t: float) -> float:
        if not self.is_animated:
            return self.low
        phase = 2.0 * math.pi * t / self.period
        return self.low + self.amplitude * (1.0 - math.cos(phase)) / 2.0

    def offset_at(self, t: float) -> float:
        """Height change relative to t=0, where descriptors were placed."""
        return self.height_at(t) - self.height_at(0.0)


@dataclass(frozen=True, slots=True)
class SceneDescription:
    name: str
    camera: CameraSpec
    lights: Tuple[LightSpec, ...]
    geometry: Tuple[GeometrySpec, ...]
    assets: Tuple[AssetDescriptor, ...]
    background: Optional[Color] = None
    fog: Optional[FogSpec] = None
    renderer: RendererSettings = RendererSettings()
    controls: ControlsSpec = ControlsSpec()
    ready_gate: ReadyGate = ReadyGate.ALL_SETTLED
    lift: LiftMotion = LiftMotion()
    paint_target: Optional[str] = None
    palette: Tuple[Color, ...] = ()

    def asset(self, name: str) -> Optional[AssetDescriptor]:
        for descriptor in self.assets:
            if descriptor.name == name:
                return descriptor
        return None
