"""
#WHERE
    Imported by session.py, main.py, M2–M5 and the tests.

#WHAT
    Scene Description Module (Module 1) — declarative, immutable description
    of a scene: camera, lights, floor/backdrop, fog, renderer and orbit
    settings, asset descriptors with transforms and material rules, and the
    readiness gate / lift variant of each profile.

#INPUT
    Profile name and assets directory.

#OUTPUT
    SceneDescription dataclass instance.
"""

from .models import (
    AssetDescriptor,
    CameraSpec,
    ControlsSpec,
    FogSpec,
    GeometryKind,
    GeometrySpec,
    LiftMotion,
    LightKind,
    LightSpec,
    MaterialOverride,
    MaterialRule,
    Normalization,
    ReadyGate,
    RendererSettings,
    SceneDescription,
    Transform,
)
from .profiles import (
    PROFILES,
    get_profile,
    showroom_animated_profile,
    showroom_profile,
    workshop_profile,
)

__all__ = [
    "AssetDescriptor", "CameraSpec", "ControlsSpec", "FogSpec",
    "GeometryKind", "GeometrySpec", "LiftMotion", "LightKind", "LightSpec",
    "MaterialOverride", "MaterialRule", "Normalization", "ReadyGate",
    "RendererSettings", "SceneDescription", "Transform",
    "PROFILES", "get_profile", "showroom_profile", "showroom_animated_profile",
    "workshop_profile",
]
