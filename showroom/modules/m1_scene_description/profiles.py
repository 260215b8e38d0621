"""Built-in scene profiles and the profile registry."""

import logging
import os
from typing import Callable, Dict, Optional

from showroom.shared import constants as C
from showroom.shared.colors import parse_color

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

log = logging.getLogger(__name__)

_FLOOR_ROTATION = (-1.5707963267948966, 0.0, 0.0)   # plane lies on XZ


def _model(assets_dir: str, filename: str) -> str:
    return os.path.join(assets_dir, filename)


def workshop_profile(assets_dir: str = C.DEFAULT_ASSETS_DIR) -> SceneDescription:
    """Industrial workshop: grey fog, backdrop wall, car parked on the lift.

    The render loop only starts once both models have settled.
    """
    grey = parse_color(0xA0A0A0)
    lift = AssetDescriptor(
        name="lift",
        source_path=_model(assets_dir, C.LIFT_MODEL),
        transform=Transform.place(y=C.LIFT_BASE_Y, scale=C.LIFT_SCALE),
    )
    car = AssetDescriptor(
        name="car",
        source_path=_model(assets_dir, C.PORSCHE_MODEL),
        transform=Transform.place(y=C.CAR_BASE_Y, yaw=C.CAR_YAW, scale=C.CAR_SCALE),
        material_rules=(
            MaterialRule("", MaterialOverride(env_map_intensity=1.0)),
        ),
    )
    return SceneDescription(
        name="workshop",
        camera=CameraSpec(fov=45.0, near=0.1, far=100.0, position=(8.0, 5.0, 10.0)),
        lights=(
            LightSpec(LightKind.HEMISPHERE, "hemi", intensity=0.6,
                      position=(0.0, 20.0, 0.0), ground_color=parse_color(0x444444)),
            LightSpec(LightKind.DIRECTIONAL, "key", intensity=1.5,
                      position=(10.0, 20.0, 10.0), cast_shadow=True,
                      shadow_map_size=2048),
        ),
        geometry=(
            GeometrySpec("floor", GeometryKind.PLANE, (50.0, 50.0),
                         Transform(rotation=_FLOOR_ROTATION),
                         color=parse_color(0x666666), roughness=0.4, metalness=0.1),
            GeometrySpec("wall", GeometryKind.BOX, (50.0, 40.0, 1.0),
                         Transform(position=(0.0, 20.0, -15.0)),
                         color=parse_color(0x888888)),
        ),
        assets=(lift, car),
        background=grey,
        fog=FogSpec(grey, near=10.0, far=50.0),
        renderer=RendererSettings(exposure=1.2),
        controls=ControlsSpec(min_distance=5.0, max_distance=20.0),
        ready_gate=ReadyGate.ALL_SETTLED,
    )


def showroom_profile(assets_dir: str = C.DEFAULT_ASSETS_DIR,
                     lift: Optional[LiftMotion] = None) -> SceneDescription:
    """Dark showroom: Aventador on a raised lift, paint swappable from a palette.

    Rendering starts straight after static setup; models pop in as they load.
    """
    lift = lift or LiftMotion.fixed(C.FIXED_LIFT_HEIGHT)
    height = lift.height_at(0.0)
    dark = parse_color(0x333333)

    lift_asset = AssetDescriptor(
        name="lift",
        source_path=_model(assets_dir, C.LIFT_MODEL),
        transform=Transform.place(y=C.LIFT_BASE_Y + height, scale=C.LIFT_SCALE),
        rides_lift=True,
    )
    car = AssetDescriptor(
        name="car",
        source_path=_model(assets_dir, C.AVENTADOR_MODEL),
        transform=Transform.place(y=C.CAR_BASE_Y + height, yaw=C.CAR_YAW,
                                  scale=C.CAR_SCALE),
        material_rules=(
            MaterialRule("", MaterialOverride(env_map_intensity=2.0,
                                              roughness=0.2, metalness=0.8)),
            MaterialRule.glass(),
        ),
        normalization=Normalization(C.MAX_MODEL_SIZE),
        rides_lift=True,
        missing_hint=f"Check that {C.AVENTADOR_MODEL} is present in {assets_dir}",
    )
    return SceneDescription(
        name="showroom",
        camera=CameraSpec(fov=40.0, near=0.1, far=100.0,
                          position=(10.0, 5.0, 12.0), target=(0.0, 2.0, 0.0)),
        lights=(
            LightSpec(LightKind.HEMISPHERE, "hemi", intensity=0.6,
                      position=(0.0, 20.0, 0.0), ground_color=parse_color(0x222222)),
            LightSpec(LightKind.DIRECTIONAL, "key", intensity=2.5,
                      position=(5.0, 10.0, 8.0), cast_shadow=True,
                      shadow_map_size=2048),
            LightSpec(LightKind.DIRECTIONAL, "fill", intensity=1.0,
                      position=(-5.0, 5.0, -5.0)),
        ),
        geometry=(
            GeometrySpec("floor", GeometryKind.PLANE, (60.0, 60.0),
                         Transform(rotation=_FLOOR_ROTATION),
                         color=parse_color(0x1A1A1A), roughness=0.7, metalness=0.2),
        ),
        assets=(lift_asset, car),
        background=dark,
        fog=FogSpec(dark, near=10.0, far=50.0),
        renderer=RendererSettings(exposure=1.2),
        controls=ControlsSpec(min_distance=4.0, max_distance=20.0),
        ready_gate=ReadyGate.EAGER,
        lift=lift,
        paint_target=C.PAINT_TARGET,
        palette=tuple(parse_color(c) for c in C.PAINT_COLORS),
    )


def showroom_animated_profile(assets_dir: str = C.DEFAULT_ASSETS_DIR) -> SceneDescription:
    """Showroom with the lift cycling between the floor and working height."""
    return showroom_profile(
        assets_dir, lift=LiftMotion.animated(amplitude=C.FIXED_LIFT_HEIGHT, period=8.0),
    )


PROFILES: Dict[str, Callable[..., SceneDescription]] = {
    "workshop": workshop_profile,
    "showroom": showroom_profile,
    "showroom-animated": showroom_animated_profile,
}


def get_profile(name: str, assets_dir: str = C.DEFAULT_ASSETS_DIR) -> SceneDescription:
    factory = PROFILES.get(name)
    if factory is None:
        raise ValueError(f"Unknown profile: {name}")
    description = factory(assets_dir)
    log.debug("[M1] profile '%s': %d assets, gate=%s",
              name, len(description.assets), description.ready_gate.name)
    return description
