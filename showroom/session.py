"""
#WHERE
    Entry point of the whole system — called by main.py and the tests.

#WHAT
    Scene session: owns the scene graph, camera, orbit controls, renderer,
    asset loader, assembler and interaction bridge for one independent
    showroom session, and drives the lifecycle
    UNINITIALIZED → SCENE_BUILT → (ASSETS_LOADING → READY) → RUNNING.

#INPUT
    SceneDescription (M1), Surface, SessionConfig.

#OUTPUT
    Rendered frames (memory / PNG / MP4) and a live scene graph that the
    interaction bridge can mutate.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np
import trimesh

from showroom.modules.m1_scene_description.models import (
    AssetDescriptor,
    GeometryKind,
    GeometrySpec,
    LightKind,
    ReadyGate,
    SceneDescription,
)
from showroom.modules.m2_asset_loader import AssetBackend, AssetLoader, AssetLoadError, LoadResult
from showroom.modules.m3_scene_assembler import SceneAssembler
from showroom.modules.m4_render_loop import (
    MemorySink,
    MultiSink,
    OrbitControls,
    PngSink,
    RenderLoop,
    Renderer,
    TinyRendererBackend,
    VideoSink,
)
from showroom.modules.m5_interaction import InteractionBridge
from showroom.shared import constants as C
from showroom.shared.scene_graph import (
    DirectionalLight,
    Fog,
    Group,
    HemisphereLight,
    Material,
    Mesh,
    PerspectiveCamera,
    Scene,
    Surface,
)

log = logging.getLogger(__name__)


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    SCENE_BUILT = "scene_built"
    ASSETS_LOADING = "assets_loading"
    READY = "ready"
    RUNNING = "running"


@dataclass
class SessionConfig:
    fps: int = C.DEFAULT_FPS
    max_frames: Optional[int] = None     # None → run for the session lifetime
    realtime: bool = True                # False → render as fast as possible
    keep_frames: Optional[int] = 1       # frames kept in memory (None = all)
    video_path: Optional[str] = None
    stills_dir: Optional[str] = None
    stills_every: int = 1


def plane_geometry(width: float, depth: float) -> trimesh.Trimesh:
    """Two-triangle plane in XY facing +Z (rotate -90° about X to lie on the floor)."""
    w, d = width / 2.0, depth / 2.0
    vertices = np.array([[-w, -d, 0.0], [w, -d, 0.0], [w, d, 0.0], [-w, d, 0.0]])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def build_geometry(spec: GeometrySpec) -> Mesh:
    if spec.kind is GeometryKind.PLANE:
        geometry = plane_geometry(*spec.size[:2])
    elif spec.kind is GeometryKind.BOX:
        geometry = trimesh.creation.box(extents=spec.size[:3])
    else:
        raise ValueError(f"Unknown geometry kind: {spec.kind}")

    t = spec.transform
    mesh = Mesh(spec.name, geometry,
                Material(name=spec.name, color=spec.color,
                         roughness=spec.roughness, metalness=spec.metalness),
                position=t.position, rotation=t.rotation, scale=t.scale)
    mesh.receive_shadow = spec.receive_shadow
    return mesh


class Session:
    """One independent scene session. No module-level state is shared."""

    def __init__(self, description: SceneDescription, surface: Optional[Surface],
                 config: Optional[SessionConfig] = None,
                 renderer: Optional[Renderer] = None,
                 backend: Optional[AssetBackend] = None):
        self.description = description
        self.surface = surface
        self.config = config or SessionConfig()
        self.state = SessionState.UNINITIALIZED

        self.scene = Scene(description.name)
        self.camera: Optional[PerspectiveCamera] = None
        self.controls: Optional[OrbitControls] = None
        self.renderer = renderer
        self.sink: Optional[MultiSink] = None
        self.memory: Optional[MemorySink] = None
        self.render_loop: Optional[RenderLoop] = None

        self.assembler = SceneAssembler()
        self.loader = AssetLoader(backend, on_loaded=self._on_loaded,
                                  on_failed=self._on_failed)
        self.bridge = InteractionBridge(self)
        self.results: List[LoadResult] = []

    # ── lifecycle ────────────────────────────────────────────────

    def _set_state(self, state: SessionState) -> None:
        log.debug("[Session] %s → %s", self.state.value, state.value)
        self.state = state

    def build(self) -> bool:
        """Build the static scene. Returns False (and logs) if it cannot start."""
        if self.state is not SessionState.UNINITIALIZED:
            raise RuntimeError(f"Session already built (state={self.state.value})")
        if self.surface is None:
            log.error("[Session] display surface not found — aborting setup")
            return False

        if self.renderer is None:
            width, height = self.surface.buffer_size
            self.renderer = TinyRendererBackend(width, height, self.description.renderer)
        if not self.renderer.setup():
            self.surface.status_text = "Error: 3D renderer not available."
            log.error("[Session] renderer unavailable — aborting setup")
            return False

        self._build_environment()
        self._set_state(SessionState.SCENE_BUILT)
        log.info("[Session] '%s' built: %d lights, %d static meshes, %d assets queued",
                 self.description.name, len(self.scene.lights()),
                 len(self.scene.meshes()), len(self.description.assets))
        return True

    def _build_environment(self) -> None:
        d = self.description
        self.scene.background = d.background
        if d.fog is not None:
            self.scene.fog = Fog(d.fog.color, d.fog.near, d.fog.far)

        cam = d.camera
        self.camera = PerspectiveCamera(fov=cam.fov, aspect=self.surface.aspect,
                                        near=cam.near, far=cam.far,
                                        position=cam.position)
        self.camera.look_at(cam.target)
        self.controls = OrbitControls(
            self.camera, target=cam.target,
            damping_factor=d.controls.damping_factor,
            min_distance=d.controls.min_distance,
            max_distance=d.controls.max_distance,
            max_polar_angle=d.controls.max_polar_angle,
        )

        for spec in d.lights:
            if spec.kind is LightKind.HEMISPHERE:
                light = HemisphereLight(spec.name, sky_color=spec.color,
                                        ground_color=spec.ground_color,
                                        intensity=spec.intensity, position=spec.position)
            else:
                light = DirectionalLight(spec.name, color=spec.color,
                                         intensity=spec.intensity,
                                         cast_shadow=spec.cast_shadow,
                                         shadow_map_size=spec.shadow_map_size,
                                         position=spec.position)
            self.scene.add(light)

        environment = self.scene.add(Group("environment"))
        for spec in d.geometry:
            environment.add(build_geometry(spec))

    def _make_sink(self) -> MultiSink:
        cfg = self.config
        self.memory = MemorySink(keep_last=cfg.keep_frames)
        video = VideoSink(cfg.video_path, fps=cfg.fps) if cfg.video_path else None
        stills = PngSink(cfg.stills_dir, every=cfg.stills_every) if cfg.stills_dir else None
        return MultiSink(self.memory, video, stills)

    async def run(self, max_frames: Optional[int] = None) -> int:
        """Load assets per the profile's readiness gate and run the render loop.

        Returns the number of frames rendered (0 if setup failed).
        """
        if self.state is SessionState.UNINITIALIZED and not self.build():
            return 0
        if self.state is not SessionState.SCENE_BUILT:
            raise RuntimeError(f"Session cannot run from state {self.state.value}")

        max_frames = self.config.max_frames if max_frames is None else max_frames
        self.sink = self._make_sink()
        self.render_loop = RenderLoop(
            self.renderer, self.scene, self.camera, controls=self.controls,
            sink=self.sink, fps=self.config.fps, realtime=self.config.realtime,
            on_frame=self._on_frame if self.description.lift.is_animated else None,
        )
        assets = self.description.assets

        if self.description.ready_gate is ReadyGate.ALL_SETTLED:
            self._set_state(SessionState.ASSETS_LOADING)
            self.results = await self.loader.await_all(assets)
            self._set_state(SessionState.READY)
            self._set_state(SessionState.RUNNING)
            return await self.render_loop.run(max_frames)

        tasks = self.loader.schedule(assets)
        self._set_state(SessionState.RUNNING)
        try:
            return await self.render_loop.run(max_frames)
        finally:
            # loads cannot be aborted; let them settle before returning
            self.results = list(await asyncio.gather(*tasks))

    def close(self) -> None:
        if self.renderer is not None:
            self.renderer.close()

    # ── callbacks ────────────────────────────────────────────────

    def _on_loaded(self, descriptor: AssetDescriptor, node: Group) -> None:
        self.assembler.attach(node, descriptor, self.scene)

    def _on_failed(self, descriptor: AssetDescriptor, error: AssetLoadError) -> None:
        log.warning("[Session] continuing without '%s'", descriptor.name)

    def _on_frame(self, t: float) -> None:
        offset = self.description.lift.offset_at(t)
        for descriptor in self.description.assets:
            if not descriptor.rides_lift:
                continue
            node = self.assembler.node(descriptor.name)
            if node is not None:
                node.position[1] = descriptor.transform.position[1] + offset

    # ── accessors ────────────────────────────────────────────────

    @property
    def last_frame(self) -> Optional[np.ndarray]:
        if self.memory is None or not self.memory.frames:
            return None
        return self.memory.frames[-1]
