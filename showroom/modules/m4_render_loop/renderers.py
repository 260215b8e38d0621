"""Renderer backends (Strategy pattern) — PyBullet TinyRenderer with post-processing.

Per frame the TinyRenderer backend:
    1. mirrors visible scene meshes into PyBullet visual bodies
       (created once, re-posed or re-coloured when the graph changes)
    2. renders RGB/depth/segmentation with the key light's shadows
    3. fills background pixels with the scene background colour
    4. blends object pixels towards the fog colour by linear depth
    5. applies exposure + ACES filmic tone mapping
    6. downsamples the supersampled frame when antialiasing is on

PyBullet has one shadow switch per image, so ``Mesh.cast_shadow`` only
decides whether shadows are drawn at all.  ``Mesh.receive_shadow``,
``Mesh.uv2`` and ``DirectionalLight.shadow_map_size`` are carried on the
graph for asset consumers; TinyRenderer has no per-body receiver flag,
no lightmaps and a fixed shadow buffer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

import numpy as np
from trimesh import transformations as tf

from showroom.modules.m1_scene_description.models import RendererSettings
from showroom.shared.scene_graph import (
    DirectionalLight,
    HemisphereLight,
    Mesh,
    PerspectiveCamera,
    Scene,
)

log = logging.getLogger(__name__)

# PyBullet's shared-memory mesh upload is bounded; split bigger meshes.
MAX_FACES_PER_BODY = 8000


class Renderer(Protocol):
    """Strategy interface for frame renderers."""

    def setup(self) -> bool: ...
    def resize(self, width: int, height: int) -> None: ...
    def render(self, scene: Scene, camera: PerspectiveCamera) -> np.ndarray: ...
    def close(self) -> None: ...


def aces_filmic(rgb: np.ndarray, exposure: float = 1.0) -> np.ndarray:
    """Narkowicz ACES approximation on float RGB in [0, 1]."""
    x = rgb * exposure
    mapped = (x * (2.51 * x + 0.03)) / (x * (2.43 * x + 0.59) + 0.14)
    return np.clip(mapped, 0.0, 1.0)


def linearize_depth(depth_buffer: np.ndarray, near: float, far: float) -> np.ndarray:
    """z = far*near / (far - (far-near)*depth_buffer)"""
    return far * near / (far - (far - near) * depth_buffer)


def compose_frame(rgb: np.ndarray, depth: np.ndarray, segmentation: np.ndarray,
                  scene: Scene, settings: RendererSettings) -> np.ndarray:
    """Background fill, fog and tone mapping on float RGB; returns float RGB."""
    out = rgb.copy()
    background = segmentation < 0
    if scene.fog is not None:
        fog = scene.fog.factor(depth)[..., None]
        fogged = out * (1.0 - fog) + np.asarray(scene.fog.color) * fog
        out = np.where(background[..., None], out, fogged)
    if settings.tone_mapping == "aces":
        out = aces_filmic(out, settings.exposure)
    elif settings.exposure != 1.0:
        out = np.clip(out * settings.exposure, 0.0, 1.0)
    if scene.background is not None:
        out[background] = np.asarray(scene.background)
    return out


@dataclass
class _Bodies:
    ids: List[int]
    matrix: np.ndarray
    rgba: List[float]


class TinyRendererBackend:
    """CPU rasteriser via PyBullet (DIRECT mode, ER_TINY_RENDERER)."""

    def __init__(self, width: int = 960, height: int = 540,
                 settings: Optional[RendererSettings] = None):
        self.width = width
        self.height = height
        self.settings = settings or RendererSettings()
        self._client: Optional[int] = None
        self._bodies: Dict[int, _Bodies] = {}
        self._is_ready = False

    def setup(self) -> bool:
        import pybullet as p

        try:
            self._client = p.connect(p.DIRECT)
            if self._client < 0:
                log.error("[M4] PyBullet connection failed")
                return False
            self._is_ready = True
            log.info("[M4] TinyRenderer ready (%dx%d, aa=%s, shadows=%s)",
                     self.width, self.height, self.settings.antialias,
                     self.settings.shadows)
            return True
        except Exception as e:
            log.error("[M4] renderer setup failed: %s", e)
            return False

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = int(width), int(height)

    def close(self) -> None:
        import pybullet as p

        if self._client is not None:
            p.disconnect(physicsClientId=self._client)
            self._client = None
            self._bodies.clear()
            self._is_ready = False
            log.info("[M4] renderer closed")

    # ── frame ────────────────────────────────────────────────────

    def render(self, scene: Scene, camera: PerspectiveCamera) -> np.ndarray:
        import pybullet as p

        if not self._is_ready:
            raise RuntimeError("Renderer not set up")

        self._sync(scene)
        ss = 2 if self.settings.antialias else 1
        width, height = self.width * ss, self.height * ss

        view_matrix = p.computeViewMatrix(
            cameraEyePosition=camera.position.tolist(),
            cameraTargetPosition=camera.target.tolist(),
            cameraUpVector=camera.up.tolist(),
        )
        proj_matrix = p.computeProjectionMatrixFOV(
            fov=camera.fov, aspect=camera.aspect,
            nearVal=camera.near, farVal=camera.far,
        )
        _, _, rgb, depth_buffer, seg = p.getCameraImage(
            width=width, height=height,
            viewMatrix=view_matrix, projectionMatrix=proj_matrix,
            shadow=int(self._shadows_enabled(scene)),
            renderer=p.ER_TINY_RENDERER,
            physicsClientId=self._client,
            **self._light_params(scene),
        )

        rgb = np.array(rgb, dtype=np.uint8).reshape((height, width, 4))[:, :, :3]
        depth = linearize_depth(np.array(depth_buffer).reshape((height, width)),
                                camera.near, camera.far)
        seg = np.array(seg).reshape((height, width)).astype(np.int32)

        out = compose_frame(rgb.astype(np.float32) / 255.0, depth, seg, scene, self.settings)
        if ss > 1:
            out = out.reshape(self.height, ss, self.width, ss, 3).mean(axis=(1, 3))
        return (np.clip(out, 0.0, 1.0) * 255).astype(np.uint8)

    def _shadows_enabled(self, scene: Scene) -> bool:
        """TinyRenderer shadows are all-or-nothing: on when a shadow-casting
        key light and at least one visible shadow-casting mesh exist."""
        if not self.settings.shadows:
            return False
        if not any(isinstance(l, DirectionalLight) and l.cast_shadow for l in scene.lights()):
            return False
        return any(m.cast_shadow and m.material.visible for m in scene.meshes())

    @staticmethod
    def _light_params(scene: Scene) -> Dict:
        lights = scene.lights()
        directional = [l for l in lights if isinstance(l, DirectionalLight)]
        hemispheres = [l for l in lights if isinstance(l, HemisphereLight)]

        ambient = sum(h.intensity for h in hemispheres) * 0.5
        params = {"lightAmbientCoeff": float(min(max(ambient, 0.0), 1.0))}
        if directional:
            key = next((l for l in directional if l.cast_shadow), directional[0])
            params["lightDirection"] = key.direction().tolist()
            params["lightColor"] = list(key.color)
            params["lightDiffuseCoeff"] = float(min(key.intensity * 0.4, 1.0))
            params["lightSpecularCoeff"] = 0.2
        return params

    # ── scene mirroring ──────────────────────────────────────────

    def _sync(self, scene: Scene) -> None:
        import pybullet as p

        seen = set()
        for mesh in scene.meshes():
            material = mesh.material
            if not material.visible or material.opacity <= 0.0:
                continue
            key = id(mesh)
            seen.add(key)
            world = mesh.world_matrix()
            rgba = material.rgba()
            bodies = self._bodies.get(key)

            if bodies is None:
                self._bodies[key] = self._create(mesh, world)
                continue

            if not np.allclose(world, bodies.matrix):
                delta = world @ np.linalg.inv(bodies.matrix)
                rot = delta[:3, :3]
                if np.allclose(rot @ rot.T, np.eye(3), atol=1e-6):
                    qw, qx, qy, qz = tf.quaternion_from_matrix(delta)
                    for body in bodies.ids:
                        p.resetBasePositionAndOrientation(
                            body, delta[:3, 3].tolist(), [qx, qy, qz, qw],
                            physicsClientId=self._client)
                else:
                    self._remove(key)
                    self._bodies[key] = self._create(mesh, world)
                    continue

            if rgba != bodies.rgba:
                for body in bodies.ids:
                    p.changeVisualShape(body, -1, rgbaColor=rgba,
                                        physicsClientId=self._client)
                bodies.rgba = rgba

        for key in [k for k in self._bodies if k not in seen]:
            self._remove(key)

    def _create(self, mesh: Mesh, world: np.ndarray) -> _Bodies:
        import pybullet as p

        geometry = mesh.geometry.copy()
        geometry.apply_transform(world)
        material = mesh.material
        specular = ((1.0 - material.roughness) * 0.5 + material.metalness * 0.3) \
            * min(material.env_map_intensity, 2.0) / 2.0
        rgba = material.rgba()

        ids = []
        faces = np.asarray(geometry.faces)
        normals = np.asarray(geometry.vertex_normals)
        for start in range(0, len(faces), MAX_FACES_PER_BODY):
            chunk = faces[start:start + MAX_FACES_PER_BODY]
            used, inverse = np.unique(chunk.ravel(), return_inverse=True)
            visual = p.createVisualShape(
                p.GEOM_MESH,
                vertices=geometry.vertices[used].tolist(),
                indices=inverse.astype(int).tolist(),
                normals=normals[used].tolist(),
                rgbaColor=rgba,
                specularColor=[specular] * 3,
                physicsClientId=self._client,
            )
            ids.append(p.createMultiBody(baseMass=0, baseVisualShapeIndex=visual,
                                         physicsClientId=self._client))
        log.debug("[M4] mirrored '%s' as %d bodies", mesh.name, len(ids))
        return _Bodies(ids=ids, matrix=world.copy(), rgba=rgba)

    def _remove(self, key: int) -> None:
        import pybullet as p

        for body in self._bodies.pop(key).ids:
            p.removeBody(body, physicsClientId=self._client)
