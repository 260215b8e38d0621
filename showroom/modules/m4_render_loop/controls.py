"""Orbit camera controller with exponential damping (Y-up, spherical coordinates)."""

import math
from typing import Sequence

import numpy as np

from showroom.shared.scene_graph import PerspectiveCamera

_EPS = 1e-6


class OrbitControls:
    """Orbits the camera around ``target``.

    ``rotate``/``dolly`` only accumulate input; ``update`` (once per frame)
    moves the camera by ``damping_factor`` of the pending rotation and decays
    the remainder by ``1 - damping_factor``, so motion settles gradually.
    Zoom is not damped: the pending dolly scale is applied in full on the
    next ``update`` and then reset, as three.js OrbitControls does.
    """

    def __init__(self, camera: PerspectiveCamera, target: Sequence[float] = None,
                 enable_damping: bool = True, damping_factor: float = 0.05,
                 min_distance: float = 0.0, max_distance: float = math.inf,
                 min_polar_angle: float = 0.0, max_polar_angle: float = math.pi,
                 rotate_speed: float = 1.0, zoom_speed: float = 1.0):
        self.camera = camera
        self.target = np.array(target if target is not None else camera.target,
                               dtype=np.float64).reshape(3)
        self.enable_damping = enable_damping
        self.damping_factor = damping_factor
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.min_polar_angle = min_polar_angle
        self.max_polar_angle = max_polar_angle
        self.rotate_speed = rotate_speed
        self.zoom_speed = zoom_speed

        self._delta_theta = 0.0
        self._delta_phi = 0.0
        self._scale = 1.0
        self.camera.look_at(self.target)

    # ── input ────────────────────────────────────────────────────

    def rotate(self, azimuth: float, polar: float) -> None:
        """Queue a rotation in radians (positive azimuth turns the view left)."""
        self._delta_theta -= azimuth * self.rotate_speed
        self._delta_phi -= polar * self.rotate_speed

    def rotate_pixels(self, dx: float, dy: float, viewport_height: int) -> None:
        """Pointer drag in pixels; a drag across the full height is one turn."""
        height = max(int(viewport_height), 1)
        self.rotate(2.0 * math.pi * dx / height, 2.0 * math.pi * dy / height)

    def dolly(self, delta: float) -> None:
        """Wheel input: positive zooms out, negative zooms in."""
        step = 0.95 ** self.zoom_speed
        if delta > 0:
            self._scale /= step
        elif delta < 0:
            self._scale *= step

    @property
    def pending(self) -> bool:
        return abs(self._delta_theta) > _EPS or abs(self._delta_phi) > _EPS or self._scale != 1.0

    # ── per frame ────────────────────────────────────────────────

    def update(self) -> bool:
        """Advance one damping step; returns True if the camera moved."""
        before = self.camera.position.copy()
        offset = self.camera.position - self.target

        radius = float(np.linalg.norm(offset))
        if radius < _EPS:
            radius, theta, phi = _EPS, 0.0, math.pi / 2
        else:
            theta = math.atan2(offset[0], offset[2])
            phi = math.acos(max(-1.0, min(1.0, offset[1] / radius)))

        if self.enable_damping:
            theta += self._delta_theta * self.damping_factor
            phi += self._delta_phi * self.damping_factor
        else:
            theta += self._delta_theta
            phi += self._delta_phi

        phi = max(self.min_polar_angle, min(self.max_polar_angle, phi))
        phi = max(_EPS, min(math.pi - _EPS, phi))
        radius = max(self.min_distance, min(self.max_distance, radius * self._scale))

        sin_phi = math.sin(phi)
        offset = radius * np.array([sin_phi * math.sin(theta),
                                    math.cos(phi),
                                    sin_phi * math.cos(theta)])
        self.camera.position = self.target + offset
        self.camera.look_at(self.target)

        if self.enable_damping:
            self._delta_theta *= 1.0 - self.damping_factor
            self._delta_phi *= 1.0 - self.damping_factor
        else:
            self._delta_theta = self._delta_phi = 0.0
        self._scale = 1.0

        return not np.allclose(before, self.camera.position)
