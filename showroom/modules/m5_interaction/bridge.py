"""UI events → scene-state mutations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from showroom.modules.m3_scene_assembler.materials import set_base_color
from showroom.shared.colors import ColorLike, parse_color, to_hex

if TYPE_CHECKING:
    from showroom.session import Session

log = logging.getLogger(__name__)


class InteractionBridge:
    """Synchronous, idempotent handlers; safe any time after the scene is built.

    Events that arrive before the matching model is attached simply have no
    effect — nothing is queued.
    """

    def __init__(self, session: "Session"):
        self.session = session

    def on_resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            log.warning("[M5] ignoring resize to %sx%s", width, height)
            return
        camera = self.session.camera
        camera.aspect = width / height
        camera.update_projection_matrix()
        self.session.surface.set_size(width, height)
        if self.session.renderer is not None:
            self.session.renderer.resize(*self.session.surface.buffer_size)
        log.debug("[M5] resized to %dx%d", width, height)

    def on_color_select(self, material_target: str, color: ColorLike) -> int:
        """Recolour meshes whose material name contains *material_target*; returns count."""
        rgb = parse_color(color)
        count = set_base_color(self.session.scene, material_target, rgb)
        if count:
            log.info("[M5] '%s' → %s on %d meshes", material_target, to_hex(rgb), count)
        else:
            log.debug("[M5] no '%s' meshes yet", material_target)
        return count

    def on_palette_select(self, index: int) -> int:
        description = self.session.description
        if not description.palette or not description.paint_target:
            log.warning("[M5] profile '%s' has no paint palette", description.name)
            return 0
        if not 0 <= index < len(description.palette):
            raise IndexError(f"Palette index {index} out of range")
        return self.on_color_select(description.paint_target, description.palette[index])

    def on_pointer_drag(self, dx: float, dy: float) -> None:
        controls = self.session.controls
        if controls is not None:
            controls.rotate_pixels(dx, dy, self.session.surface.height)

    def on_wheel(self, delta: float) -> None:
        controls = self.session.controls
        if controls is not None:
            controls.dolly(delta)
