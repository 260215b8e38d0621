"""Repeating frame task: advance controls and per-frame hooks, render, emit."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import numpy as np

from showroom.shared.scene_graph import PerspectiveCamera, Scene

from .controls import OrbitControls
from .renderers import Renderer
from .sinks import FrameSink

log = logging.getLogger(__name__)

FrameHook = Callable[[float], None]


class RenderLoop:
    """Single-start frame loop driven by the asyncio event loop.

    The frame clock advances by exactly ``1 / fps`` per frame so per-frame
    hooks see deterministic time.  With ``realtime=False`` the loop only
    yields to other tasks between frames instead of sleeping.
    """

    def __init__(self, renderer: Renderer, scene: Scene, camera: PerspectiveCamera,
                 controls: Optional[OrbitControls] = None,
                 sink: Optional[FrameSink] = None, fps: int = 30,
                 realtime: bool = True, on_frame: Optional[FrameHook] = None):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.renderer = renderer
        self.scene = scene
        self.camera = camera
        self.controls = controls
        self.sink = sink
        self.fps = fps
        self.realtime = realtime
        self.on_frame = on_frame
        self.started = False
        self.frame_count = 0
        self.clock = 0.0

    def start(self) -> None:
        if self.started:
            raise RuntimeError("Render loop already started")
        self.started = True
        log.info("[M4] render loop started (%d fps)", self.fps)

    def tick(self) -> np.ndarray:
        """One frame: (1) damping step + hooks, (2) render, (3) emit."""
        if self.on_frame is not None:
            self.on_frame(self.clock)
        if self.controls is not None:
            self.controls.update()
        frame = self.renderer.render(self.scene, self.camera)
        if self.sink is not None:
            self.sink.write(self.frame_count, frame)
        self.frame_count += 1
        self.clock = self.frame_count / self.fps
        return frame

    async def run(self, max_frames: Optional[int] = None) -> int:
        """Start and keep rendering; ``max_frames=None`` never returns."""
        self.start()
        interval = 1.0 / self.fps
        try:
            while max_frames is None or self.frame_count < max_frames:
                self.tick()
                await asyncio.sleep(interval if self.realtime else 0)
        finally:
            if self.sink is not None:
                self.sink.close()
        log.info("[M4] rendered %d frames", self.frame_count)
        return self.frame_count
