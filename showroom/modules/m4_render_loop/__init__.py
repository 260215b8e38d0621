"""
#WHERE
    Imported by session.py, main.py and test_render_loop.py.

#WHAT
    Render Loop Module (Module 4) — damped orbit camera controls, renderer
    backends (PyBullet TinyRenderer + fog/background/tone-mapping post
    pass), frame sinks and the single-start repeating frame task.

#INPUT
    Scene graph root, PerspectiveCamera, RendererSettings, fps.

#OUTPUT
    RGB uint8 frames pushed to a FrameSink (memory, PNG stills or MP4).
"""

from .controls import OrbitControls
from .render_loop import RenderLoop
from .renderers import (
    Renderer,
    TinyRendererBackend,
    aces_filmic,
    compose_frame,
    linearize_depth,
)
from .sinks import FrameSink, MemorySink, MultiSink, PngSink, VideoSink

__all__ = [
    "OrbitControls", "RenderLoop",
    "Renderer", "TinyRendererBackend", "aces_filmic", "compose_frame",
    "linearize_depth",
    "FrameSink", "MemorySink", "MultiSink", "PngSink", "VideoSink",
]
