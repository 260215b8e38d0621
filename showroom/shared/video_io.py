"""
#WHERE
    Used by the M4 frame sinks (VideoSink, PngSink) and main.py.

#WHAT
    Thin wrappers around imageio (H.264 MP4) and Pillow (PNG stills).
    Centralises the codec/fps/makedirs boilerplate.

#INPUT
    numpy uint8 RGB frames, output path, fps.

#OUTPUT
    An open imageio writer (MP4) or a PNG file on disk.
"""

import logging
import os

import numpy as np

log = logging.getLogger(__name__)


def open_video_writer(output_path: str, fps: int = 30):
    """Open an H.264 MP4 writer; frames are encoded as they are appended."""
    import imageio

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    return imageio.get_writer(output_path, fps=fps, codec="libx264",
                              macro_block_size=16)


def write_png(frame: np.ndarray, output_path: str) -> str:
    from PIL import Image

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    Image.fromarray(frame).save(output_path)
    log.debug("Still saved: %s", output_path)
    return os.path.abspath(output_path)
