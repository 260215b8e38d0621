"""Frame sinks: where rendered frames go (memory, PNG stills, MP4)."""

import logging
import os
from typing import List, Optional, Protocol

import numpy as np

from showroom.shared.video_io import open_video_writer, write_png

log = logging.getLogger(__name__)


class FrameSink(Protocol):
    def write(self, index: int, frame: np.ndarray) -> None: ...
    def close(self) -> None: ...


class MemorySink:
    """Keeps frames in memory; ``keep_last`` bounds the buffer."""

    def __init__(self, keep_last: Optional[int] = None):
        self.keep_last = keep_last
        self.frames: List[np.ndarray] = []
        self.count = 0

    def write(self, index: int, frame: np.ndarray) -> None:
        self.frames.append(frame)
        if self.keep_last is not None and len(self.frames) > self.keep_last:
            del self.frames[0]
        self.count += 1

    def close(self) -> None:
        pass


class PngSink:
    def __init__(self, output_dir: str, every: int = 1):
        self.output_dir = output_dir
        self.every = max(1, every)
        self.paths: List[str] = []

    def write(self, index: int, frame: np.ndarray) -> None:
        if index % self.every == 0:
            path = os.path.join(self.output_dir, f"frame_{index:04d}.png")
            self.paths.append(write_png(frame, path))

    def close(self) -> None:
        log.info("[M4] %d stills in %s", len(self.paths), self.output_dir)


class VideoSink:
    """Streams frames into an MP4; the writer opens on the first frame."""

    def __init__(self, output_path: str, fps: int = 30):
        self.output_path = output_path
        self.fps = fps
        self.frames_written = 0
        self.written: Optional[str] = None
        self._writer = None

    def write(self, index: int, frame: np.ndarray) -> None:
        if self._writer is None:
            self._writer = open_video_writer(self.output_path, fps=self.fps)
        self._writer.append_data(frame)
        self.frames_written += 1

    def close(self) -> None:
        if self._writer is None:
            log.warning("[M4] VideoSink: received 0 frames — nothing to encode")
            return
        self._writer.close()
        self._writer = None
        self.written = os.path.abspath(self.output_path)
        log.info("[M4] video saved: %s (%d frames, %d fps)",
                 self.output_path, self.frames_written, self.fps)


class MultiSink:
    def __init__(self, *sinks: FrameSink):
        self.sinks = [s for s in sinks if s is not None]

    def write(self, index: int, frame: np.ndarray) -> None:
        for sink in self.sinks:
            sink.write(index, frame)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()
