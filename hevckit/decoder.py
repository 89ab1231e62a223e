"""Frame cache and queue bookkeeping shared by hardware video decoders."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from hevckit.nal import DecoderParameters


@dataclass
class CachedFrame:
    """A decoded frame waiting to be uploaded to textures and consumed."""

    pts: int = 0
    duration: int = 0
    uploaded: bool = False
    width: int = 0
    height: int = 0
    target: int = 0
    y_texture_handle: int = 0
    uv_texture_handle: int = 0
    output_buffer_id: int = 0
    buffer: Any = None

    def reset(self) -> None:
        """Clear per-frame state so the frame can be reused."""
        self.pts = 0
        self.duration = 0
        self.uploaded = False
        self.width = 0
        self.height = 0
        self.output_buffer_id = 0
        self.buffer = None


@dataclass
class DecoderConfig:
    """Settings a decoder is initialised with."""

    parameters: DecoderParameters = field(default_factory=DecoderParameters)
    width: int = 0
    height: int = 0
    name: str = ""
    manual_video_texture_upload: bool = False
    output_buffer_queue_size: int = 0
    input_buffer_queue_size: int = 0


class HWVideoDecoderBase(ABC):
    """Base for decoders: tracks input buffers and a pool of output frames.

    Subclasses fill ``_free_output_buffers`` with reusable frames, move
    decoded frames into ``_output_buffers`` and keep ``_input_buffers`` as the
    number of input buffers handed to the decoder but not yet consumed.
    """

    def __init__(self, config: DecoderConfig | None = None) -> None:
        self.input_eos = False
        self.output_eos = False
        self.num_total_frames_decoded = 0

        self._config = config if config is not None else DecoderConfig()
        self._input_buffers = 0
        self._output_buffers: deque[CachedFrame] = deque()
        self._free_output_buffers: deque[CachedFrame] = deque()
        self._frame_cache_lock = threading.Lock()

    @property
    def config(self) -> DecoderConfig:
        return self._config

    @abstractmethod
    def initialize(self, config: DecoderConfig) -> bool:
        """Prepare the decoder for ``config``."""

    @abstractmethod
    def shutdown(self) -> bool:
        """Release the decoder's resources."""

    @abstractmethod
    def start(self) -> bool:
        """Begin decoding."""

    @abstractmethod
    def stop(self) -> bool:
        """Stop decoding."""

    @abstractmethod
    def flush(self) -> bool:
        """Drop all pending input and output."""

    @abstractmethod
    def queue_video_input_buffer(
        self,
        data: bytes,
        decode_time_stamp: int,
        presentation_time_stamp: int,
        input_eos: bool = False,
    ) -> bool:
        """Hand one access unit to the decoder."""

    @abstractmethod
    def dequeue_output_buffer(self) -> bool:
        """Collect a decoded frame into the output queue."""

    @abstractmethod
    def upload_texture(self, frame: CachedFrame) -> bool:
        """Make ``frame`` available as textures."""

    def is_input_queue_empty(self) -> bool:
        with self._frame_cache_lock:
            return self._input_buffers == 0

    def is_input_queue_full(self) -> bool:
        with self._frame_cache_lock:
            return self._input_buffers >= self._config.input_buffer_queue_size

    def is_output_queue_empty(self) -> bool:
        """True when every frame of the pool is free."""
        with self._frame_cache_lock:
            return len(self._free_output_buffers) == self._config.output_buffer_queue_size

    def is_output_queue_full(self) -> bool:
        """True when no free frame is left in the pool."""
        with self._frame_cache_lock:
            return len(self._free_output_buffers) == 0

    def output_queue_size(self) -> int:
        return len(self._output_buffers)

    def retain_cached_frame(self) -> CachedFrame | None:
        """Take the oldest decoded frame, uploading it first; None if none."""
        with self._frame_cache_lock:
            if not self._output_buffers:
                return None
            frame = self._output_buffers.popleft()
            self.upload_texture(frame)
            return frame

    def release_cached_frame(self, frame: CachedFrame | None) -> bool:
        """Reset ``frame`` and return it to the free pool."""
        if frame is None:
            return False
        with self._frame_cache_lock:
            frame.reset()
            self._free_output_buffers.append(frame)
        return True