"""
Frame sampler: slices a mono buffer into fixed-size overlapping frames.
"""

from typing import Iterator, Optional, Tuple

import numpy as np

DEFAULT_FRAME_SIZE: int = 2048  # samples
DEFAULT_HOP_SIZE: int = 256  # samples


def iter_frames(
    samples: np.ndarray,
    frame_size: int = DEFAULT_FRAME_SIZE,
    hop_size: int = DEFAULT_HOP_SIZE,
    start: int = 0,
    stop: Optional[int] = None
) -> Iterator[Tuple[int, np.ndarray]]:
    """
    Lazily yield (frame_start_index, frame) pairs.

    Frames start at start, start + hop_size, ... and are emitted only
    while ``i + frame_size < stop``. The trailing partial frame is
    dropped rather than zero-padded.

    Frames are views into ``samples``; copy them if they must outlive it.
    """
    if stop is None or stop > len(samples):
        stop = len(samples)

    i = max(0, start)
    while i + frame_size < stop:
        yield i, samples[i:i + frame_size]
        i += hop_size


class FrameSampler:
    """Frame and hop size in samples."""

    def __init__(self, frame_size: int = DEFAULT_FRAME_SIZE, hop_size: int = DEFAULT_HOP_SIZE):
        if frame_size <= 0 or hop_size <= 0:
            raise ValueError(
                f"frame_size and hop_size must be positive, got {frame_size}/{hop_size}"
            )
        self.frame_size = frame_size
        self.hop_size = hop_size

    def frames(
        self,
        samples: np.ndarray,
        start: int = 0,
        stop: Optional[int] = None
    ) -> Iterator[Tuple[int, np.ndarray]]:
        return iter_frames(samples, self.frame_size, self.hop_size, start, stop)

    def count(self, num_samples: int, start: int = 0) -> int:
        """Number of frames ``frames()`` yields for the range [start, num_samples)."""
        span = num_samples - max(0, start) - self.frame_size
        if span <= 0:
            return 0
        return (span - 1) // self.hop_size + 1

    @staticmethod
    def frame_time(frame_start: int, sample_rate: int) -> float:
        """Time in seconds of the frame starting at ``frame_start``."""
        return frame_start / sample_rate
