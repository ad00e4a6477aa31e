"""
Segment store for progressive pitch analysis.

Partitions a source's duration into fixed-length segments and tracks,
per segment, whether its pitch data is currently loaded.
"""

import math
from typing import Iterator, List, Optional

from contour.core.models import ProgressiveLoadingConfig, Segment


class SegmentStore:
    """
    Owned arena of segments indexed by integer.

    Created once per loaded source and discarded when the next source is
    initialized. Segment boundaries are fixed at creation; the range
    loader fills segments, the cache evictor clears them and range
    queries only read them.
    """

    def __init__(
        self,
        segments: List[Segment],
        total_duration: float,
        config: ProgressiveLoadingConfig,
        progressive: bool
    ):
        self._segments = segments
        self.total_duration = total_duration
        self.config = config
        self.progressive = progressive

    @classmethod
    def initialize(
        cls,
        total_duration: float,
        config: Optional[ProgressiveLoadingConfig] = None
    ) -> "SegmentStore":
        """
        Build the segment layout for a source of ``total_duration`` seconds.

        Above ``threshold_duration`` the timeline is split into
        ceil(total_duration / segment_duration) unprocessed segments.
        Otherwise a single segment spans [0, total_duration) and is meant
        to be filled right away with a whole-file analysis.
        """
        config = config or ProgressiveLoadingConfig()
        total_duration = max(0.0, float(total_duration))

        if total_duration <= config.threshold_duration:
            return cls([Segment(0, 0.0, total_duration)], total_duration, config, False)

        step = config.segment_duration
        count = math.ceil(total_duration / step)
        segments = [
            Segment(i, i * step, min((i + 1) * step, total_duration))
            for i in range(count)
        ]
        return cls(segments, total_duration, config, True)

    def segment_index_for_time(self, time: float) -> int:
        """
        Index of the segment containing ``time``, clamped to valid indices.

        Infinite times clamp to the first or last segment.

        Raises:
            ValueError: If ``time`` is NaN
        """
        if math.isnan(time):
            raise ValueError("Cannot look up a segment for a NaN time")
        if not self.progressive:
            return 0

        last = len(self._segments) - 1
        if math.isinf(time):
            return last if time > 0 else 0
        index = math.floor(time / self.config.segment_duration)
        return min(max(index, 0), last)

    def get(self, index: int) -> Optional[Segment]:
        """Segment at ``index`` or None when out of range."""
        if 0 <= index < len(self._segments):
            return self._segments[index]
        return None

    def processed_indices(self) -> List[int]:
        return [s.index for s in self._segments if s.processed]

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)
