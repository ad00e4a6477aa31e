"""
Range loader: analyzes the segments a view needs, one at a time.
"""

import asyncio
import logging
from concurrent.futures import Executor
from typing import Awaitable, Callable, List, Optional

from contour.core.cache import CacheEvictor
from contour.core.extractor import PitchExtractor
from contour.core.models import AudioSource, Segment
from contour.core.segments import SegmentStore

SourceFetcher = Callable[[], Awaitable[AudioSource]]


class RangeLoader:
    """
    Fills the segments covering a time window plus a look-ahead margin.

    Segments are processed strictly sequentially, so at most one decoded
    buffer is in flight per loader call. A failed segment is left
    unprocessed and is retried by the next load that covers it.
    """

    def __init__(
        self,
        store: SegmentStore,
        extractor: PitchExtractor,
        evictor: CacheEvictor,
        fetch_source: SourceFetcher,
        executor: Optional[Executor] = None
    ):
        """
        Initialize loader.

        Args:
            store: Segment store this loader writes to
            extractor: Pitch extraction pipeline
            evictor: Run after every load with the window's first segment
            fetch_source: Coroutine function returning the decoded source
            executor: Where extraction runs (loop default if None)
        """
        self.store = store
        self.extractor = extractor
        self.evictor = evictor
        self.fetch_source = fetch_source
        self.executor = executor
        self.logger = logging.getLogger("range_loader")

    def target_indices(self, start: float, end: float) -> List[int]:
        """Existing segment indices in [segment(start), segment(end) + preload]."""
        first = self.store.segment_index_for_time(start)
        last = self.store.segment_index_for_time(end) + self.store.config.preload_segments
        return [i for i in range(first, last + 1) if self.store.get(i) is not None]

    async def load(self, start: float, end: float) -> List[int]:
        """
        Ensure [start, end] and the look-ahead segments are analyzed.

        No-op in whole-file mode. Eviction runs afterwards even when a
        segment fails, centered on the segment containing ``start``.

        Returns:
            Indices processed by this call, in order

        Raises:
            DecodeError: Source could not be decoded
            AnalysisError: Pitch estimation failed
        """
        if not self.store.progressive:
            return []

        processed = []
        try:
            for index in self.target_indices(start, end):
                segment = self.store[index]
                if segment.processed:
                    continue
                await self._process(segment)
                processed.append(index)
        finally:
            self.evictor.cleanup(self.store, self.store.segment_index_for_time(start))

        return processed

    async def _process(self, segment: Segment) -> None:
        """Decode, extract and store one segment; nothing is stored on failure."""
        source = await self.fetch_source()

        loop = asyncio.get_event_loop()
        series = await loop.run_in_executor(
            self.executor,
            self.extractor.extract_source,
            source,
            segment.start_time,
            segment.end_time
        )

        segment.fill(series)
        self.logger.info(
            f"Segment {segment.index} [{segment.start_time:.2f}s, {segment.end_time:.2f}s) "
            f"analyzed: {len(series)} frames",
            extra={
                "segment_index": segment.index,
                "start_time": segment.start_time,
                "end_time": segment.end_time,
            }
        )
