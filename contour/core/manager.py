"""
Pitch data manager for the Contour pitch analysis package.

Entry point for applications: loads a source, classifies it as
whole-file or progressive, loads segments as the visible window moves
and answers pitch queries for arbitrary time ranges.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from contour.core.cache import CacheEvictor
from contour.core.decoder import (
    AsyncAudioDecoder,
    AudioDecoder,
    AudioInput,
    create_audio_decoder,
    describe,
)
from contour.core.estimator import PitchEstimator
from contour.core.extractor import PitchExtractor, create_pitch_extractor
from contour.core.models import AudioSource, PitchSeries, ProgressiveLoadingConfig
from contour.core.query import query_time_range
from contour.core.range_loader import RangeLoader
from contour.core.segments import SegmentStore
from contour.utils.errors import ContourError, NoSourceLoadedError


class PitchDataManager:
    """
    Progressive pitch analysis for one source at a time.

    Design:
    - Whole-file mode for short sources, analyzed during initialize()
    - Segmented mode for long sources, analyzed on demand per view
    - Sequential loads: decode/analysis steps are awaited one by one on a
      worker thread, never fanned out
    - Bounded memory: segments outside the keep-window are evicted
    - No cancellation: overlapping loads all run to completion; this is
      logged, not prevented
    """

    def __init__(
        self,
        config: Optional[ProgressiveLoadingConfig] = None,
        extractor: Optional[PitchExtractor] = None,
        decoder: Optional[AudioDecoder] = None,
        max_workers: int = 1
    ):
        """
        Initialize manager.

        Args:
            config: Progressive loading options (defaults if None)
            extractor: Pitch extraction pipeline (pYIN-based default if None)
            decoder: Audio decoder (default AudioDecoder if None)
            max_workers: Worker threads for decode/analysis
        """
        self.config = config or ProgressiveLoadingConfig()
        self.extractor = extractor or create_pitch_extractor()
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.decoder = AsyncAudioDecoder(decoder or AudioDecoder(), self.executor)
        self.evictor = CacheEvictor(self.config.max_cached_segments)
        self.logger = logging.getLogger('manager')

        self._file: Optional[AudioInput] = None
        self._store: Optional[SegmentStore] = None
        self._loader: Optional[RangeLoader] = None
        self._source: Optional[AudioSource] = None
        self._loads_in_flight = 0
        self._levels_reported = False

    async def initialize(self, file: AudioInput) -> None:
        """
        Load and classify a new source, replacing all prior state.

        Args:
            file: Path to an audio file or its raw bytes

        Raises:
            DecodeError: The source cannot be probed or decoded
            AnalysisError: Whole-file pitch extraction failed
        """
        label = describe(file)

        # A failed initialize leaves no source loaded
        self._file = None
        self._store = None
        self._loader = None
        self._source = None
        self._levels_reported = False

        try:
            duration = await self.decoder.probe_duration(file)
            store = SegmentStore.initialize(duration, self.config)

            source = None
            if not store.progressive:
                source = await self.decoder.decode(file)
                store[0].fill(await self._analyze(source))
        except ContourError as e:
            self.logger.error(f"Failed to initialize {label}: {e}")
            raise

        self._file = file
        self._store = store
        if self.config.cache_decoded_audio:
            self._source = source
        self._loader = RangeLoader(
            store=store,
            extractor=self.extractor,
            evictor=self.evictor,
            fetch_source=lambda: self._fetch_source(file, store),
            executor=self.executor
        )

        mode = "progressive" if store.progressive else "whole-file"
        self.logger.info(
            f"Loaded {label}: {duration:.2f}s, {mode} mode, {len(store)} segment(s)",
            extra={"source": label, "mode": mode}
        )

    async def load_segments_for_time_range(self, start: float, end: float) -> List[int]:
        """
        Ensure the window [start, end] plus look-ahead is analyzed.

        Returns:
            Indices of the segments analyzed by this call

        Raises:
            NoSourceLoadedError: initialize() has not succeeded
            DecodeError: A segment's audio could not be decoded
            AnalysisError: Pitch estimation failed for a segment
        """
        loader = self._require(self._loader, "load_segments_for_time_range")

        if self._loads_in_flight:
            self.logger.warning(
                f"Load of [{start:.2f}s, {end:.2f}s] started while "
                f"{self._loads_in_flight} earlier load(s) are still running; "
                f"earlier loads are not cancelled and may complete after this one"
            )

        self._loads_in_flight += 1
        try:
            return await loader.load(start, end)
        except ContourError as e:
            self.logger.error(f"Loading [{start:.2f}s, {end:.2f}s] failed: {e}")
            raise
        finally:
            self._loads_in_flight -= 1

    def get_pitch_data_for_time_range(self, start: float, end: float) -> PitchSeries:
        """
        Return the loaded pitch data for [start, end].

        Pure read: segments that are not loaded leave gaps.

        Raises:
            NoSourceLoadedError: initialize() has not succeeded
        """
        store = self._require(self._store, "get_pitch_data_for_time_range")
        return query_time_range(store, start, end)

    async def extract_recording(self, file: AudioInput) -> PitchSeries:
        """
        Analyze a complete recording outside the segment cache.

        Used for the learner's own recording, which is short and is always
        shown in full.
        """
        source = await self.decoder.decode(file)
        return await self._analyze(source)

    def is_in_progressive_mode(self) -> bool:
        return self._store is not None and self._store.progressive

    def get_total_duration(self) -> float:
        """Duration of the loaded source in seconds (0.0 when nothing is loaded)."""
        if self._store is None:
            return 0.0
        return self._store.total_duration

    def segment_count(self) -> int:
        return 0 if self._store is None else len(self._store)

    def get_cache_stats(self) -> Dict[str, Any]:
        """Evictor statistics plus the currently loaded segment indices."""
        stats = self.evictor.get_stats()
        stats['segments'] = self.segment_count()
        stats['processed'] = [] if self._store is None else self._store.processed_indices()
        stats['decoded_audio_cached'] = self._source is not None
        return stats

    def shutdown(self) -> None:
        """Shutdown the worker executor."""
        self.executor.shutdown(wait=True)

    async def _analyze(self, source: AudioSource) -> PitchSeries:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self.executor, self.extractor.extract_source, source)

    async def _fetch_source(self, file: AudioInput, store: SegmentStore) -> AudioSource:
        """
        Decoded source for a segment load.

        Redecodes the whole file for every segment unless
        cache_decoded_audio is set. Silence and clipping are reported at
        WARNING only for the first successful decode of a source.
        """
        current = store is self._store
        if self._source is not None and current:
            return self._source

        source = await self.decoder.decode(
            file, warn_levels=not (current and self._levels_reported)
        )

        # Never touch the state of a newer initialize()
        if store is self._store:
            self._levels_reported = True
            if self.config.cache_decoded_audio:
                self._source = source
        return source

    @staticmethod
    def _require(value: Any, operation: str) -> Any:
        if value is None:
            raise NoSourceLoadedError(operation)
        return value


def create_pitch_manager(
    config: Optional[Dict[str, Any]] = None,
    estimator: Optional[PitchEstimator] = None,
    decoder: Optional[AudioDecoder] = None
) -> PitchDataManager:
    """
    Factory function to create a fully configured PitchDataManager.

    Args:
        config: Full configuration dict (see utils.config.get_default_config)
        estimator: Optional estimator override
        decoder: Optional decoder override

    Returns:
        PitchDataManager: Ready to initialize()
    """
    if config is None:
        config = {}

    return PitchDataManager(
        config=ProgressiveLoadingConfig.from_dict(config.get('progressive', {})),
        extractor=create_pitch_extractor(config, estimator=estimator),
        decoder=decoder or create_audio_decoder(config.get('audio', {})),
        max_workers=config.get('performance', {}).get('max_workers', 1)
    )
