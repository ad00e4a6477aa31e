"""
Pitch extractor for the Contour pitch analysis package.

Runs frame sampling, per-frame estimation, range/confidence filtering and
median smoothing over one sample range of an audio buffer.
"""

import logging
import math
import time
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from contour.core.estimator import PitchEstimator, create_pitch_estimator
from contour.core.models import (
    UNVOICED,
    AnalysisSettings,
    AudioSource,
    Pitch,
    PitchSeries,
    Voiced,
)
from contour.core.sampler import FrameSampler
from contour.core.smoothing import median_filter
from contour.utils.errors import AnalysisError


class PitchExtractor:
    """
    Turns samples into a smoothed (time, pitch) series.

    Stateless apart from its settings and estimator, so one instance is
    shared by whole-file analysis and every segment load.
    """

    def __init__(
        self,
        estimator: PitchEstimator,
        settings: Optional[AnalysisSettings] = None
    ):
        """
        Initialize extractor.

        Args:
            estimator: Single-frame pitch detector
            settings: Frame geometry and thresholds (defaults if None)
        """
        self.estimator = estimator
        self.settings = settings or AnalysisSettings()
        self.sampler = FrameSampler(self.settings.frame_size, self.settings.hop_size)
        self.logger = logging.getLogger("extractor")

    def classify(self, frequency: float, confidence: float) -> Pitch:
        """
        Apply the hard acceptance band to one estimate.

        Values just outside the band are discarded, never clamped.
        """
        s = self.settings
        if math.isnan(frequency) or math.isnan(confidence):
            return UNVOICED
        if s.min_pitch <= frequency <= s.max_pitch and confidence >= s.min_confidence:
            return Voiced(float(frequency))
        return UNVOICED

    def extract(
        self,
        samples: np.ndarray,
        sample_rate: int,
        start_sample: int = 0,
        end_sample: Optional[int] = None
    ) -> PitchSeries:
        """
        Extract the pitch series of samples[start_sample:end_sample].

        Frame times are absolute (relative to the start of ``samples``),
        so segment results can be concatenated directly.

        Raises:
            AnalysisError: If the estimator fails on any frame
        """
        start = time.time()
        times = []
        raw = []

        try:
            if hasattr(self.estimator, "estimate_frames"):
                estimates = self._estimate_batched(samples, sample_rate, start_sample, end_sample)
            else:
                estimates = (
                    (index, *self.estimator.estimate(frame, sample_rate))
                    for index, frame in self.sampler.frames(samples, start_sample, end_sample)
                )
            for index, frequency, confidence in estimates:
                raw.append(self.classify(frequency, confidence))
                times.append(self.sampler.frame_time(index, sample_rate))
        except Exception as e:
            name = getattr(self.estimator, "name", type(self.estimator).__name__)
            self.logger.error(f"Pitch estimation failed: {e}")
            raise AnalysisError(
                f"{name} pitch estimation failed: {e}",
                estimator_name=name,
                sample_range=(start_sample, len(samples) if end_sample is None else end_sample),
                original_error=e
            ) from e

        pitches = median_filter(raw, self.settings.median_window)

        self.logger.debug(
            f"Extracted {len(times)} frames from samples "
            f"[{start_sample}, {end_sample if end_sample is not None else len(samples)}) "
            f"in {time.time() - start:.3f}s"
        )
        return PitchSeries(times=times, pitches=pitches)

    def _estimate_batched(
        self,
        samples: np.ndarray,
        sample_rate: int,
        start_sample: int,
        end_sample: Optional[int]
    ) -> List[Tuple[int, float, float]]:
        """
        One estimate_frames() call over the whole range.

        The estimator may return a trailing frame that ends exactly at the
        range end; it is dropped so the grid matches FrameSampler.frames().
        """
        begin = max(0, start_sample)
        stop = len(samples) if end_sample is None else min(end_sample, len(samples))
        count = self.sampler.count(stop, begin)
        if count == 0:
            return []

        frequencies, confidences = self.estimator.estimate_frames(
            samples[begin:stop], sample_rate, self.settings.frame_size, self.settings.hop_size
        )
        if len(frequencies) < count or len(confidences) < count:
            raise ValueError(
                f"estimate_frames returned {len(frequencies)} frames, expected {count}"
            )

        hop = self.settings.hop_size
        return [
            (begin + k * hop, float(frequencies[k]), float(confidences[k]))
            for k in range(count)
        ]

    def extract_source(
        self,
        source: AudioSource,
        start_time: float = 0.0,
        end_time: Optional[float] = None
    ) -> PitchSeries:
        """Extract over a time range of a decoded source (whole source by default)."""
        start_sample = source.sample_index(start_time)
        end_sample = None if end_time is None else source.sample_index(end_time)
        return self.extract(source.samples, source.sample_rate, start_sample, end_sample)


def create_pitch_extractor(
    config: Optional[Dict[str, Any]] = None,
    estimator: Optional[PitchEstimator] = None
) -> PitchExtractor:
    """
    Factory function to create a PitchExtractor from a full config dict.

    Args:
        config: Optional configuration dict ("analysis" and "estimator" sections)
        estimator: Estimator override (the pYIN adapter if None)
    """
    if config is None:
        config = {}

    if estimator is None:
        estimator = create_pitch_estimator(config.get('estimator', {}))

    return PitchExtractor(
        estimator=estimator,
        settings=AnalysisSettings.from_dict(config.get('analysis', {}))
    )
