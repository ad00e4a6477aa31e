"""
Pitch estimator interface for the Contour pitch analysis package.

The per-frame pitch detector is an external primitive. Anything with an
``estimate(frame, sample_rate) -> (frequency_hz, confidence)`` method can
be plugged into the extractor; the default adapter delegates to
librosa's probabilistic YIN.
"""

from typing import Any, Dict, Optional, Protocol, Tuple

import librosa
import numpy as np


class PitchEstimator(Protocol):
    """
    Structural interface for single-frame pitch detectors.

    Implementations do not need to inherit from this class. They may also
    provide ``estimate_frames(samples, sample_rate, frame_size, hop_size)``
    returning per-frame frequency and confidence arrays for a whole range
    (see PyinPitchEstimator); PitchExtractor then uses it instead of
    calling ``estimate`` frame by frame.
    """

    @property
    def name(self) -> str:
        """Estimator name used in logs and errors."""
        ...

    def estimate(self, frame: np.ndarray, sample_rate: int) -> Tuple[float, float]:
        """
        Estimate the fundamental frequency of one frame.

        Args:
            frame: Mono samples
            sample_rate: Sample rate of ``frame``

        Returns:
            (frequency_hz, confidence): confidence in [0, 1]. The frequency
            may be NaN or out of range; filtering is the caller's job.
        """
        ...


class PyinPitchEstimator:
    """
    Adapter around ``librosa.pyin``.

    Frames are analyzed without centering, so frame k starts at sample
    ``k * hop_size`` of the buffer passed in. The best-guess frequency is
    always reported (``fill_na=None``) and the voiced probability serves
    as confidence.

    Besides the single-frame ``estimate``, ``estimate_frames`` analyzes a
    whole sample range in one pYIN pass; the extractor prefers it when an
    estimator provides it.
    """

    def __init__(self, fmin: float = 50.0, fmax: float = 600.0):
        if fmin <= 0 or fmin >= fmax:
            raise ValueError(f"Invalid pYIN search range: fmin={fmin}, fmax={fmax}")
        self.fmin = fmin
        self.fmax = fmax

    @property
    def name(self) -> str:
        return "librosa_pyin"

    def estimate(self, frame: np.ndarray, sample_rate: int) -> Tuple[float, float]:
        f0, voiced_prob = self.estimate_frames(frame, sample_rate, len(frame), len(frame))
        if f0.size == 0:
            return float('nan'), 0.0
        return float(f0[0]), float(voiced_prob[0])

    def estimate_frames(
        self,
        samples: np.ndarray,
        sample_rate: int,
        frame_size: int,
        hop_size: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Estimate every frame of ``samples`` in one pass.

        Returns:
            (frequencies_hz, confidences): one entry per frame starting at
            0, hop_size, ... with ``start + frame_size <= len(samples)``
        """
        f0, _, voiced_prob = librosa.pyin(
            np.asarray(samples, dtype=np.float32),
            fmin=self.fmin,
            fmax=self.fmax,
            sr=sample_rate,
            frame_length=frame_size,
            hop_length=hop_size,
            center=False,
            fill_na=None,
        )
        return f0, voiced_prob


def create_pitch_estimator(config: Optional[Dict[str, Any]] = None) -> PyinPitchEstimator:
    """
    Factory function to create the default estimator.

    Args:
        config: Optional "estimator" config section (fmin, fmax)
    """
    if config is None:
        config = {}

    return PyinPitchEstimator(
        fmin=float(config.get('fmin', 50.0)),
        fmax=float(config.get('fmax', 600.0)),
    )
