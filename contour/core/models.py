"""
Core data models for the Contour pitch analysis package.

Audio sources, pitch values, pitch series and the segment records that
the progressive loader fills and the cache evictor clears.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import numpy as np

from contour.utils.errors import ConfigurationError


@dataclass(frozen=True)
class Voiced:
    """A reliable pitch estimate in Hz."""

    hz: float
    is_voiced = True

    def to_optional(self) -> Optional[float]:
        return self.hz


@dataclass(frozen=True)
class Unvoiced:
    """
    No reliable pitch at this position.

    Silence, an out-of-range estimate and low detector confidence are
    deliberately not distinguished.
    """

    is_voiced = False

    def to_optional(self) -> Optional[float]:
        return None


UNVOICED = Unvoiced()

Pitch = Union[Voiced, Unvoiced]


def pitch_from_optional(value: Union[Pitch, float, None]) -> Pitch:
    """Convert None / NaN / float (or an existing Pitch) to a Pitch value."""
    if isinstance(value, (Voiced, Unvoiced)):
        return value
    if value is None or math.isnan(value):
        return UNVOICED
    return Voiced(float(value))


@dataclass(frozen=True)
class AudioSource:
    """
    Immutable decoded mono audio.

    Replaced wholesale whenever a new file is loaded.
    """

    samples: np.ndarray  # Shape: (n_samples,), float32
    sample_rate: int
    duration: float  # seconds
    origin: str = "<bytes>"

    @property
    def num_samples(self) -> int:
        return int(self.samples.shape[0])

    def sample_index(self, time: float) -> int:
        """Sample index at or before ``time`` seconds."""
        return int(math.floor(time * self.sample_rate))


@dataclass
class PitchSeries:
    """Parallel time / pitch arrays."""

    times: List[float] = field(default_factory=list)
    pitches: List[Pitch] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.times)

    def extend(self, other: "PitchSeries") -> None:
        self.times.extend(other.times)
        self.pitches.extend(other.pitches)

    def voiced_values(self) -> List[float]:
        """Frequencies of all voiced entries, in time order."""
        return [p.hz for p in self.pitches if p.is_voiced]

    @property
    def voiced_ratio(self) -> float:
        if not self.pitches:
            return 0.0
        return len(self.voiced_values()) / len(self.pitches)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict (unvoiced becomes None)."""
        return {
            'times': list(self.times),
            'pitches': [p.to_optional() for p in self.pitches],
        }


@dataclass
class Segment:
    """
    A fixed slice of the timeline analyzed and evicted independently.

    ``start_time`` / ``end_time`` never change after creation; only the
    analysis payload comes and goes.
    """

    index: int
    start_time: float
    end_time: float
    processed: bool = False
    times: List[float] = field(default_factory=list)
    pitches: List[Pitch] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def fill(self, series: PitchSeries) -> None:
        """Store an analysis result and mark the segment processed."""
        if len(series.times) != len(series.pitches):
            raise ValueError(
                f"Segment {self.index}: {len(series.times)} times but "
                f"{len(series.pitches)} pitches"
            )
        self.times = list(series.times)
        self.pitches = list(series.pitches)
        self.processed = True

    def clear(self) -> None:
        """Drop analysis data, keeping the boundary metadata."""
        self.times = []
        self.pitches = []
        self.processed = False

    def overlaps(self, start: float, end: float) -> bool:
        """Closed-interval overlap test used by range queries."""
        return self.end_time >= start and self.start_time <= end


@dataclass(frozen=True)
class ProgressiveLoadingConfig:
    """
    Options controlling segmented (progressive) analysis.

    threshold_duration: sources longer than this use segmented mode
    segment_duration: seconds per segment
    preload_segments: segments analyzed ahead of the requested window
    max_cached_segments: upper bound on simultaneously analyzed segments
    cache_decoded_audio: keep the decoded buffer between segment loads
                         instead of redecoding the source for each one
    """

    threshold_duration: float = 30.0
    segment_duration: float = 10.0
    preload_segments: int = 1
    max_cached_segments: int = 6
    cache_decoded_audio: bool = False

    def __post_init__(self) -> None:
        if self.segment_duration <= 0:
            raise ConfigurationError(
                f"segment_duration must be positive, got {self.segment_duration}",
                config_key="progressive.segment_duration"
            )
        if self.threshold_duration < 0:
            raise ConfigurationError(
                f"threshold_duration must be >= 0, got {self.threshold_duration}",
                config_key="progressive.threshold_duration"
            )
        if self.preload_segments < 0:
            raise ConfigurationError(
                f"preload_segments must be >= 0, got {self.preload_segments}",
                config_key="progressive.preload_segments"
            )
        if self.max_cached_segments < 1:
            raise ConfigurationError(
                f"max_cached_segments must be >= 1, got {self.max_cached_segments}",
                config_key="progressive.max_cached_segments"
            )

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]] = None) -> "ProgressiveLoadingConfig":
        section = section or {}
        defaults = cls()
        return cls(
            threshold_duration=float(section.get('threshold_duration', defaults.threshold_duration)),
            segment_duration=float(section.get('segment_duration', defaults.segment_duration)),
            preload_segments=int(section.get('preload_segments', defaults.preload_segments)),
            max_cached_segments=int(section.get('max_cached_segments', defaults.max_cached_segments)),
            cache_decoded_audio=bool(section.get('cache_decoded_audio', defaults.cache_decoded_audio)),
        )


@dataclass(frozen=True)
class AnalysisSettings:
    """Frame geometry and acceptance thresholds for pitch extraction."""

    frame_size: int = 2048
    hop_size: int = 256
    min_pitch: float = 60.0  # Hz
    max_pitch: float = 500.0  # Hz
    min_confidence: float = 0.8
    median_window: int = 5

    def __post_init__(self) -> None:
        if self.frame_size <= 0 or self.hop_size <= 0:
            raise ConfigurationError(
                f"frame_size and hop_size must be positive, got "
                f"{self.frame_size}/{self.hop_size}",
                config_key="analysis.frame_size"
            )
        if self.min_pitch >= self.max_pitch:
            raise ConfigurationError(
                f"min_pitch ({self.min_pitch}) must be below max_pitch ({self.max_pitch})",
                config_key="analysis.min_pitch"
            )
        if self.median_window < 1 or self.median_window % 2 == 0:
            raise ConfigurationError(
                f"median_window must be a positive odd number, got {self.median_window}",
                config_key="analysis.median_window"
            )

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]] = None) -> "AnalysisSettings":
        section = section or {}
        defaults = cls()
        return cls(
            frame_size=int(section.get('frame_size', defaults.frame_size)),
            hop_size=int(section.get('hop_size', defaults.hop_size)),
            min_pitch=float(section.get('min_pitch', defaults.min_pitch)),
            max_pitch=float(section.get('max_pitch', defaults.max_pitch)),
            min_confidence=float(section.get('min_confidence', defaults.min_confidence)),
            median_window=int(section.get('median_window', defaults.median_window)),
        )
