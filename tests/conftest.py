"""Shared fixtures for pitch pipeline and manager tests."""

import logging

import numpy as np
import pytest

from contour.core.extractor import PitchExtractor
from contour.core.manager import PitchDataManager
from contour.core.models import AnalysisSettings, AudioSource, ProgressiveLoadingConfig
from contour.utils.errors import DecodeError


# ---------------------------------------------------------------------------
# Small frame geometry so tests stay fast: 100 Hz "audio", 20-sample frames
# ---------------------------------------------------------------------------

SAMPLE_RATE = 100
SMALL_SETTINGS = AnalysisSettings(frame_size=20, hop_size=10)


def make_signal(duration: float, hz: float = 250.0) -> np.ndarray:
    """Constant buffer that ValueEstimator reads back as ``hz``."""
    return np.full(int(round(duration * SAMPLE_RATE)), hz / 1000.0, dtype=np.float32)


# ---------------------------------------------------------------------------
# Collaborator stubs
# ---------------------------------------------------------------------------


class ValueEstimator:
    """Estimator stub: the frame's first sample times 1000 is the pitch."""

    def __init__(self, confidence: float = 0.9):
        self.confidence = confidence
        self.calls = 0

    @property
    def name(self) -> str:
        return "value"

    def estimate(self, frame, sample_rate):
        self.calls += 1
        return float(frame[0]) * 1000.0, self.confidence


class FakeDecoder:
    """Decoder stub serving a fixed buffer; counts decodes and can fail."""

    def __init__(self, samples: np.ndarray, sample_rate: int = SAMPLE_RATE, failures: int = 0):
        self.samples = samples
        self.sample_rate = sample_rate
        self.failures = failures
        self.decode_calls = 0
        self.warn_levels = []

    def probe_duration(self, file) -> float:
        return len(self.samples) / self.sample_rate

    def decode(self, file, warn_levels: bool = True) -> AudioSource:
        self.decode_calls += 1
        self.warn_levels.append(warn_levels)
        if self.failures:
            self.failures -= 1
            raise DecodeError("corrupt frame header", file_path=str(file))
        return AudioSource(
            samples=self.samples,
            sample_rate=self.sample_rate,
            duration=len(self.samples) / self.sample_rate,
            origin=str(file),
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def value_extractor():
    """PitchExtractor wired to ValueEstimator with the small frame geometry."""
    return PitchExtractor(ValueEstimator(), SMALL_SETTINGS)


@pytest.fixture
def manager_factory():
    """Build PitchDataManagers over FakeDecoder buffers; shuts them down afterwards.

    Returns a callable ``(duration, hz=250.0, failures=0, **config) -> (manager, decoder)``.
    """
    managers = []

    def _make(duration, hz=250.0, failures=0, **options):
        decoder = FakeDecoder(make_signal(duration, hz), failures=failures)
        manager = PitchDataManager(
            config=ProgressiveLoadingConfig(**options),
            extractor=PitchExtractor(ValueEstimator(), SMALL_SETTINGS),
            decoder=decoder,
        )
        managers.append(manager)
        return manager, decoder

    yield _make

    for manager in managers:
        manager.shutdown()


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by setup_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
