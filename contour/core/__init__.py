"""
Core module containing data models, the extraction pipeline and the
progressive segment cache.

Uses lazy imports for modules with heavy dependencies (librosa, soundfile).
"""

# Models and pure helpers are lightweight - import directly
from contour.core.models import (
    UNVOICED,
    AnalysisSettings,
    AudioSource,
    Pitch,
    PitchSeries,
    ProgressiveLoadingConfig,
    Segment,
    Unvoiced,
    Voiced,
    pitch_from_optional,
)
from contour.core.smoothing import median_filter
from contour.core.sampler import FrameSampler, iter_frames
from contour.core.segments import SegmentStore
from contour.core.cache import CacheEvictor, create_cache_evictor
from contour.core.query import query_time_range
from contour.core.display import fit_pitch_axis, view_window_around

__all__ = [
    # Models (always available)
    "UNVOICED",
    "AnalysisSettings",
    "AudioSource",
    "Pitch",
    "PitchSeries",
    "ProgressiveLoadingConfig",
    "Segment",
    "Unvoiced",
    "Voiced",
    "pitch_from_optional",
    # Pure pipeline pieces
    "median_filter",
    "FrameSampler",
    "iter_frames",
    "SegmentStore",
    "CacheEvictor",
    "create_cache_evictor",
    "query_time_range",
    "fit_pitch_axis",
    "view_window_around",
    # Heavy modules (lazy loaded)
    "PitchEstimator",
    "PyinPitchEstimator",
    "create_pitch_estimator",
    "PitchExtractor",
    "create_pitch_extractor",
    "AudioDecoder",
    "AsyncAudioDecoder",
    "create_audio_decoder",
    "RangeLoader",
    "PitchDataManager",
    "create_pitch_manager",
    "ResultWriter",
    "TextResultWriter",
    "JSONResultWriter",
    "create_result_writer",
]

_LAZY = {
    "PitchEstimator": "contour.core.estimator",
    "PyinPitchEstimator": "contour.core.estimator",
    "create_pitch_estimator": "contour.core.estimator",
    "PitchExtractor": "contour.core.extractor",
    "create_pitch_extractor": "contour.core.extractor",
    "AudioDecoder": "contour.core.decoder",
    "AsyncAudioDecoder": "contour.core.decoder",
    "create_audio_decoder": "contour.core.decoder",
    "RangeLoader": "contour.core.range_loader",
    "PitchDataManager": "contour.core.manager",
    "create_pitch_manager": "contour.core.manager",
    "ResultWriter": "contour.core.result_writer",
    "TextResultWriter": "contour.core.result_writer",
    "JSONResultWriter": "contour.core.result_writer",
    "create_result_writer": "contour.core.result_writer",
}


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    module_name = _LAZY.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    import importlib
    return getattr(importlib.import_module(module_name), name)
