"""Tests for CacheEvictor."""

import pytest

from contour.core.cache import CacheEvictor, create_cache_evictor
from contour.core.models import ProgressiveLoadingConfig, PitchSeries, Voiced
from contour.core.segments import SegmentStore


@pytest.fixture
def store():
    """Five 10s segments, all processed with one frame each."""
    store = SegmentStore.initialize(45.0, ProgressiveLoadingConfig(segment_duration=10))
    for segment in store:
        segment.fill(PitchSeries([segment.start_time], [Voiced(200.0)]))
    return store


class TestKeepWindow:
    def test_window_is_centered(self):
        assert CacheEvictor(6).keep_window(1) == {-2, -1, 0, 1, 2, 3}

    def test_odd_width(self):
        assert CacheEvictor(3).keep_window(5) == {4, 5, 6}

    def test_width_one(self):
        assert CacheEvictor(1).keep_window(2) == {2}


class TestCleanup:
    def test_evicts_outside_window(self, store):
        evicted = CacheEvictor(6).cleanup(store, current_index=1)
        assert evicted == [4]
        assert store.processed_indices() == [0, 1, 2, 3]

    def test_evicted_segment_is_emptied(self, store):
        CacheEvictor(6).cleanup(store, current_index=1)
        assert store[4].times == []
        assert store[4].pitches == []
        assert store[4].processed is False

    def test_boundaries_survive_eviction(self, store):
        before = [(s.index, s.start_time, s.end_time) for s in store]
        CacheEvictor(1).cleanup(store, current_index=2)
        assert [(s.index, s.start_time, s.end_time) for s in store] == before
        assert store.processed_indices() == [2]

    def test_cleanup_is_idempotent(self, store):
        evictor = CacheEvictor(2)
        first = evictor.cleanup(store, current_index=3)
        second = evictor.cleanup(store, current_index=3)
        assert first == [0, 1, 4]
        assert second == []
        assert store.processed_indices() == [2, 3]

    def test_unprocessed_segments_untouched(self, store):
        store[0].clear()
        evicted = CacheEvictor(2).cleanup(store, current_index=4)
        assert 0 not in evicted

    def test_stats(self, store):
        evictor = CacheEvictor(2)
        evictor.cleanup(store, current_index=0)
        evictor.cleanup(store, current_index=0)
        assert evictor.get_stats() == {'runs': 2, 'evictions': 4, 'max_cached_segments': 2}


class TestCreateCacheEvictor:
    def test_reads_progressive_section(self):
        assert create_cache_evictor({'max_cached_segments': 4}).max_cached_segments == 4

    def test_default(self):
        assert create_cache_evictor().max_cached_segments == 6
