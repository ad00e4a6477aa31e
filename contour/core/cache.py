"""
Segment cache eviction for progressive pitch analysis.

Bounds memory by clearing the pitch data of segments that fall outside
a sliding keep-window around the current view.
"""

import logging
from typing import Any, Dict, List, Optional, Set

from contour.core.segments import SegmentStore


class CacheEvictor:
    """
    Keep-window evictor for a SegmentStore.

    Only analysis data is dropped; segment boundaries stay, so an evicted
    segment is simply loaded again when a later view covers it.
    """

    def __init__(self, max_cached_segments: int = 6):
        """
        Initialize evictor.

        Args:
            max_cached_segments: Width of the keep-window in segments
        """
        self.max_cached_segments = max_cached_segments
        self.logger = logging.getLogger("cache")

        # Statistics
        self._runs = 0
        self._evictions = 0

    def keep_window(self, current_index: int) -> Set[int]:
        """
        Indices preserved around ``current_index``.

        The window holds max_cached_segments consecutive indices starting
        max_cached_segments // 2 before the current one. It may reach
        below zero; such indices simply match no segment.
        """
        offset = self.max_cached_segments // 2
        return {
            current_index + i - offset
            for i in range(self.max_cached_segments)
        }

    def cleanup(self, store: SegmentStore, current_index: int) -> List[int]:
        """
        Clear every processed segment outside the keep-window.

        Args:
            store: Segment store to prune in place
            current_index: Segment the window is centered on

        Returns:
            Indices of the segments that were evicted
        """
        keep = self.keep_window(current_index)
        evicted = []

        for segment in store:
            if segment.processed and segment.index not in keep:
                segment.clear()
                evicted.append(segment.index)

        self._runs += 1
        self._evictions += len(evicted)

        if evicted:
            self.logger.debug(
                f"Evicted segments {evicted} (keep-window centered on {current_index})"
            )

        return evicted

    def get_stats(self) -> Dict[str, Any]:
        """Return cleanup runs, total evictions and the window size."""
        return {
            'runs': self._runs,
            'evictions': self._evictions,
            'max_cached_segments': self.max_cached_segments,
        }


def create_cache_evictor(config: Optional[Dict[str, Any]] = None) -> CacheEvictor:
    """
    Factory function to create CacheEvictor from the "progressive" section.

    Args:
        config: Optional configuration dict
    """
    if config is None:
        config = {}

    return CacheEvictor(max_cached_segments=int(config.get('max_cached_segments', 6)))
