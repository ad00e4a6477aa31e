"""
Range queries over analyzed segments.
"""

from bisect import bisect_left, bisect_right

from contour.core.models import PitchSeries
from contour.core.segments import SegmentStore


def query_time_range(store: SegmentStore, start: float, end: float) -> PitchSeries:
    """
    Stitch the loaded pitch data for [start, end] into one series.

    Every processed segment overlapping the window contributes the slice
    from its first time >= start up to (excluding) its first time > end,
    in ascending segment order. Unloaded segments leave gaps; this never
    triggers loading.
    """
    result = PitchSeries()

    for segment in store:
        if not segment.processed or not segment.overlaps(start, end):
            continue
        lo = bisect_left(segment.times, start)
        hi = bisect_right(segment.times, end)
        result.times.extend(segment.times[lo:hi])
        result.pitches.extend(segment.pitches[lo:hi])

    return result
