"""
Display-range helpers for pitch charts.

Pure functions that decide which frequency band and time window a chart
should show; drawing itself is left to the UI layer.
"""

import math
from typing import Optional, Tuple

from contour.core.models import PitchSeries

AXIS_FLOOR: float = 0.0  # Hz
AXIS_CEILING: float = 600.0  # Hz
MIN_AXIS_SPAN: float = 200.0  # Hz
MIN_PADDING: float = 20.0  # Hz


def fit_pitch_axis(
    series: PitchSeries,
    start: Optional[float] = None,
    end: Optional[float] = None
) -> Optional[Tuple[float, float]]:
    """
    Frequency range for the y axis of a pitch chart.

    With a [start, end] region only voiced pitches inside it count and the
    padding is max(20 Hz, 10% of their span); without one all voiced
    pitches count and the padding is a flat 20 Hz. The padded range is
    rounded outwards, clamped to [0, 600] Hz, widened to at least 200 Hz
    around its centre and capped at 600 Hz.

    Returns:
        (low, high) in Hz, or None if no voiced pitch is in range
    """
    region = start is not None or end is not None
    lo_t = -math.inf if start is None else start
    hi_t = math.inf if end is None else end

    values = [
        p.hz
        for t, p in zip(series.times, series.pitches)
        if p.is_voiced and lo_t <= t <= hi_t
    ]
    if not values:
        return None

    low, high = min(values), max(values)
    padding = max(MIN_PADDING, (high - low) * 0.1) if region else MIN_PADDING

    low = max(AXIS_FLOOR, math.floor(low - padding))
    high = min(AXIS_CEILING, math.ceil(high + padding))

    if high - low < MIN_AXIS_SPAN:
        low, high = _recenter(low, high, MIN_AXIS_SPAN / 2)

    if high - low > AXIS_CEILING:
        low, high = _recenter(low, high, AXIS_CEILING / 2)

    return float(low), float(high)


def _recenter(low: float, high: float, half_span: float) -> Tuple[float, float]:
    center = (low + high) / 2
    return (
        max(AXIS_FLOOR, math.floor(center - half_span)),
        min(AXIS_CEILING, math.ceil(center + half_span)),
    )


def view_window_around(
    current_time: float,
    total_duration: float,
    view_duration: float = 10.0,
    lead_fraction: float = 0.3
) -> Tuple[float, float]:
    """
    Time window that shows ``current_time`` at ``lead_fraction`` of the view.

    Near the end of the source the window is shifted back so it ends at
    ``total_duration``.
    """
    start = max(0.0, current_time - view_duration * lead_fraction)
    end = start + view_duration

    if end > total_duration:
        end = total_duration
        start = max(0.0, end - view_duration)

    return start, end
