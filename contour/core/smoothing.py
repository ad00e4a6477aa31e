"""
Median smoothing for pitch sequences.

Suppresses isolated octave jumps and single-frame dropouts.
"""

import math
from typing import Iterable, List, Optional, Union

from contour.core.models import UNVOICED, Pitch, Voiced, pitch_from_optional


def median_filter(
    values: Iterable[Union[Pitch, float, None]],
    window_size: int = 5
) -> List[Pitch]:
    """
    Centered median filter that skips unvoiced and NaN entries.

    Element i of the result is the median of the valid values inside
    [i - window_size // 2, i + window_size // 2], clamped to the sequence
    bounds. For an even number of valid values the upper-middle element
    (index count // 2 after sorting) is taken, not the mean. A window
    with no valid values yields UNVOICED.

    Args:
        values: Pitch values (None and plain floats are accepted)
        window_size: Odd window length

    Returns:
        List[Pitch]: Smoothed sequence of the same length
    """
    if window_size < 1 or window_size % 2 == 0:
        raise ValueError(f"window_size must be a positive odd number, got {window_size}")

    pitches = [pitch_from_optional(v) for v in values]
    valid: List[Optional[float]] = [
        p.hz if p.is_voiced and not math.isnan(p.hz) else None
        for p in pitches
    ]

    half = window_size // 2
    last = len(valid) - 1
    result: List[Pitch] = []

    for i in range(len(valid)):
        window = sorted(
            v for v in valid[max(0, i - half):min(last, i + half) + 1]
            if v is not None
        )
        if window:
            result.append(Voiced(window[len(window) // 2]))
        else:
            result.append(UNVOICED)

    return result
