"""
Contour - progressive pitch-contour analysis

Extracts time-indexed pitch estimates from speech recordings so a learner's
intonation can be compared against a native-speaker reference. Long media
is analyzed segment by segment on demand, with a bounded segment cache.
"""

__version__ = "1.0.0"
__author__ = "Audio Analysis Team"
