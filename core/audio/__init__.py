"""
core/audio — Real-time audio analysis.

Turns one FFT frame (frequency bytes + time-domain bytes) into a flat
AudioFeatures record. The DSP functions in features.py are pure; beat
detection keeps a short energy history and SpectralAnalyzer owns the
capture lifecycle and observer fan-out.

Public API:
    Types:     AudioFeatures, AudioInfluence
    Features:  extract_features
    Beat:      BeatDetector, BeatResult
    Analyzer:  SpectralAnalyzer, FrameSource
"""

from core.audio.analyzer import FrameSource, SpectralAnalyzer
from core.audio.beat import BeatDetector, BeatResult
from core.audio.features import extract_features
from core.audio.types import AudioFeatures, AudioInfluence

__all__ = [
    "AudioFeatures",
    "AudioInfluence",
    "extract_features",
    "BeatDetector",
    "BeatResult",
    "SpectralAnalyzer",
    "FrameSource",
]
