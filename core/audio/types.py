"""
core/audio/types.py — Frozen data types for real-time audio analysis.

All types are frozen dataclasses — immutable value objects that can be
safely handed from the analysis tick to generators and observers by copy.

Design principles:
    - No I/O, no state, no side effects.
    - Invariants are documented but NOT enforced at construction time —
      validation happens at the creation site (features.py).
    - Derived values (`combined_energy`, `energy`) are computed properties
      to avoid duplicate storage.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class AudioFeatures:
    """Perceptual features of a single analysis frame.

    Recreated every tick and never mutated after creation.

    Invariants:
        0 <= bass_energy, mid_energy, high_energy <= 1
        spectral_centroid, spectral_rolloff, pitch >= 0 (Hz)
        0 <= zero_crossing_rate <= 1
        0 <= rms <= 1
        onset_strength >= 0
    """

    bass_energy: float = 0.0
    """Mean normalized magnitude of the lowest 10% of bins."""

    mid_energy: float = 0.0
    """Mean normalized magnitude of bins 10%–50%."""

    high_energy: float = 0.0
    """Mean normalized magnitude of the upper 50% of bins."""

    spectral_centroid: float = 0.0
    """Magnitude-weighted mean frequency in Hz. 0.0 for silent frames."""

    spectral_rolloff: float = 0.0
    """Frequency in Hz below which 90% of the magnitude lies. 0.0 if unset."""

    zero_crossing_rate: float = 0.0
    """Fraction of adjacent time-domain samples crossing the midline."""

    rms: float = 0.0
    """Root-mean-square of the time-domain frame normalized to [-1, 1]."""

    beat_detected: bool = False
    """True when combined energy exceeds the adaptive beat threshold."""

    onset_strength: float = 0.0
    """Amount by which combined energy exceeds the threshold (>= 0)."""

    pitch: float = 0.0
    """Frequency in Hz of the strongest bin in the lower half of the spectrum."""

    @property
    def combined_energy(self) -> float:
        """Sum of the three band energies (0–3). Input to beat detection."""
        return self.bass_energy + self.mid_energy + self.high_energy

    @property
    def energy(self) -> float:
        """Mean band energy (0–1). Used as the overall loudness cue."""
        return self.combined_energy / 3.0

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view for observers that serialize snapshots."""
        return asdict(self)


def _unit(value: Any, default: float = 0.5) -> float:
    """Coerce value into [0, 1]; malformed input falls back to default."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(v):
        return default
    return max(0.0, min(1.0, v))


@dataclass(frozen=True)
class AudioInfluence:
    """Generator-facing view of an AudioFeatures snapshot.

    Every field is in [0, 1]. A missing or malformed snapshot maps to the
    neutral influence (0.5 everywhere) so generators never fail on it.
    """

    bass: float = 0.5
    mid: float = 0.5
    treble: float = 0.5
    energy: float = 0.5

    @classmethod
    def neutral(cls) -> AudioInfluence:
        """Influence used when no analysis is attached to a request."""
        return cls()

    @classmethod
    def from_features(cls, features: AudioFeatures | None) -> AudioInfluence:
        """Derive influence terms from a snapshot, defaulting bad fields to 0.5."""
        if features is None:
            return cls.neutral()
        bass = _unit(getattr(features, "bass_energy", None))
        mid = _unit(getattr(features, "mid_energy", None))
        treble = _unit(getattr(features, "high_energy", None))
        return cls(bass=bass, mid=mid, treble=treble, energy=(bass + mid + treble) / 3.0)
