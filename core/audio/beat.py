"""
core/audio/beat.py — Adaptive-threshold beat (onset) detector.

Keeps a rolling window of the most recent combined band energies
(bass + mid + high) and flags a beat when the current frame rises clearly
above the window's recent behaviour:

    threshold = mean(history) + THRESHOLD_STDDEV_MULTIPLIER * stddev(history)
    beat      = energy > threshold  and  energy > MIN_BEAT_ENERGY
    onset     = max(0, energy - threshold)

The current frame is appended BEFORE the statistics are computed, so a
spike always contributes to its own threshold. There is no refractory
period beyond the smoothing of the window itself.

The window starts filled with zeros (and is zero-filled again on reset),
so the first loud frame after silence or a reset is reported as an onset.

Mean and variance are computed with `statistics` (exact rational
arithmetic), so a flat window yields a variance of exactly 0.0 and the
threshold equals the flat value once the window is full.
"""

from __future__ import annotations

import math
import statistics
from collections import deque
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Tunable constants
# ---------------------------------------------------------------------------

HISTORY_SIZE: int = 10  # frames in the rolling window (~1/6 s at 60 Hz)
THRESHOLD_STDDEV_MULTIPLIER: float = 2.0  # stddevs above the window mean
MIN_BEAT_ENERGY: float = 0.1  # absolute floor: silence never triggers


@dataclass(frozen=True)
class BeatResult:
    """Outcome of feeding one frame into the detector."""

    beat_detected: bool
    onset_strength: float
    threshold: float


class BeatDetector:
    """Rolling-window onset detector.

    Not thread-safe: one detector belongs to one analysis loop.

    Args:
        history_size:        Number of frames kept in the window.
        stddev_multiplier:   How many standard deviations above the mean
                             the energy must rise.
        min_energy:          Absolute combined-energy floor for a beat.

    Example:
        >>> det = BeatDetector()
        >>> for _ in range(10):
        ...     _ = det.update(0.5)
        >>> det.update(1.5).beat_detected
        True
    """

    def __init__(
        self,
        *,
        history_size: int = HISTORY_SIZE,
        stddev_multiplier: float = THRESHOLD_STDDEV_MULTIPLIER,
        min_energy: float = MIN_BEAT_ENERGY,
    ) -> None:
        if history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {history_size}")
        if stddev_multiplier < 0:
            raise ValueError(f"stddev_multiplier must be >= 0, got {stddev_multiplier}")
        self._history: deque[float] = deque([0.0] * history_size, maxlen=history_size)
        self.stddev_multiplier = stddev_multiplier
        self.min_energy = min_energy

    @property
    def history(self) -> tuple[float, ...]:
        """Snapshot of the rolling window, oldest first."""
        return tuple(self._history)

    def update(self, combined_energy: float) -> BeatResult:
        """Append one frame's combined energy and evaluate the beat rule.

        Non-finite input is treated as 0.0 (silence).

        Args:
            combined_energy: bass + mid + high for the current frame (0–3).

        Returns:
            BeatResult with the decision, onset strength and threshold used.
        """
        energy = float(combined_energy)
        if not math.isfinite(energy):
            energy = 0.0

        self._history.append(energy)

        avg = statistics.mean(self._history)
        variance = statistics.pvariance(self._history, mu=avg)
        threshold = avg + math.sqrt(variance) * self.stddev_multiplier

        beat = energy > threshold and energy > self.min_energy
        onset = max(0.0, energy - threshold)
        return BeatResult(beat_detected=beat, onset_strength=onset, threshold=threshold)

    def reset(self) -> None:
        """Refill the window with silence (e.g. when the audio source changes)."""
        self._history.extend([0.0] * self._history.maxlen)
