"""
core/audio/features.py — Pure per-frame DSP feature extraction.

All functions accept byte-valued numpy arrays (0–255) as delivered by the
capture collaborator once per tick and return plain floats. No state, no
I/O: the only stateful piece of the pipeline (the rolling beat history)
lives in core/audio/beat.py and is injected into extract_features().

Input conventions:
    freq: frequency-magnitude bins, 0 = silent, 255 = max_decibels
    time: time-domain samples, 128 = zero line

Design:
    - Every division is guarded; degenerate frames (empty, all-zero)
      produce 0.0 features instead of raising.
    - Bin i maps to frequency i * sample_rate / (2 * N), N = number of bins.
    - `extract_features()` is the high-level aggregator. Pass a BeatDetector
      to have beat_detected / onset_strength populated.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from core.audio.types import AudioFeatures

if TYPE_CHECKING:
    from core.audio.beat import BeatDetector

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BYTE_MAX: float = 255.0
TIME_DOMAIN_CENTER: float = 128.0

# Band edges as fractions of the bin count
BASS_BAND_END: float = 0.1  # bins [0, 10%)
MID_BAND_END: float = 0.5  # bins [10%, 50%); high = [50%, 100%)

ROLLOFF_FRACTION: float = 0.9


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _as_frame(data: np.ndarray | list[int] | bytes) -> np.ndarray:
    """Coerce a capture buffer to a 1-D float64 array clipped to [0, 255]."""
    if isinstance(data, (bytes, bytearray)):
        arr = np.frombuffer(bytes(data), dtype=np.uint8).astype(np.float64)
    else:
        arr = np.asarray(data, dtype=np.float64).ravel()
    return np.clip(np.nan_to_num(arr, nan=0.0), 0.0, BYTE_MAX)


def _bin_frequencies(n_bins: int, sample_rate: int) -> np.ndarray:
    """Centre frequency (Hz) of each bin: i * sr / (2N)."""
    return np.arange(n_bins, dtype=np.float64) * sample_rate / (2.0 * n_bins)


def _band_mean(band: np.ndarray) -> float:
    if band.size == 0:
        return 0.0
    return float(band.mean() / BYTE_MAX)


# ---------------------------------------------------------------------------
# Frequency-domain features
# ---------------------------------------------------------------------------


def band_energies(freq: np.ndarray) -> tuple[float, float, float]:
    """Split the spectrum into bass / mid / high bands and average each.

    Bass = first 10% of bins, mid = 10%–50%, high = remaining 50%.
    Band edges use floor(), so with fewer than 10 bins the bass band is
    empty and reports 0.0.

    Args:
        freq: Frequency-magnitude bins (0–255).

    Returns:
        (bass, mid, high), each the band mean normalized to [0, 1].
    """
    mags = _as_frame(freq)
    n = mags.size
    bass_end = math.floor(n * BASS_BAND_END)
    mid_end = math.floor(n * MID_BAND_END)
    return (
        _band_mean(mags[:bass_end]),
        _band_mean(mags[bass_end:mid_end]),
        _band_mean(mags[mid_end:]),
    )


def spectral_centroid(freq: np.ndarray, sample_rate: int) -> float:
    """Magnitude-weighted mean frequency in Hz (brightness).

    Returns:
        Centroid in Hz. 0.0 when the magnitude sum is zero.
    """
    mags = _as_frame(freq) / BYTE_MAX
    total = float(mags.sum())
    if total <= 0.0:
        return 0.0
    freqs = _bin_frequencies(mags.size, sample_rate)
    return float(np.dot(freqs, mags) / total)


def spectral_rolloff(
    freq: np.ndarray,
    sample_rate: int,
    fraction: float = ROLLOFF_FRACTION,
) -> float:
    """Frequency below which `fraction` of the cumulative magnitude lies.

    Scans from bin 0 upward and reports the first bin whose cumulative
    normalized magnitude reaches fraction * total.

    Returns:
        Rolloff in Hz. 0.0 for empty or silent frames.
    """
    mags = _as_frame(freq) / BYTE_MAX
    if mags.size == 0:
        return 0.0
    total = float(mags.sum())
    if total <= 0.0:
        return 0.0
    cumulative = np.cumsum(mags)
    reached = cumulative >= total * fraction
    if not reached.any():
        return 0.0
    index = int(np.argmax(reached))
    return float(index * sample_rate / (2.0 * mags.size))


def dominant_pitch(freq: np.ndarray, sample_rate: int) -> float:
    """Estimate the fundamental as the strongest bin in the lower half.

    Bin 0 (DC) is skipped. Ties resolve to the lowest bin.

    Returns:
        Frequency in Hz. 0.0 when every candidate bin is silent.
    """
    mags = _as_frame(freq)
    n = mags.size
    upper = math.ceil(n / 2)
    candidates = mags[1:upper]
    if candidates.size == 0 or float(candidates.max()) <= 0.0:
        return 0.0
    index = int(np.argmax(candidates)) + 1
    return float(index * sample_rate / (2.0 * n))


# ---------------------------------------------------------------------------
# Time-domain features
# ---------------------------------------------------------------------------


def zero_crossing_rate(time: np.ndarray) -> float:
    """Fraction of adjacent sample pairs that cross the 128 midline.

    A sample at exactly 128 counts as "not above" the line.

    Returns:
        Crossings divided by the frame length. 0.0 for empty frames.
    """
    samples = _as_frame(time)
    if samples.size == 0:
        return 0.0
    above = samples > TIME_DOMAIN_CENTER
    crossings = int(np.count_nonzero(above[1:] != above[:-1]))
    return crossings / samples.size


def rms(time: np.ndarray) -> float:
    """Root-mean-square of the frame after mapping samples to [-1, 1].

    Returns:
        RMS in [0, 1]. 0.0 for empty frames.
    """
    samples = _as_frame(time)
    if samples.size == 0:
        return 0.0
    centered = (samples - TIME_DOMAIN_CENTER) / TIME_DOMAIN_CENTER
    return float(np.sqrt(np.mean(centered * centered)))


# ---------------------------------------------------------------------------
# Full frame aggregator
# ---------------------------------------------------------------------------


def extract_features(
    freq: np.ndarray,
    time: np.ndarray,
    *,
    sample_rate: int,
    beat_detector: BeatDetector | None = None,
) -> AudioFeatures:
    """Compute a full AudioFeatures snapshot for one analysis tick.

    Pipeline:
        1. band_energies(freq) → bass, mid, high
        2. spectral_centroid / spectral_rolloff / dominant_pitch (freq)
        3. zero_crossing_rate / rms (time)
        4. beat_detector.update(bass + mid + high) if provided

    Args:
        freq: Frequency-magnitude bins (0–255).
        time: Time-domain samples (0–255, centre 128). Same length as freq.
        sample_rate: Sample rate of the captured signal in Hz.
        beat_detector: Optional rolling detector. None = no beat tracking
                       (beat_detected=False, onset_strength=0.0).

    Returns:
        Immutable AudioFeatures.

    Raises:
        ValueError: If freq and time have different lengths.
    """
    mags = _as_frame(freq)
    samples = _as_frame(time)
    if mags.size != samples.size:
        raise ValueError(
            f"frequency and time-domain frames must have equal length, "
            f"got {mags.size} and {samples.size}"
        )

    bass, mid, high = band_energies(mags)

    beat_detected = False
    onset_strength = 0.0
    if beat_detector is not None:
        result = beat_detector.update(bass + mid + high)
        beat_detected = result.beat_detected
        onset_strength = result.onset_strength

    return AudioFeatures(
        bass_energy=bass,
        mid_energy=mid,
        high_energy=high,
        spectral_centroid=spectral_centroid(mags, sample_rate),
        spectral_rolloff=spectral_rolloff(mags, sample_rate),
        zero_crossing_rate=zero_crossing_rate(samples),
        rms=rms(samples),
        beat_detected=beat_detected,
        onset_strength=onset_strength,
        pitch=dominant_pitch(mags, sample_rate),
    )
