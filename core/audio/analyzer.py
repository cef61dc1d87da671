"""
core/audio/analyzer.py — Stateful per-tick analysis service.

SpectralAnalyzer is an explicit service object owned by the caller (there
is no process-wide singleton). It wires a capture collaborator
(`FrameSource`) to the pure feature extractors in features.py and the
rolling BeatDetector, and fans each resulting AudioFeatures snapshot out
to observers.

Two ways to consume features:
    push — subscribe(callback) / on_beat(callback), invoked synchronously
           once per tick, in subscription order
    pull — the `latest` property returns the most recent snapshot

Threading: one analyser belongs to one tick loop (~60 Hz host frame
loop). Snapshots are immutable, so handing `latest` to a generation
request on another thread is safe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import numpy as np

from core.audio.beat import BeatDetector
from core.audio.features import extract_features
from core.audio.types import AudioFeatures
from core.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from infrastructure.metrics import record_frame

logger = logging.getLogger(__name__)

FeaturesCallback = Callable[[AudioFeatures], None]
BeatCallback = Callable[[float], None]


@runtime_checkable
class FrameSource(Protocol):
    """
    Protocol for audio capture collaborators.

    Any object with these methods can feed the analyser; no inheritance
    required. Retry policy on failure belongs to the source, not here.
    """

    def open(self) -> None:
        """Acquire the signal source. Raise on failure."""
        ...

    def read_frame(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (frequency_bins, time_samples), equal length, 0–255."""
        ...

    def close(self) -> None:
        """Release the signal source."""
        ...


class SpectralAnalyzer:
    """Converts capture frames into AudioFeatures snapshots, once per tick.

    Args:
        config:        Analyser configuration (sample rate, FFT size).
        beat_detector: Optional detector instance; a default one is created
                       when omitted.

    Example:
        >>> analyzer = SpectralAnalyzer()
        >>> features = analyzer.process(np.zeros(1024), np.full(1024, 128))
        >>> features.rms
        0.0
    """

    def __init__(
        self,
        config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
        *,
        beat_detector: BeatDetector | None = None,
    ) -> None:
        self.config = config
        self.beat_detector = beat_detector if beat_detector is not None else BeatDetector()
        self._source: FrameSource | None = None
        self._latest: AudioFeatures | None = None
        self._observers: list[FeaturesCallback] = []
        self._beat_observers: list[BeatCallback] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, source: FrameSource) -> bool:
        """Open the capture source and attach it to this analyser.

        A previously attached source is closed first.

        Returns:
            True on success. False if the source failed to open; the error
            is logged and no retry is attempted.
        """
        self._close_source()
        try:
            source.open()
        except Exception as exc:
            logger.error("Failed to initialize audio source %r: %s", source, exc)
            return False
        self._source = source
        self.beat_detector.reset()
        logger.info(
            "SpectralAnalyzer initialized (fft_size=%d, sample_rate=%d)",
            self.config.fft_size,
            self.config.sample_rate,
        )
        return True

    @property
    def is_initialized(self) -> bool:
        return self._source is not None

    def dispose(self) -> None:
        """Close the source and drop all observers and history."""
        self._close_source()
        self._observers.clear()
        self._beat_observers.clear()
        self.reset()

    def _close_source(self) -> None:
        if self._source is None:
            return
        try:
            self._source.close()
        except Exception as exc:
            logger.warning("Error while closing audio source: %s", exc)
        self._source = None

    def reset(self) -> None:
        """Clear beat history and the latest snapshot."""
        self.beat_detector.reset()
        self._latest = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: FeaturesCallback) -> Callable[[], None]:
        """Register a callback invoked with every new snapshot.

        Returns:
            A zero-argument function that removes the subscription.
        """
        self._observers.append(callback)
        return lambda: self._remove(self._observers, callback)

    def on_beat(self, callback: BeatCallback) -> Callable[[], None]:
        """Register a callback invoked with the onset strength on each beat."""
        self._beat_observers.append(callback)
        return lambda: self._remove(self._beat_observers, callback)

    @staticmethod
    def _remove(observers: list, callback: Callable) -> None:
        if callback in observers:
            observers.remove(callback)

    def _notify(self, features: AudioFeatures) -> None:
        for callback in list(self._observers):
            try:
                callback(features)
            except Exception:
                logger.exception("Features observer %r failed", callback)
        if features.beat_detected:
            for beat_callback in list(self._beat_observers):
                try:
                    beat_callback(features.onset_strength)
                except Exception:
                    logger.exception("Beat observer %r failed", beat_callback)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    @property
    def latest(self) -> AudioFeatures | None:
        """Most recent snapshot, or None before the first tick."""
        return self._latest

    def process(self, freq: np.ndarray, time: np.ndarray) -> AudioFeatures:
        """Analyse one pair of capture buffers and publish the result.

        Raises:
            ValueError: If the buffers have different lengths.
        """
        features = extract_features(
            freq,
            time,
            sample_rate=self.config.sample_rate,
            beat_detector=self.beat_detector,
        )
        self._latest = features
        record_frame(beat=features.beat_detected)
        self._notify(features)
        return features

    def tick(self) -> AudioFeatures | None:
        """Pull one frame from the attached source and process it.

        Returns:
            The new snapshot, or None if the analyser is not initialized.
        """
        if self._source is None:
            logger.error("SpectralAnalyzer.tick() called before initialize()")
            return None
        freq, time = self._source.read_frame()
        return self.process(freq, time)
