"""Prometheus metrics for the audio-reactive composition core.

Exposes musical context in metrics so dashboards show how the analyser and
the generators behave during a session, not just generic timings.

Metrics:
    composer_frames_analyzed_total       Counter of analysis ticks processed
    composer_beats_detected_total        Counter of frames flagged as beats
    composer_phrases_total               Counter by phrase kind and status
                                         (ok/unavailable/error/cancelled)
    composer_composition_latency_seconds Histogram of generate_composition()

All metrics live on a private CollectorRegistry so importing this module
never pollutes the process-global default registry.

Usage::

    from infrastructure.metrics import record_frame, record_phrase
"""

from __future__ import annotations

import logging
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

REGISTRY = CollectorRegistry()

frames_analyzed_total = Counter(
    "composer_frames_analyzed_total",
    "Analysis ticks processed by SpectralAnalyzer",
    registry=REGISTRY,
)

beats_detected_total = Counter(
    "composer_beats_detected_total",
    "Analysis ticks on which a beat was detected",
    registry=REGISTRY,
)

phrases_total = Counter(
    "composer_phrases_total",
    "Generated phrases by kind and status",
    ["kind", "status"],
    registry=REGISTRY,
)

composition_latency_seconds = Histogram(
    "composer_composition_latency_seconds",
    "Wall-clock time of a full four-layer composition",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
    registry=REGISTRY,
)

# Flipped off by infrastructure.settings when COMPOSER_METRICS_ENABLED=0.
_enabled = True


def set_enabled(enabled: bool) -> None:
    """Turn recording on or off process-wide."""
    global _enabled
    _enabled = enabled
    logger.info("Composer metrics %s", "enabled" if enabled else "disabled")


def is_enabled() -> bool:
    return _enabled


# ---------------------------------------------------------------------------
# Public helpers — all are no-ops while recording is disabled
# ---------------------------------------------------------------------------


def record_frame(*, beat: bool) -> None:
    """Record one analysis tick.

    Args:
        beat: Whether the tick was flagged as a beat.
    """
    if not _enabled:
        return
    frames_analyzed_total.inc()
    if beat:
        beats_detected_total.inc()


def record_phrase(*, kind: str, status: str) -> None:
    """Record the outcome of a single generator call.

    Args:
        kind: Phrase kind, e.g. "melody".
        status: One of "ok", "unavailable", "error", "cancelled".
    """
    if _enabled:
        phrases_total.labels(kind=kind, status=status).inc()


def record_composition(latency_seconds: float) -> None:
    """Record the wall-clock time of a full composition."""
    if _enabled:
        composition_latency_seconds.observe(latency_seconds)


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            composition = engine.generate_composition(config)
        record_composition(t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
