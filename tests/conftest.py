"""
Shared fixtures for the test suite.

Centralizes reusable fakes (capture source, MIDI port, feature snapshots)
so individual test files don't need to repeat the boilerplate.
"""

from __future__ import annotations

import numpy as np
import pytest

from core.audio.types import AudioFeatures
from infrastructure import metrics

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FRAME_BINS: int = 1024
"""Bins per frame for the default 2048-point analyser."""


# ---------------------------------------------------------------------------
# Feature snapshot factory
# ---------------------------------------------------------------------------


def make_features(**overrides: object) -> AudioFeatures:
    """Build an ``AudioFeatures`` with mid-level defaults.

    Default attributes can be overridden via keyword arguments.
    """
    defaults: dict[str, object] = {
        "bass_energy": 0.5,
        "mid_energy": 0.5,
        "high_energy": 0.5,
        "spectral_centroid": 1000.0,
        "spectral_rolloff": 4000.0,
        "zero_crossing_rate": 0.1,
        "rms": 0.3,
    }
    defaults.update(overrides)
    return AudioFeatures(**defaults)  # type: ignore[arg-type]


def silent_frame(n: int = FRAME_BINS) -> tuple[np.ndarray, np.ndarray]:
    """(freq, time) pair for digital silence."""
    return np.zeros(n, dtype=np.uint8), np.full(n, 128, dtype=np.uint8)


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeFrameSource:
    """Scripted capture source; replays frames, then repeats the last one."""

    def __init__(self, frames=None, *, fail_open: bool = False) -> None:
        self.frames = list(frames) if frames is not None else [silent_frame()]
        self.fail_open = fail_open
        self.opened = False
        self.closed = False
        self._index = 0

    def open(self) -> None:
        if self.fail_open:
            raise RuntimeError("microphone permission denied")
        self.opened = True

    def read_frame(self):
        frame = self.frames[min(self._index, len(self.frames) - 1)]
        self._index += 1
        return frame

    def close(self) -> None:
        self.closed = True


class FakePort:
    """Collects messages sent by a scheduler instead of playing them."""

    def __init__(self) -> None:
        self.sent: list = []

    def send(self, message) -> None:
        self.sent.append(message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def features_factory():
    """The ``make_features`` factory, for tests that build several snapshots."""
    return make_features


@pytest.fixture()
def source_factory():
    """Build ``FakeFrameSource`` instances with custom frames or failures."""
    return FakeFrameSource


@pytest.fixture()
def frame_source() -> FakeFrameSource:
    return FakeFrameSource()


@pytest.fixture()
def fake_port() -> FakePort:
    return FakePort()


@pytest.fixture(autouse=True)
def _metrics_enabled():
    """Every test starts with metrics recording on."""
    metrics.set_enabled(True)
    yield
    metrics.set_enabled(True)
