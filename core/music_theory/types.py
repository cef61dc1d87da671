"""
core/music_theory/types.py — Frozen value objects for the generation engine.

All types are immutable frozen dataclasses — safe to hash, share between
worker threads, and hand to playback collaborators. No I/O, no side
effects, no external dependencies beyond stdlib.

Types:
    ScaleType        — closed set of supported scales
    Style            — closed set of supported composition styles
    PhraseKind       — which generator produced a phrase
    Note             — one symbolic note event (times in beats)
    MusicalPhrase    — an ordered note sequence plus musical context
    GenerationConfig — immutable request parameters for every generator
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from core.audio.types import AudioFeatures, AudioInfluence

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ScaleType(str, Enum):
    """Scales the generators can draw pitches from."""

    MAJOR = "major"
    MINOR = "minor"
    DORIAN = "dorian"
    MIXOLYDIAN = "mixolydian"
    PENTATONIC = "pentatonic"
    BLUES = "blues"


class Style(str, Enum):
    """Composition styles. Each one selects its own templates."""

    CLASSICAL = "classical"
    JAZZ = "jazz"
    ELECTRONIC = "electronic"
    AMBIENT = "ambient"
    EXPERIMENTAL = "experimental"


class PhraseKind(str, Enum):
    """The four cooperating generator layers."""

    MELODY = "melody"
    HARMONY = "harmony"
    RHYTHM = "rhythm"
    TEXTURE = "texture"


# ---------------------------------------------------------------------------
# Note
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Note:
    """A single symbolic note event.

    Times are expressed in beats from the start of the phrase.

    Attributes:
        pitch:      MIDI note number (0–127). C4 = 60.
        velocity:   Normalized loudness (0.0–1.0).
        start_time: Onset in beats (>= 0).
        end_time:   Release in beats. Always > start_time.
        duration:   end_time - start_time, stored for playback convenience.
    """

    pitch: int
    velocity: float
    start_time: float
    end_time: float
    duration: float

    def __post_init__(self) -> None:
        if not (0 <= self.pitch <= 127):
            raise ValueError(f"Note.pitch must be in [0, 127], got {self.pitch}")
        if not (0.0 <= self.velocity <= 1.0):
            raise ValueError(f"Note.velocity must be in [0.0, 1.0], got {self.velocity}")
        if self.start_time < 0:
            raise ValueError(f"Note.start_time must be >= 0, got {self.start_time}")
        if self.duration <= 0:
            raise ValueError(f"Note.duration must be > 0, got {self.duration}")
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Note.end_time ({self.end_time}) must be > start_time ({self.start_time})"
            )

    @classmethod
    def at(cls, pitch: int, velocity: float, start_time: float, duration: float) -> Note:
        """Build a note from onset + duration, deriving end_time."""
        return cls(
            pitch=pitch,
            velocity=velocity,
            start_time=start_time,
            end_time=start_time + duration,
            duration=duration,
        )

    @property
    def name(self) -> str:
        """Scientific pitch name, e.g. 'C4', 'F#5'."""
        from core.music_theory.scales import midi_to_note_name  # local import to avoid circularity

        return midi_to_note_name(self.pitch)

    @property
    def frequency(self) -> float:
        """Equal-temperament frequency in Hz (A4 = 440)."""
        from core.music_theory.scales import midi_to_frequency  # local import to avoid circularity

        return midi_to_frequency(self.pitch)


# ---------------------------------------------------------------------------
# MusicalPhrase
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MusicalPhrase:
    """The output of one generator call.

    Attributes:
        notes:          Notes ordered by start_time (non-decreasing)
        key:            Key signature the phrase was generated in, e.g. "C"
        scale:          Scale used
        style:          Style used
        kind:           Which generator produced the phrase
        tempo:          Playback tempo in BPM
        time_signature: (beats per bar, beat unit)
    """

    notes: tuple[Note, ...]
    key: str
    scale: ScaleType
    style: Style
    kind: PhraseKind
    tempo: float = 120.0
    time_signature: tuple[int, int] = (4, 4)

    def __post_init__(self) -> None:
        if not (math.isfinite(self.tempo) and self.tempo > 0):
            raise ValueError(f"MusicalPhrase.tempo must be a finite number > 0, got {self.tempo}")
        for prev, cur in zip(self.notes, self.notes[1:]):
            if cur.start_time < prev.start_time:
                raise ValueError("MusicalPhrase.notes must be ordered by start_time")

    def __len__(self) -> int:
        return len(self.notes)

    @property
    def end_time(self) -> float:
        """Latest release time in beats (0.0 for an empty phrase)."""
        return max((n.end_time for n in self.notes), default=0.0)

    @property
    def pitch_range(self) -> tuple[int, int] | None:
        """(lowest, highest) MIDI pitch, or None for an empty phrase."""
        if not self.notes:
            return None
        pitches = [n.pitch for n in self.notes]
        return min(pitches), max(pitches)


# ---------------------------------------------------------------------------
# GenerationConfig
# ---------------------------------------------------------------------------

TEMPERATURE_MIN: float = 0.1
TEMPERATURE_MAX: float = 2.0
MAX_STEPS: int = 1024


def _clamp(value: float, low: float, high: float, default: float) -> float:
    v = float(value)
    if math.isnan(v):
        return default
    return max(low, min(high, v))


@dataclass(frozen=True)
class GenerationConfig:
    """Immutable request parameters shared by all four generators.

    Numeric fields outside their documented range are clamped rather than
    rejected. Scale and style accept enum members or their string values;
    unknown strings raise ValueError here, so generators never see an
    unsupported style.

    Attributes:
        temperature:         Creativity, 0.1 (conservative) to 2.0.
        steps:               Number of generation steps, 1 to MAX_STEPS.
        key_signature:       Root note name, e.g. "C", "F#", "Bb".
        scale_type:          Scale to draw pitches from.
        style:               Composition style.
        rhythm_complexity:   0.0–1.0, probability of rhythmic variation.
        harmonic_complexity: 0.0–1.0, probability of melodic dissonance.
        audio_analysis:      Optional live snapshot driving audio reactivity.
        seed_sequence:       Optional scale degrees; the first one seeds the
                             melody's starting state.
        tempo:               Tempo in BPM stamped on every phrase.

    Example:
        >>> cfg = GenerationConfig(temperature=5.0, style="jazz")
        >>> cfg.temperature, cfg.style
        (2.0, <Style.JAZZ: 'jazz'>)
    """

    temperature: float = 1.0
    steps: int = 16
    key_signature: str = "C"
    scale_type: ScaleType = ScaleType.MAJOR
    style: Style = Style.CLASSICAL
    rhythm_complexity: float = 0.5
    harmonic_complexity: float = 0.3
    audio_analysis: AudioFeatures | None = None
    seed_sequence: tuple[int, ...] = field(default_factory=tuple)
    tempo: float = 120.0

    def __post_init__(self) -> None:
        from core.music_theory.scales import normalize_note  # local import to avoid circularity

        set_ = object.__setattr__
        set_(self, "scale_type", ScaleType(self.scale_type))
        set_(self, "style", Style(self.style))
        set_(self, "key_signature", normalize_note(self.key_signature))
        set_(
            self,
            "temperature",
            _clamp(self.temperature, TEMPERATURE_MIN, TEMPERATURE_MAX, 1.0),
        )
        set_(self, "steps", int(_clamp(self.steps, 1, MAX_STEPS, 16)))
        set_(self, "rhythm_complexity", _clamp(self.rhythm_complexity, 0.0, 1.0, 0.5))
        set_(self, "harmonic_complexity", _clamp(self.harmonic_complexity, 0.0, 1.0, 0.3))
        set_(self, "seed_sequence", tuple(int(d) for d in self.seed_sequence))
        if not (math.isfinite(self.tempo) and self.tempo > 0):
            raise ValueError(f"tempo must be a finite number > 0, got {self.tempo}")

    @property
    def influence(self) -> AudioInfluence:
        """Audio influence terms; neutral (0.5) when no analysis is attached."""
        return AudioInfluence.from_features(self.audio_analysis)
