"""
core/music_theory/scales.py — Static tables and pitch helpers.

Process-wide constants shared (read-only) by the four generators. Every
table is keyed by a closed enum and covers every member, so lookups never
need a fallback.

Exports:
    NOTE_NAMES                  12 chromatic note names (sharps)
    SCALE_INTERVALS             semitone intervals per ScaleType
    CHORD_PROGRESSIONS          per-Style chord templates (scale-degree sets)
    MELODY_RHYTHM_TEMPLATES     five 8-slot intensity templates for melodies
    PERCUSSION_TEMPLATES        two 8-slot intensity templates per Style

    normalize_note(note) → str
    note_to_pitch_class(note) → int
    midi_to_note_name(pitch) → str
    note_name_to_midi(name) → int
    midi_to_frequency(pitch) → float
    degree_to_semitones(degree, scale) → int
"""

from __future__ import annotations

import re
from types import MappingProxyType

from core.music_theory.types import ScaleType, Style

# ---------------------------------------------------------------------------
# Chromatic pitch classes
# ---------------------------------------------------------------------------

NOTE_NAMES: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

# Input normalisation: flat → sharp
FLAT_TO_SHARP: dict[str, str] = {
    "Db": "C#",
    "Eb": "D#",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
}

A4_MIDI: int = 69
A4_HZ: float = 440.0

_NOTE_NAME_RE = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")

# ---------------------------------------------------------------------------
# Scale intervals (semitones from root)
# ---------------------------------------------------------------------------

SCALE_INTERVALS: MappingProxyType[ScaleType, tuple[int, ...]] = MappingProxyType(
    {
        ScaleType.MAJOR: (0, 2, 4, 5, 7, 9, 11),
        ScaleType.MINOR: (0, 2, 3, 5, 7, 8, 10),
        ScaleType.DORIAN: (0, 2, 3, 5, 7, 9, 10),
        ScaleType.MIXOLYDIAN: (0, 2, 4, 5, 7, 9, 10),
        ScaleType.PENTATONIC: (0, 2, 4, 7, 9),
        ScaleType.BLUES: (0, 3, 5, 6, 7, 10),
    }
)

# ---------------------------------------------------------------------------
# Chord progressions: each chord is a tuple of scale degrees. Degrees past
# the end of the scale wrap into the next octave.
# ---------------------------------------------------------------------------

CHORD_PROGRESSIONS: MappingProxyType[Style, tuple[tuple[int, ...], ...]] = MappingProxyType(
    {
        Style.CLASSICAL: ((0, 2, 4), (3, 5, 0), (1, 3, 5), (0, 2, 4)),
        Style.JAZZ: ((0, 2, 4, 6), (1, 3, 5, 0), (4, 6, 1, 3), (0, 2, 4, 6)),
        Style.ELECTRONIC: ((0, 4), (5, 2), (3, 0), (4, 5)),
        Style.AMBIENT: ((0, 2, 4, 7), (2, 4, 7, 9), (4, 7, 9, 0), (7, 9, 0, 2)),
        Style.EXPERIMENTAL: ((0, 1, 5), (2, 6, 10), (3, 7, 11), (4, 8, 0)),
    }
)

# ---------------------------------------------------------------------------
# Rhythm templates (8 quantized steps, intensity 0.0–1.0; 0 = rest)
# ---------------------------------------------------------------------------

MELODY_RHYTHM_TEMPLATES: tuple[tuple[float, ...], ...] = (
    (1, 0, 0.5, 0, 1, 0, 0.5, 0),  # standard 4/4
    (1, 0, 0, 0.5, 0, 0, 1, 0),  # syncopated
    (1, 0.5, 0, 1, 0, 0.5, 0, 0),  # dotted
    (1, 0, 1, 0, 1, 0, 1, 0),  # straight eighths
    (1, 0, 0, 1, 0, 0, 1, 0.5),  # complex
)

PERCUSSION_TEMPLATES: MappingProxyType[Style, tuple[tuple[float, ...], ...]] = MappingProxyType(
    {
        Style.CLASSICAL: (
            (1, 0, 0.5, 0, 1, 0, 0.5, 0),
            (1, 0, 1, 0, 1, 0, 1, 0),
        ),
        Style.JAZZ: (
            (1, 0, 0, 0.7, 0, 0.5, 0, 0.3),
            (0.8, 0.3, 0, 1, 0, 0.6, 0.4, 0),
        ),
        Style.ELECTRONIC: (
            (1, 0, 0, 0, 1, 0, 0, 0),
            (1, 0, 1, 0, 0.8, 0, 1, 0),
        ),
        Style.AMBIENT: (
            (1, 0, 0, 0, 0, 0, 0.5, 0),
            (0.6, 0, 0, 0, 0.4, 0, 0, 0),
        ),
        Style.EXPERIMENTAL: (
            (1, 0.3, 0, 0.7, 0.2, 1, 0, 0.5),
            (0.9, 0, 0.4, 0, 0.8, 0.2, 0.6, 0),
        ),
    }
)

TEMPLATE_SLOTS: int = 8


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_note(note: str) -> str:
    """Normalize a note name to sharp notation.

    Args:
        note: Note name, e.g. "Bb", "C#", "g"

    Returns:
        Canonical sharp-notation name, e.g. "A#", "C#", "G"

    Raises:
        ValueError: If note is not a recognized pitch class
    """
    name = str(note).strip()
    name = name[:1].upper() + name[1:]
    if name in FLAT_TO_SHARP:
        name = FLAT_TO_SHARP[name]
    if name not in NOTE_NAMES:
        raise ValueError(f"Unknown note {note!r}. Valid: {list(NOTE_NAMES)}")
    return name


def note_to_pitch_class(note: str) -> int:
    """Return the pitch class (0–11) of a note name, e.g. "A" → 9."""
    return NOTE_NAMES.index(normalize_note(note))


def midi_to_note_name(pitch: int) -> str:
    """Return scientific pitch notation for a MIDI number.

    Octave numbering puts middle C (60) at C4, so MIDI 0 is "C-1".

    Raises:
        ValueError: If pitch is outside [0, 127]
    """
    if not (0 <= pitch <= 127):
        raise ValueError(f"MIDI pitch must be in [0, 127], got {pitch}")
    octave, pc = divmod(pitch, 12)
    return f"{NOTE_NAMES[pc]}{octave - 1}"


def note_name_to_midi(name: str) -> int:
    """Parse scientific pitch notation ("C4", "Bb3", "C#-1") to a MIDI number.

    Raises:
        ValueError: If the name cannot be parsed or falls outside [0, 127]
    """
    match = _NOTE_NAME_RE.match(name.strip())
    if match is None:
        raise ValueError(f"Cannot parse note name {name!r}")
    letter, accidental, octave = match.groups()
    pc = note_to_pitch_class(letter.upper() + accidental)
    pitch = (int(octave) + 1) * 12 + pc
    if not (0 <= pitch <= 127):
        raise ValueError(f"Note {name!r} is outside the MIDI range")
    return pitch


def midi_to_frequency(pitch: float) -> float:
    """Equal-temperament conversion: 440 * 2 ** ((pitch - 69) / 12)."""
    return A4_HZ * 2.0 ** ((pitch - A4_MIDI) / 12.0)


def degree_to_semitones(degree: int, scale: ScaleType) -> int:
    """Semitone offset of a scale degree from the root.

    Degrees past the end of the scale wrap into higher octaves, negative
    degrees into lower ones.

    Examples:
        >>> degree_to_semitones(7, ScaleType.MAJOR)
        12
        >>> degree_to_semitones(5, ScaleType.PENTATONIC)
        12
    """
    intervals = SCALE_INTERVALS[scale]
    octave, index = divmod(degree, len(intervals))
    return intervals[index] + 12 * octave


def clamp_pitch(pitch: int, pitch_range: tuple[int, int]) -> int:
    """Clamp a MIDI pitch into an inclusive (low, high) range."""
    low, high = pitch_range
    return max(low, min(high, pitch))


def clamp_unit(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
