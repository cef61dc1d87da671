"""
core/music_theory/harmony.py — Chord-progression harmony generator.

generate() voices the style's four-chord template as stacked notes, one
chord every CHORD_BEATS beats.

Per chord tone:
    pitch    = 48 + key + semitones(degree) + 12 * voicing
               voicing = 0 (bass > 0.7), 1 (bass > 0.3), 2 otherwise:
               heavy bass keeps the pad low, thin bass lifts it
    start    = chord_start + (u - 0.5) * temperature * 0.1, u ~ U[0, 1)
               (clamped at 0 for the first chord)
    velocity = clamp((0.4 + energy * 0.3) * (1 - 0.1 * voice), 0.2, 0.8)
               the first-listed voice is loudest
    length   = 90% of CHORD_BEATS, leaving a gap before the next chord

Design:
    - Pure function of (config, rng); the progression tables are shared
      read-only constants from scales.py.
    - chord_groups() recovers per-chord note groups from a phrase even
      after timing jitter has reordered notes.
"""

from __future__ import annotations

import random

from core.music_theory.generator import build_phrase, key_offset
from core.music_theory.scales import (
    CHORD_PROGRESSIONS,
    clamp_pitch,
    clamp_unit,
    degree_to_semitones,
)
from core.music_theory.types import (
    GenerationConfig,
    MusicalPhrase,
    Note,
    PhraseKind,
    Style,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HARMONY_BASE_PITCH: int = 48  # C3
CHORD_BEATS: float = 2.0
NOTE_LENGTH_RATIO: float = 0.9
JITTER_SCALE: float = 0.1
HARMONY_PITCH_RANGE: tuple[int, int] = (24, 108)

# Bass-energy thresholds selecting the octave spread
WIDE_VOICING_BASS: float = 0.7
MID_VOICING_BASS: float = 0.3


def _voicing_octaves(bass: float) -> int:
    """Octaves to lift the chord by, from bass energy (0–1)."""
    if bass > WIDE_VOICING_BASS:
        return 0
    if bass > MID_VOICING_BASS:
        return 1
    return 2


def progression_for(style: Style) -> tuple[tuple[int, ...], ...]:
    """Chord template (tuples of scale degrees) for a style."""
    return CHORD_PROGRESSIONS[Style(style)]


def chord_groups(phrase: MusicalPhrase) -> list[tuple[Note, ...]]:
    """Split a harmony phrase back into its chords.

    Jitter moves onsets by at most ±0.1 beat, so rounding start / CHORD_BEATS
    recovers the chord index of every note.
    """
    groups: dict[int, list[Note]] = {}
    for note in phrase.notes:
        groups.setdefault(round(note.start_time / CHORD_BEATS), []).append(note)
    return [tuple(groups[i]) for i in sorted(groups)]


class HarmonyGenerator:
    """Stacked-chord pad following a per-style progression."""

    name = "HarmonyGenerator"
    kind = PhraseKind.HARMONY

    def __init__(self) -> None:
        self.loaded = True

    def generate(self, config: GenerationConfig, rng: random.Random | None = None) -> MusicalPhrase:
        """Generate one pass through the style's chord progression.

        Returns:
            MusicalPhrase of kind HARMONY with len(progression) chords.
        """
        rng = rng if rng is not None else random.Random()
        influence = config.influence
        voicing = _voicing_octaves(influence.bass)
        base_velocity = 0.4 + influence.energy * 0.3
        root = HARMONY_BASE_PITCH + key_offset(config)
        note_length = CHORD_BEATS * NOTE_LENGTH_RATIO

        notes: list[Note] = []
        for chord_index, chord in enumerate(progression_for(config.style)):
            chord_start = chord_index * CHORD_BEATS
            for voice, degree in enumerate(chord):
                pitch = clamp_pitch(
                    root + degree_to_semitones(degree, config.scale_type) + voicing * 12,
                    HARMONY_PITCH_RANGE,
                )
                jitter = (rng.random() - 0.5) * config.temperature * JITTER_SCALE
                start = max(0.0, chord_start + jitter)
                velocity = clamp_unit(base_velocity * (1 - voice * 0.1), 0.2, 0.8)
                notes.append(Note.at(pitch, velocity, start, note_length))

        return build_phrase(notes, config, PhraseKind.HARMONY)
