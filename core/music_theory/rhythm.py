"""
core/music_theory/rhythm.py — Percussive onset generator.

generate() picks one of the two 8-slot templates for the style and tiles
it across ceil(steps / 16) bars, one slot per sixteenth (0.25 beat).

Per slot with template intensity > 0:
    factor    = U[0.5, 1.0) with probability rhythm_complexity, else 1.0
    intensity = template * (0.7 + bass * 0.3) * factor
    emit only when intensity > MIN_INTENSITY (0.1)
    pitch     = 36 + floor(mid * 12)     kick-like, up to an octave higher
    velocity  = intensity

With rhythm_complexity = 0 and full bass the output reproduces the
template exactly, slot for slot.
"""

from __future__ import annotations

import math
import random

from core.music_theory.generator import build_phrase
from core.music_theory.scales import PERCUSSION_TEMPLATES, clamp_pitch, clamp_unit
from core.music_theory.types import GenerationConfig, MusicalPhrase, Note, PhraseKind

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STEPS_PER_BAR: int = 16
SLOT_BEATS: float = 0.25  # sixteenth note
HIT_LENGTH_RATIO: float = 0.8
MIN_INTENSITY: float = 0.1
KICK_PITCH: int = 36  # C2, GM bass drum
RHYTHM_PITCH_RANGE: tuple[int, int] = (36, 48)


def bar_count(steps: int) -> int:
    """Number of template repetitions for a step count."""
    return max(1, math.ceil(steps / STEPS_PER_BAR))


class RhythmGenerator:
    """Template-driven percussion layer."""

    name = "RhythmGenerator"
    kind = PhraseKind.RHYTHM

    def __init__(self) -> None:
        self.loaded = True

    def generate(self, config: GenerationConfig, rng: random.Random | None = None) -> MusicalPhrase:
        """Generate a percussion phrase.

        Returns:
            MusicalPhrase of kind RHYTHM; notes sit on the 0.25-beat grid.
        """
        rng = rng if rng is not None else random.Random()
        template = rng.choice(PERCUSSION_TEMPLATES[config.style])
        influence = config.influence
        audio_gain = 0.7 + influence.bass * 0.3
        pitch = clamp_pitch(KICK_PITCH + math.floor(influence.mid * 12), RHYTHM_PITCH_RANGE)
        hit_length = SLOT_BEATS * HIT_LENGTH_RATIO

        notes: list[Note] = []
        slot_index = 0
        for _bar in range(bar_count(config.steps)):
            for intensity in template:
                if intensity > 0:
                    if rng.random() < config.rhythm_complexity:
                        factor = rng.random() * 0.5 + 0.5
                    else:
                        factor = 1.0
                    final = intensity * audio_gain * factor
                    if final > MIN_INTENSITY:
                        notes.append(
                            Note.at(pitch, clamp_unit(final), slot_index * SLOT_BEATS, hit_length)
                        )
                slot_index += 1

        return build_phrase(notes, config, PhraseKind.RHYTHM)
