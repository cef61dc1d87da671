"""
core/music_theory/texture.py — Multi-layer ambient pad generator.

Texture length is steps * 0.125 beats, split into one slot per layer.
Louder input gives more layers: ceil(energy * 4) + 2, i.e. 2–6.

Per layer:
    pitch    = key + scale[random degree] + 12 * random octave (4–6),
               then a style-specific spread:
                   ambient       uniform ±12 semitones (rounded)
                   experimental  integer jitter in [-3, 3]
                   classical     triadic offset 0, 4 or 7
                   jazz, electronic  unchanged
               clamped to [24, 96]
    start    = layer * slot + (u - 0.5) * temperature, clamped at 0
    duration = slot * U[0.8, 1.2)
    velocity = clamp(0.2 + treble * 0.3 + mid * 0.1, 0.1, 0.6)
"""

from __future__ import annotations

import math
import random

from core.music_theory.generator import build_phrase, key_offset
from core.music_theory.scales import SCALE_INTERVALS, clamp_pitch, clamp_unit
from core.music_theory.types import GenerationConfig, MusicalPhrase, Note, PhraseKind, Style

TEXTURE_BEATS_PER_STEP: float = 0.125
TEXTURE_PITCH_RANGE: tuple[int, int] = (24, 96)
MIN_LAYERS: int = 2
MAX_LAYERS: int = 6


def layer_count(energy: float) -> int:
    """2 layers for silence up to 6 for full energy."""
    return max(MIN_LAYERS, min(MAX_LAYERS, math.ceil(energy * 4) + MIN_LAYERS))


def _style_spread(style: Style, rng: random.Random) -> int:
    if style is Style.AMBIENT:
        return round(rng.random() * 24 - 12)
    if style is Style.EXPERIMENTAL:
        return rng.randint(-3, 3)
    if style is Style.CLASSICAL:
        return rng.choice((0, 4, 7))
    return 0


class TextureGenerator:
    """Long, quiet, staggered pad layers."""

    name = "TextureGenerator"
    kind = PhraseKind.TEXTURE

    def __init__(self) -> None:
        self.loaded = True

    def generate(self, config: GenerationConfig, rng: random.Random | None = None) -> MusicalPhrase:
        rng = rng if rng is not None else random.Random()
        intervals = SCALE_INTERVALS[config.scale_type]
        influence = config.influence

        texture_length = config.steps * TEXTURE_BEATS_PER_STEP
        layers = layer_count(influence.energy)
        slot = texture_length / layers
        velocity = clamp_unit(0.2 + influence.treble * 0.3 + influence.mid * 0.1, 0.1, 0.6)
        key = key_offset(config)

        notes: list[Note] = []
        for layer in range(layers):
            degree = rng.randrange(len(intervals))
            octave = rng.randrange(3) + 4
            pitch = key + intervals[degree] + octave * 12
            pitch = clamp_pitch(pitch + _style_spread(config.style, rng), TEXTURE_PITCH_RANGE)

            start = max(0.0, layer * slot + (rng.random() - 0.5) * config.temperature)
            duration = slot * (0.8 + rng.random() * 0.4)
            notes.append(Note.at(pitch, velocity, start, duration))

        return build_phrase(notes, config, PhraseKind.TEXTURE)
