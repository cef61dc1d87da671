"""
core/music_theory/melody.py — Markov-chain melody generator.

generate() walks a scale-degree Markov chain, gated by one of five 8-slot
rhythm templates, and shapes each note with the live audio snapshot.

Algorithm (per step i of config.steps, 0.5 beat per step):
    1. value = template[i % 8] * energy_multiplier
       energy_multiplier = 0.5 + energy * 0.5 (1.0 without audio)
       value == 0 → rest: no note, time still advances
    2. Next degree:
       with probability `temperature` → weighted draw from the chain
       otherwise → stepwise ±1, clamped to the scale
    3. With probability `harmonic_complexity` → degree += randint(-1, 1),
       wrapped modulo the scale length (dissonance)
    4. pitch = 60 + key + semitones(degree) + floor((bass - 0.5) * 4)
       The bass term is the audio-reactive offset in [-2, +2].
    5. velocity = clamp(value * (0.5 + treble * 0.5), 0.3, 1.0)
       duration = 0.5 * value * 2

Because rests are skipped, a phrase holds at most `steps` notes.

Design:
    - The chain is built once per generator and shared read-only.
    - All randomness flows through the injected random.Random.
    - Never raises for any valid GenerationConfig.
"""

from __future__ import annotations

import math
import random

from core.music_theory.generator import build_phrase, key_offset
from core.music_theory.markov import MarkovChain
from core.music_theory.scales import (
    MELODY_RHYTHM_TEMPLATES,
    SCALE_INTERVALS,
    clamp_pitch,
    clamp_unit,
    degree_to_semitones,
)
from core.music_theory.types import GenerationConfig, MusicalPhrase, Note, PhraseKind

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIDDLE_C: int = 60
STEP_BEATS: float = 0.5  # eighth note
MELODY_PITCH_RANGE: tuple[int, int] = (36, 96)
MIN_VELOCITY: float = 0.3
MAX_BASS_OFFSET: int = 2


def _bass_offset(bass: float) -> int:
    """Map bass energy (0–1) to a semitone offset in [-2, +2]."""
    offset = math.floor((bass - 0.5) * 4)
    return max(-MAX_BASS_OFFSET, min(MAX_BASS_OFFSET, offset))


class MelodyGenerator:
    """Markov-driven lead line.

    Args:
        chain: Transition table to walk. A chain trained on the default
               corpus is built when omitted.
    """

    name = "MelodyGenerator"
    kind = PhraseKind.MELODY

    def __init__(self, chain: MarkovChain | None = None) -> None:
        self.chain = chain if chain is not None else MarkovChain()
        self.loaded = True

    def _next_degree(
        self,
        current: int,
        scale_len: int,
        config: GenerationConfig,
        rng: random.Random,
    ) -> int:
        if rng.random() < config.temperature:
            degree = self.chain.next_degree(current, rng)
        else:
            direction = 1 if rng.random() > 0.5 else -1
            degree = max(0, min(scale_len - 1, current + direction))

        if rng.random() < config.harmonic_complexity:
            degree = (degree + rng.randint(-1, 1)) % scale_len
        return degree

    def generate(self, config: GenerationConfig, rng: random.Random | None = None) -> MusicalPhrase:
        """Generate a melody phrase of at most `config.steps` notes.

        Args:
            config: Request parameters.
            rng: Random source. A fresh unseeded one is used when omitted.

        Returns:
            MusicalPhrase of kind MELODY.
        """
        rng = rng if rng is not None else random.Random()
        scale_len = len(SCALE_INTERVALS[config.scale_type])
        template = rng.choice(MELODY_RHYTHM_TEMPLATES)

        influence = config.influence
        energy_multiplier = (
            0.5 + influence.energy * 0.5 if config.audio_analysis is not None else 1.0
        )
        pitch_offset = _bass_offset(influence.bass)
        root = MIDDLE_C + key_offset(config)

        current = config.seed_sequence[0] if config.seed_sequence else 0
        notes: list[Note] = []

        for step in range(config.steps):
            value = template[step % len(template)] * energy_multiplier
            if value > 0:
                degree = self._next_degree(current, scale_len, config, rng)
                pitch = clamp_pitch(
                    root + degree_to_semitones(degree, config.scale_type) + pitch_offset,
                    MELODY_PITCH_RANGE,
                )
                velocity = clamp_unit(value * (0.5 + influence.treble * 0.5), MIN_VELOCITY, 1.0)
                duration = STEP_BEATS * value * 2
                notes.append(Note.at(pitch, velocity, step * STEP_BEATS, duration))
                current = degree

        return build_phrase(notes, config, PhraseKind.MELODY)
