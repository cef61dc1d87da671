"""
Phrase generator protocol for the composition engine.

Defines the contract that the melody, harmony, rhythm and texture
generators satisfy. This module is pure — no I/O, no shared state.

Any class with the right attributes and method signature satisfies the
protocol without inheriting from it.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from core.music_theory.scales import note_to_pitch_class
from core.music_theory.types import GenerationConfig, MusicalPhrase, Note, PhraseKind


@runtime_checkable
class PhraseGenerator(Protocol):
    """
    Protocol for a single generator layer.

    Attributes:
        name:   Human-readable generator name, used in logs.
        kind:   The phrase slot this generator fills.
        loaded: False when the generator cannot currently produce output;
                the engine then reports its slot as unavailable.
    """

    name: str
    kind: PhraseKind
    loaded: bool

    def generate(self, config: GenerationConfig, rng: random.Random) -> MusicalPhrase:
        """
        Produce one phrase for the given request.

        Args:
            config: Immutable request parameters.
            rng: Random source owned by this call. Pass a seeded
                ``random.Random`` for reproducible output.

        Returns:
            A MusicalPhrase whose notes are ordered by start time.
        """
        ...


def key_offset(config: GenerationConfig) -> int:
    """Semitone transposition for the configured key (C = 0)."""
    return note_to_pitch_class(config.key_signature)


def build_phrase(
    notes: Iterable[Note],
    config: GenerationConfig,
    kind: PhraseKind,
) -> MusicalPhrase:
    """Wrap generated notes into a phrase, ordered by start time.

    Sorting is stable, so notes sharing an onset keep generation order.
    """
    ordered = tuple(sorted(notes, key=lambda n: n.start_time))
    return MusicalPhrase(
        notes=ordered,
        key=config.key_signature,
        scale=config.scale_type,
        style=config.style,
        kind=kind,
        tempo=config.tempo,
    )
