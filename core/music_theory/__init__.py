"""
core/music_theory/ — Phrase generators and the tables they read.

Exports:
    Types:      Note, MusicalPhrase, GenerationConfig, ScaleType, Style, PhraseKind
    Scales:     SCALE_INTERVALS, midi_to_note_name, note_name_to_midi, midi_to_frequency
    Markov:     MarkovChain, TRAINING_CORPUS
    Generators: MelodyGenerator, HarmonyGenerator, RhythmGenerator, TextureGenerator
"""

from core.music_theory.generator import PhraseGenerator
from core.music_theory.harmony import HarmonyGenerator
from core.music_theory.markov import TRAINING_CORPUS, MarkovChain
from core.music_theory.melody import MelodyGenerator
from core.music_theory.rhythm import RhythmGenerator
from core.music_theory.scales import (
    SCALE_INTERVALS,
    midi_to_frequency,
    midi_to_note_name,
    note_name_to_midi,
)
from core.music_theory.texture import TextureGenerator
from core.music_theory.types import (
    GenerationConfig,
    MusicalPhrase,
    Note,
    PhraseKind,
    ScaleType,
    Style,
)

__all__ = [
    # Types
    "Note",
    "MusicalPhrase",
    "GenerationConfig",
    "ScaleType",
    "Style",
    "PhraseKind",
    # Scales
    "SCALE_INTERVALS",
    "midi_to_note_name",
    "note_name_to_midi",
    "midi_to_frequency",
    # Markov
    "MarkovChain",
    "TRAINING_CORPUS",
    # Generators
    "PhraseGenerator",
    "MelodyGenerator",
    "HarmonyGenerator",
    "RhythmGenerator",
    "TextureGenerator",
]
