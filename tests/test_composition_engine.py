"""
Tests for core/composition/engine.py — concurrent four-layer composition.

Validates:
    - default engine fills every slot with the matching phrase kind
    - seeded compositions are reproducible across runs
    - unavailable / failing generators leave their slot empty without
      affecting the others
    - timeout and cancel abandon unfinished layers
    - registry: register, unregister, model_status
"""

from __future__ import annotations

import logging
import random
import threading
import time

import pytest

from core.composition.engine import Composition, CompositionEngine, default_generators
from core.music_theory.generator import PhraseGenerator, build_phrase
from core.music_theory.types import GenerationConfig, MusicalPhrase, Note, PhraseKind

# ---------------------------------------------------------------------------
# Fake generators
# ---------------------------------------------------------------------------


class StubGenerator:
    """Returns a single-note phrase of its kind."""

    name = "StubGenerator"

    def __init__(self, kind: PhraseKind, *, loaded: bool = True) -> None:
        self.kind = kind
        self.loaded = loaded

    def generate(self, config: GenerationConfig, rng: random.Random) -> MusicalPhrase:
        return build_phrase([Note.at(60, 0.5, 0.0, 1.0)], config, self.kind)


class ExplodingGenerator(StubGenerator):
    name = "ExplodingGenerator"

    def generate(self, config, rng):
        raise RuntimeError("model crashed")


class BlockingGenerator(StubGenerator):
    """Blocks until released (or a safety timeout) before returning."""

    name = "BlockingGenerator"

    def __init__(self, kind: PhraseKind, *, on_start=None) -> None:
        super().__init__(kind)
        self.release = threading.Event()
        self.on_start = on_start

    def generate(self, config, rng):
        if self.on_start is not None:
            self.on_start()
        self.release.wait(2.0)
        return super().generate(config, rng)


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig(steps=16, style="jazz")


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestGenerateComposition:
    def test_all_slots_filled(self, config):
        comp = CompositionEngine().generate_composition(config, seed=1)
        assert comp.is_complete
        for kind, phrase in comp.phrases():
            assert phrase.kind is kind
            assert phrase.style is config.style

    def test_seed_is_reproducible(self, config):
        engine = CompositionEngine()
        assert engine.generate_composition(config, seed=7) == engine.generate_composition(
            config, seed=7
        )

    def test_different_seeds_differ(self, config):
        engine = CompositionEngine()
        assert engine.generate_composition(config, seed=1) != engine.generate_composition(
            config, seed=2
        )

    def test_audio_snapshot_reaches_generators(self, features_factory):
        loud = features_factory(bass_energy=1.0, mid_energy=1.0, high_energy=1.0)
        comp = CompositionEngine().generate_composition(
            GenerationConfig(audio_analysis=loud), seed=3
        )
        assert len(comp.texture) == 6

    def test_generate_phrase_single_layer(self, config):
        phrase = CompositionEngine().generate_phrase(PhraseKind.HARMONY, config)
        assert phrase is not None
        assert phrase.kind is PhraseKind.HARMONY


# ---------------------------------------------------------------------------
# Degraded layers
# ---------------------------------------------------------------------------


class TestDegradedLayers:
    def test_missing_generator_leaves_slot_empty(self, config, caplog):
        engine = CompositionEngine()
        engine.unregister(PhraseKind.MELODY)
        with caplog.at_level(logging.WARNING, logger="core.composition.engine"):
            comp = engine.generate_composition(config, seed=1)
        assert comp.melody is None
        assert comp.missing == (PhraseKind.MELODY,)
        assert "not available" in caplog.text

    def test_unloaded_generator_is_unavailable(self, config):
        engine = CompositionEngine([StubGenerator(PhraseKind.RHYTHM, loaded=False)])
        assert engine.generate_phrase(PhraseKind.RHYTHM, config) is None

    def test_failing_generator_is_isolated(self, config, caplog):
        engine = CompositionEngine()
        engine.register(ExplodingGenerator(PhraseKind.HARMONY))
        with caplog.at_level(logging.ERROR, logger="core.composition.engine"):
            comp = engine.generate_composition(config, seed=1)
        assert comp.harmony is None
        assert comp.melody is not None
        assert comp.rhythm is not None
        assert comp.texture is not None
        assert "model crashed" in caplog.text

    def test_empty_engine_returns_empty_composition(self, config):
        comp = CompositionEngine([]).generate_composition(config)
        assert comp == Composition()
        assert set(comp.missing) == set(PhraseKind)


# ---------------------------------------------------------------------------
# Timeout and cancel
# ---------------------------------------------------------------------------


class TestTimeoutAndCancel:
    def test_timeout_abandons_slow_layer(self, config, caplog):
        slow = BlockingGenerator(PhraseKind.TEXTURE)
        engine = CompositionEngine()
        engine.register(slow)
        try:
            with caplog.at_level(logging.WARNING, logger="core.composition.engine"):
                start = time.monotonic()
                comp = engine.generate_composition(config, seed=1, timeout=0.2)
                elapsed = time.monotonic() - start
        finally:
            slow.release.set()
        assert comp.texture is None
        assert comp.melody is not None
        assert elapsed < 1.5
        assert "timed out" in caplog.text

    def test_engine_default_timeout(self, config):
        slow = BlockingGenerator(PhraseKind.MELODY)
        engine = CompositionEngine(timeout=0.1)
        engine.register(slow)
        try:
            comp = engine.generate_composition(config)
        finally:
            slow.release.set()
        assert comp.melody is None

    def test_cancel_abandons_unfinished_layers(self, config, caplog):
        cancel = threading.Event()
        slow = BlockingGenerator(PhraseKind.RHYTHM, on_start=cancel.set)
        engine = CompositionEngine()
        engine.register(slow)
        try:
            with caplog.at_level(logging.WARNING, logger="core.composition.engine"):
                start = time.monotonic()
                comp = engine.generate_composition(config, cancel=cancel)
                elapsed = time.monotonic() - start
        finally:
            slow.release.set()
        assert comp.rhythm is None
        assert elapsed < 1.5
        assert "cancelled" in caplog.text

    def test_no_timeout_waits_for_every_layer(self, config):
        slow = BlockingGenerator(PhraseKind.TEXTURE)
        engine = CompositionEngine()
        engine.register(slow)
        threading.Timer(0.05, slow.release.set).start()
        comp = engine.generate_composition(config)
        assert comp.texture is not None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_default_generators_cover_every_kind(self):
        generators = default_generators()
        assert {g.kind for g in generators} == set(PhraseKind)
        assert all(isinstance(g, PhraseGenerator) for g in generators)

    def test_model_status_all_loaded(self):
        assert CompositionEngine().model_status() == {
            "melody": True,
            "harmony": True,
            "rhythm": True,
            "texture": True,
        }

    def test_model_status_reflects_unregister_and_unloaded(self):
        engine = CompositionEngine()
        removed = engine.unregister(PhraseKind.MELODY)
        engine.register(StubGenerator(PhraseKind.TEXTURE, loaded=False))
        status = engine.model_status()
        assert removed is not None
        assert status["melody"] is False
        assert status["texture"] is False
        assert status["harmony"] is True

    def test_register_replaces_same_kind(self, config):
        engine = CompositionEngine()
        engine.register(StubGenerator(PhraseKind.MELODY))
        phrase = engine.generate_phrase(PhraseKind.MELODY, config)
        assert [n.pitch for n in phrase.notes] == [60]

    def test_composition_get_and_phrases(self, config):
        comp = CompositionEngine([StubGenerator(PhraseKind.HARMONY)]).generate_composition(config)
        assert comp.get(PhraseKind.HARMONY) is comp.harmony
        assert [kind for kind, _ in comp.phrases()] == [PhraseKind.HARMONY]
