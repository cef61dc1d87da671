"""
core/composition/engine.py — Orchestrates the four generator layers.

CompositionEngine owns one generator per PhraseKind and runs them
concurrently for a single GenerationConfig, then joins the results into a
Composition. The generators share no mutable state (each call gets its
own random.Random, the Markov chain is read-only), so no locks are needed.

Failure policy — nothing here aborts a composition:
    generator missing or not loaded → slot is None, warning logged
    generator raises                → slot is None, error logged
    timeout / cancel before finish  → unfinished slots None, warning logged

Reproducibility:
    Passing `seed` derives one RNG per layer from (seed, kind), so the
    same seed and config always give the same Composition regardless of
    thread scheduling.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from core.music_theory.generator import PhraseGenerator
from core.music_theory.harmony import HarmonyGenerator
from core.music_theory.melody import MelodyGenerator
from core.music_theory.rhythm import RhythmGenerator
from core.music_theory.texture import TextureGenerator
from core.music_theory.types import GenerationConfig, MusicalPhrase, PhraseKind
from infrastructure.metrics import LatencyTimer, record_composition, record_phrase

logger = logging.getLogger(__name__)

# How often a blocked join re-checks the cancel event.
_CANCEL_POLL_SECONDS: float = 0.01


@dataclass(frozen=True)
class Composition:
    """The joined output of one generate_composition() call.

    Each slot is None when its generator was unavailable, failed, or did
    not finish before a timeout/cancel.
    """

    melody: MusicalPhrase | None = None
    harmony: MusicalPhrase | None = None
    rhythm: MusicalPhrase | None = None
    texture: MusicalPhrase | None = None

    def get(self, kind: PhraseKind) -> MusicalPhrase | None:
        return getattr(self, PhraseKind(kind).value)

    def phrases(self) -> Iterator[tuple[PhraseKind, MusicalPhrase]]:
        """Yield (kind, phrase) for every populated slot, in layer order."""
        for kind in PhraseKind:
            phrase = self.get(kind)
            if phrase is not None:
                yield kind, phrase

    @property
    def missing(self) -> tuple[PhraseKind, ...]:
        """Kinds whose slot is None."""
        return tuple(kind for kind in PhraseKind if self.get(kind) is None)

    @property
    def is_complete(self) -> bool:
        return not self.missing


def default_generators() -> tuple[PhraseGenerator, ...]:
    """One instance of each built-in generator."""
    return (MelodyGenerator(), HarmonyGenerator(), RhythmGenerator(), TextureGenerator())


def _layer_rng(seed: int | str | None, kind: PhraseKind) -> random.Random:
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{kind.value}")


class CompositionEngine:
    """Runs melody, harmony, rhythm and texture generation side by side.

    Args:
        generators: Generators to register. Defaults to the four built-ins.
                    A later generator replaces an earlier one of the same kind.
        timeout:    Default join timeout in seconds for generate_composition();
                    None waits for every layer.

    Example:
        >>> engine = CompositionEngine()
        >>> comp = engine.generate_composition(GenerationConfig(steps=8), seed=1)
        >>> comp.is_complete
        True
    """

    def __init__(
        self,
        generators: Iterable[PhraseGenerator] | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self._generators: dict[PhraseKind, PhraseGenerator] = {}
        for generator in generators if generators is not None else default_generators():
            self.register(generator)
        self.timeout = timeout
        logger.info(
            "CompositionEngine initialized with %s",
            ", ".join(g.name for g in self._generators.values()) or "no generators",
        )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, generator: PhraseGenerator) -> None:
        """Install a generator in the slot for its kind."""
        self._generators[PhraseKind(generator.kind)] = generator

    def unregister(self, kind: PhraseKind) -> PhraseGenerator | None:
        """Remove and return the generator for a kind, if any."""
        return self._generators.pop(PhraseKind(kind), None)

    def model_status(self) -> dict[str, bool]:
        """Map every phrase kind to whether a loaded generator serves it."""
        return {
            kind.value: kind in self._generators and bool(self._generators[kind].loaded)
            for kind in PhraseKind
        }

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_phrase(
        self,
        kind: PhraseKind,
        config: GenerationConfig,
        *,
        rng: random.Random | None = None,
    ) -> MusicalPhrase | None:
        """Run a single generator.

        Returns:
            The phrase, or None if the generator is unavailable or failed.
        """
        kind = PhraseKind(kind)
        generator = self._generators.get(kind)
        if generator is None or not generator.loaded:
            logger.warning("Generator for '%s' not available", kind.value)
            record_phrase(kind=kind.value, status="unavailable")
            return None

        try:
            phrase = generator.generate(config, rng if rng is not None else random.Random())
        except Exception:
            logger.exception("Failed to generate %s phrase", kind.value)
            record_phrase(kind=kind.value, status="error")
            return None

        logger.debug("Generated %s phrase with %d notes", kind.value, len(phrase.notes))
        record_phrase(kind=kind.value, status="ok")
        return phrase

    def generate_composition(
        self,
        config: GenerationConfig,
        *,
        seed: int | str | None = None,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> Composition:
        """Generate all four layers concurrently and join them.

        Args:
            config:  Shared immutable request.
            seed:    Optional seed for reproducible output.
            timeout: Seconds to wait for all layers. Falls back to the
                     engine default; None waits indefinitely.
            cancel:  Optional event; setting it abandons unfinished layers.

        Returns:
            Composition with a slot per layer (None where unavailable,
            failed or unfinished).
        """
        timeout = timeout if timeout is not None else self.timeout
        kinds = tuple(PhraseKind)
        results: dict[PhraseKind, MusicalPhrase | None] = dict.fromkeys(kinds)

        with LatencyTimer() as timer:
            executor = ThreadPoolExecutor(max_workers=len(kinds), thread_name_prefix="composer")
            futures: dict[Future, PhraseKind] = {
                executor.submit(
                    self.generate_phrase, kind, config, rng=_layer_rng(seed, kind)
                ): kind
                for kind in kinds
            }
            pending = self._join(futures, results, timeout, cancel)
            executor.shutdown(wait=False, cancel_futures=True)

        for future in pending:
            kind = futures[future]
            reason = "cancelled" if cancel is not None and cancel.is_set() else "timed out"
            logger.warning("Generation of %s phrase %s", kind.value, reason)
            record_phrase(kind=kind.value, status="cancelled")

        record_composition(timer.elapsed)
        return Composition(**{kind.value: phrase for kind, phrase in results.items()})

    @staticmethod
    def _join(
        futures: dict[Future, PhraseKind],
        results: dict[PhraseKind, MusicalPhrase | None],
        timeout: float | None,
        cancel: threading.Event | None,
    ) -> set[Future]:
        """Collect finished layers until all are done, time runs out or cancel is set.

        Returns:
            Futures that never finished.
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        pending: set[Future] = set(futures)

        while pending:
            if cancel is not None and cancel.is_set():
                break
            wait_for = _CANCEL_POLL_SECONDS if cancel is not None else None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                wait_for = remaining if wait_for is None else min(wait_for, remaining)

            done, pending = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)
            for future in done:
                results[futures[future]] = future.result()

        return pending
