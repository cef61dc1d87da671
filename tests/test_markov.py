"""
Tests for core/music_theory/markov.py — scale-degree Markov chain.

Validates:
    - transition table built from the training corpus
    - unseen states fall back to tonic-triad degrees
    - construction is idempotent and the table is read-only
    - sampling stays inside the successor list and respects weights
"""

from __future__ import annotations

import random

import pytest

from core.music_theory.markov import FALLBACK_SUCCESSORS, TRAINING_CORPUS, MarkovChain


class TestTransitions:
    def test_tonic_successors_in_corpus_order(self):
        assert MarkovChain().successors(0) == (2, 4, 2, 7, 7)

    def test_single_successor_state(self):
        assert MarkovChain().successors(9) == (7,)

    def test_every_pair_counted(self):
        chain = MarkovChain()
        pairs = sum(len(seq) - 1 for seq in TRAINING_CORPUS)
        assert sum(len(s) for s in chain.transitions.values()) == pairs

    def test_states_are_corpus_degrees_with_successors(self):
        assert MarkovChain().states == frozenset({0, 2, 4, 5, 7, 9})

    def test_unseen_state_uses_fallback(self):
        assert MarkovChain().successors(3) == FALLBACK_SUCCESSORS

    def test_custom_corpus(self):
        chain = MarkovChain([(1, 2, 1)])
        assert chain.transitions == {1: (2,), 2: (1,)}

    def test_probabilities(self):
        probs = MarkovChain().probabilities(0)
        assert probs == {2: pytest.approx(0.4), 4: pytest.approx(0.2), 7: pytest.approx(0.4)}
        assert sum(probs.values()) == pytest.approx(1.0)


class TestImmutability:
    def test_construction_is_idempotent(self):
        assert dict(MarkovChain().transitions) == dict(MarkovChain().transitions)

    def test_table_is_read_only(self):
        chain = MarkovChain()
        with pytest.raises(TypeError):
            chain.transitions[0] = (1,)  # type: ignore[index]


class TestSampling:
    def test_next_degree_is_a_successor(self):
        chain = MarkovChain()
        rng = random.Random(3)
        for state in range(12):
            for _ in range(20):
                assert chain.next_degree(state, rng) in chain.successors(state)

    def test_weighting_follows_counts(self):
        chain = MarkovChain()
        rng = random.Random(11)
        draws = [chain.next_degree(0, rng) for _ in range(5000)]
        assert draws.count(2) / len(draws) == pytest.approx(0.4, abs=0.05)
        assert draws.count(4) / len(draws) == pytest.approx(0.2, abs=0.05)

    def test_seeded_sampling_is_reproducible(self):
        chain = MarkovChain()
        a = [chain.next_degree(0, random.Random(5)) for _ in range(3)]
        b = [chain.next_degree(0, random.Random(5)) for _ in range(3)]
        assert a == b
