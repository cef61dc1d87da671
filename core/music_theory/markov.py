"""
core/music_theory/markov.py — First-order Markov chain over scale degrees.

The chain is trained once, at construction, from a fixed corpus of short
hand-authored melodic shapes. Each training pair (current → next) appends
`next` to the successor list of `current`; repeated successors therefore
carry proportionally more weight when sampled.

After construction the transition table is exposed as a read-only mapping
of tuples, so a single chain can be sampled from many threads at once.
"""

from __future__ import annotations

import random
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

# Scale-degree shapes; degrees >= 7 land in the next octave of a
# heptatonic scale.
TRAINING_CORPUS: tuple[tuple[int, ...], ...] = (
    (0, 2, 4, 2, 0),  # C-D-E-D-C
    (0, 4, 7, 4, 0),  # C-E-G-E-C
    (7, 5, 4, 2, 0),  # G-F-E-D-C descending
    (0, 2, 4, 5, 7),  # C-D-E-F-G ascending
    (4, 2, 0, 7, 9),  # E-D-C-G-A
    (0, 7, 4, 5, 2),  # arpeggiated
    (2, 4, 7, 9, 7, 4, 2, 0),  # extended phrase
)

# Successors used for states the corpus never visited.
FALLBACK_SUCCESSORS: tuple[int, ...] = (0, 2, 4)


class MarkovChain:
    """Degree → weighted successor table, immutable after construction.

    Args:
        corpus: Training sequences of scale degrees.

    Example:
        >>> chain = MarkovChain()
        >>> chain.successors(9)
        (7,)
    """

    def __init__(self, corpus: Iterable[Sequence[int]] = TRAINING_CORPUS) -> None:
        table: dict[int, list[int]] = defaultdict(list)
        for sequence in corpus:
            for current, nxt in zip(sequence, sequence[1:]):
                table[current].append(nxt)
        self._transitions: Mapping[int, tuple[int, ...]] = MappingProxyType(
            {state: tuple(successors) for state, successors in table.items()}
        )

    @property
    def transitions(self) -> Mapping[int, tuple[int, ...]]:
        """Read-only view of the full transition table."""
        return self._transitions

    @property
    def states(self) -> frozenset[int]:
        return frozenset(self._transitions)

    def successors(self, state: int) -> tuple[int, ...]:
        """Successor list for a state, or FALLBACK_SUCCESSORS if unseen."""
        return self._transitions.get(state, FALLBACK_SUCCESSORS)

    def next_degree(self, state: int, rng: random.Random) -> int:
        """Draw the next degree, weighted by successor frequency."""
        return rng.choice(self.successors(state))

    def probabilities(self, state: int) -> dict[int, float]:
        """Normalized transition probabilities out of a state."""
        successors = self.successors(state)
        counts: dict[int, int] = {}
        for degree in successors:
            counts[degree] = counts.get(degree, 0) + 1
        return {degree: count / len(successors) for degree, count in counts.items()}
