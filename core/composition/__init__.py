"""
core/composition — Concurrent four-layer composition.

Public API:
    CompositionEngine, Composition, default_generators
"""

from core.composition.engine import Composition, CompositionEngine, default_generators

__all__ = ["CompositionEngine", "Composition", "default_generators"]
