"""Mutation engines: adaptive (guided) and uniform (baseline)."""

from .guided_mutation_engine import GuidedMutationEngine
from .mutation_engine import MutationEngine

__all__ = ["GuidedMutationEngine", "MutationEngine"]
