"""Utility functions for RSSalg."""

from .rng import ExperimentRandom

__all__ = ["ExperimentRandom"]
