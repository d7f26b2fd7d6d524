"""Utility functions for the Hexwar engine."""

from hexwar.utils.hex_math import HexCoord, hex_distance, hex_neighbors
from hexwar.utils.rng import (
    RandomDiceRoller,
    SeededDiceRoller,
    generate_seed,
    roll_combat,
)

__all__ = [
    "HexCoord",
    "RandomDiceRoller",
    "SeededDiceRoller",
    "generate_seed",
    "hex_distance",
    "hex_neighbors",
    "roll_combat",
]
