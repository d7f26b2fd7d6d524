"""Declarative rule configuration for a Hexwar game."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rules:
    """Per-session game constants.

    ``rounds_per_game`` and ``max_army_strength`` use 0 to mean "unbounded".
    """

    actions_per_turn: int = 3
    turns_per_round: int = 1
    rounds_per_game: int = 0
    reinforcements_per_turn: int = 1
    player_count: int = 2
    max_player_count: int = 6
    max_army_strength: int = 10

    def __post_init__(self) -> None:
        if self.actions_per_turn < 1:
            raise ValueError(f"actions_per_turn must be at least 1, got {self.actions_per_turn}")
        if self.turns_per_round < 1:
            raise ValueError(f"turns_per_round must be at least 1, got {self.turns_per_round}")
        if self.rounds_per_game < 0:
            raise ValueError(f"rounds_per_game must be non-negative, got {self.rounds_per_game}")
        if self.reinforcements_per_turn < 0:
            raise ValueError(
                f"reinforcements_per_turn must be non-negative, got {self.reinforcements_per_turn}"
            )
        if self.max_army_strength < 0:
            raise ValueError(
                f"max_army_strength must be non-negative, got {self.max_army_strength}"
            )
        if not 1 <= self.player_count <= self.max_player_count:
            raise ValueError(
                f"player_count must be between 1 and {self.max_player_count}, "
                f"got {self.player_count}"
            )

    @property
    def turns_per_cycle(self) -> int:
        """Number of turns making up one round across all players."""

        return self.turns_per_round * self.player_count


DEFAULT_RULES = Rules()
