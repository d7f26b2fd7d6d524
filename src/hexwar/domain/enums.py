"""Enumerations for the Hexwar domain."""

from __future__ import annotations

from enum import StrEnum


class OwnerKind(StrEnum):
    """Discriminator of a tile's owner tag."""

    UNUSED = "unused"
    NEUTRAL = "neutral"
    BLOCKED = "blocked"
    PLAYER = "player"


class Rejection(StrEnum):
    """Reason codes reported when a command is refused without mutating state."""

    NOT_FOUND = "not_found"
    GAME_OVER = "game_over"
    ATTACK_IN_PROGRESS = "attack_in_progress"
    EDITOR_ACTIVE = "editor_active"
    NOT_ACTIVE_PLAYER = "not_active_player"
    NO_SELECTION = "no_selection"
    SAME_TILE = "same_tile"
    INSUFFICIENT_ARMY = "insufficient_army"
    INVALID_TARGET = "invalid_target"
    NOT_ADJACENT = "not_adjacent"
    UNREACHABLE = "unreachable"


class AttackResult(StrEnum):
    """Outcome category of a resolved attack."""

    ATTACKER_WON = "attacker_won"
    DEFENDER_WON = "defender_won"
    TIE = "tie"
