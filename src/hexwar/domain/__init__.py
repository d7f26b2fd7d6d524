"""Hexwar domain model and rules.

This package holds every game rule and operates purely in-memory. It exposes:

* Dataclasses describing tiles, ownership and turn position (see :mod:`models`).
* The :class:`~hexwar.domain.board.Board` tile container.
* Rule configuration (see :mod:`rules_config`).
* Rule functions for pathfinding, movement, combat and turn scheduling, plus
  the UI-facing commands and the map editor.

Persistence lives outside this package and only ever sees the session
through :mod:`hexwar.savegame`.
"""

from . import (
    board,
    combat,
    commands,
    editor,
    enums,
    models,
    movement,
    pathfinding,
    rules_config,
    session,
    turns,
)

__all__ = [
    "board",
    "combat",
    "commands",
    "editor",
    "enums",
    "models",
    "movement",
    "pathfinding",
    "rules_config",
    "session",
    "turns",
]
