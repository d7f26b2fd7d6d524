"""Runtime configuration for the Hexwar engine and HTTP service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hexwar.domain.rules_config import Rules


class Settings(BaseSettings):
    """Application settings, overridable through ``HEXWAR_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HEXWAR_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("saves"), description="Where the JSON store keeps documents"
    )
    storage_backend: Literal["memory", "json", "sql"] = Field(
        default="json", description="Key-value store backing autosaves and maps"
    )
    database_url: str = Field(
        default="sqlite:///hexwar.db", description="SQLAlchemy URL used by the sql backend"
    )
    autosave_key: str = "hexwar_autosave"
    map_prefix: str = "hexwar_map_"

    actions_per_turn: int = Field(default=3, ge=1)
    turns_per_round: int = Field(default=1, ge=1)
    rounds_per_game: int = Field(default=0, ge=0, description="0 means unlimited")
    reinforcements_per_turn: int = Field(default=1, ge=0)
    player_count: int = Field(default=2, ge=1)
    max_player_count: int = Field(default=6, ge=1)
    max_army_strength: int = Field(default=10, ge=0, description="0 means no cap")

    default_map_radius: int = Field(
        default=5, ge=0, description="Radius of a freshly started board"
    )
    editor_map_radius: int = Field(default=8, ge=0, description="Radius of the editor canvas")
    dice_seed: str | None = Field(
        default=None,
        description="When set, combat dice are derived deterministically from this seed",
    )

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )
    log_level: str = "INFO"

    def rules(self) -> Rules:
        """Build the immutable rule set described by these settings."""

        return Rules(
            actions_per_turn=self.actions_per_turn,
            turns_per_round=self.turns_per_round,
            rounds_per_game=self.rounds_per_game,
            reinforcements_per_turn=self.reinforcements_per_turn,
            player_count=self.player_count,
            max_player_count=self.max_player_count,
            max_army_strength=self.max_army_strength,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    if settings.storage_backend == "json":
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
