"""Game configuration."""

from pydantic import BaseModel, Field, model_validator

from avalon.models.player import ROLE_TABLE, RoleConfig, roles_for_config
from avalon.models.mission import MISSION_COUNT, MISSION_TABLE, MissionSpec


class GameConfig(BaseModel):
    """Tunable rules for one game session.

    role_table and mission_table are keyed by roster size. A roster size
    is startable only if both tables have an entry for it.
    """

    vision_seconds: float = 10.0
    max_consecutive_rejections: int = 4
    wins_needed: int = 3
    max_roster: int = 10
    role_table: dict[int, list[RoleConfig]] = Field(default_factory=lambda: dict(ROLE_TABLE))
    mission_table: dict[int, list[MissionSpec]] = Field(default_factory=lambda: dict(MISSION_TABLE))

    @model_validator(mode="after")
    def validate_tables(self) -> "GameConfig":
        for size, config in self.role_table.items():
            role_count = len(roles_for_config(config))
            if role_count != size:
                raise ValueError(f"Role table for {size} players has {role_count} roles")
        for size, specs in self.mission_table.items():
            if len(specs) != MISSION_COUNT:
                raise ValueError(f"Mission table for {size} players must list {MISSION_COUNT} missions")
            for spec in specs:
                if not 1 <= spec.required_team_size <= size:
                    raise ValueError(f"Team size {spec.required_team_size} invalid for {size} players")
        if self.vision_seconds < 0:
            raise ValueError("vision_seconds must be >= 0")
        return self

    def supports_roster(self, size: int) -> bool:
        return size in self.role_table and size in self.mission_table

    @property
    def supported_roster_sizes(self) -> list[int]:
        return sorted(set(self.role_table) & set(self.mission_table))

