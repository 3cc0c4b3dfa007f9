"""Models package."""

from avalon.models.player import (
    Alignment,
    Role,
    PlayerType,
    Player,
    RoleConfig,
    ROLE_TABLE,
    STANDARD_5_PLAYER_CONFIG,
    assign_roles,
    roles_for_config,
)
from avalon.models.mission import (
    MissionStatus,
    VoteChoice,
    CardChoice,
    MissionSpec,
    Mission,
    MISSION_TABLE,
    MISSION_COUNT,
    create_missions,
)
from avalon.models.config import GameConfig

__all__ = [
    "Alignment",
    "Role",
    "PlayerType",
    "Player",
    "RoleConfig",
    "ROLE_TABLE",
    "STANDARD_5_PLAYER_CONFIG",
    "assign_roles",
    "roles_for_config",
    "MissionStatus",
    "VoteChoice",
    "CardChoice",
    "MissionSpec",
    "Mission",
    "MISSION_TABLE",
    "MISSION_COUNT",
    "create_missions",
    "GameConfig",
]
