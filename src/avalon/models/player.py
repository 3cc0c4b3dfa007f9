"""Player and Role models."""

import random
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Alignment(str, Enum):
    """Team alignments for victory conditions."""

    GOOD = "GOOD"
    EVIL = "EVIL"


class Role(str, Enum):
    """Player roles in the game."""

    MERLIN = "Merlin"
    PERCIVAL = "Percival"
    LOYAL_SERVANT = "Loyal Servant of Arthur"
    MORGANA = "Morgana"
    ASSASSIN = "Assassin"
    MORDRED = "Mordred"
    OBERON = "Oberon"
    MINION = "Minion of Mordred"

    @property
    def alignment(self) -> Alignment:
        return ROLE_ALIGNMENTS[self]

    @property
    def is_evil(self) -> bool:
        return ROLE_ALIGNMENTS[self] == Alignment.EVIL

    @property
    def is_active_role(self) -> bool:
        """Active roles are announced by name, the rest only by alignment."""
        return self not in (Role.LOYAL_SERVANT, Role.MINION)

    @property
    def description(self) -> str:
        return ROLE_DESCRIPTIONS[self]


ROLE_ALIGNMENTS: dict[Role, Alignment] = {
    Role.MERLIN: Alignment.GOOD,
    Role.PERCIVAL: Alignment.GOOD,
    Role.LOYAL_SERVANT: Alignment.GOOD,
    Role.MORGANA: Alignment.EVIL,
    Role.ASSASSIN: Alignment.EVIL,
    Role.MORDRED: Alignment.EVIL,
    Role.OBERON: Alignment.EVIL,
    Role.MINION: Alignment.EVIL,
}

ROLE_DESCRIPTIONS: dict[Role, str] = {
    Role.MERLIN: "Sees Evil (except Mordred)",
    Role.PERCIVAL: "Sees Merlin & Morgana",
    Role.LOYAL_SERVANT: "Servant of Good",
    Role.MORGANA: "Appears as Merlin to Percival",
    Role.ASSASSIN: "Can assassinate Merlin",
    Role.MORDRED: "Unknown to Merlin",
    Role.OBERON: "Unknown to other Evil",
    Role.MINION: "Servant of Evil",
}


class PlayerType(str, Enum):
    """Type of player (bot or human)."""

    BOT = "BOT"
    HUMAN = "HUMAN"


class Player(BaseModel):
    """Represents a session member.

    Uses id (str) as primary identifier. Roster order is the seat order
    and the leader rotation order.
    """

    id: str
    name: str
    role: Optional[Role] = None  # None until roles are assigned
    player_type: PlayerType = PlayerType.HUMAN

    @property
    def is_bot(self) -> bool:
        return self.player_type == PlayerType.BOT

    @property
    def alignment(self) -> Optional[Alignment]:
        return self.role.alignment if self.role is not None else None


class RoleConfig(BaseModel):
    """Role configuration for game setup."""

    role: Role
    count: int = 0

    model_config = ConfigDict(frozen=True)


# Standard 5-player game configuration
STANDARD_5_PLAYER_CONFIG = [
    RoleConfig(role=Role.MERLIN, count=1),
    RoleConfig(role=Role.PERCIVAL, count=1),
    RoleConfig(role=Role.LOYAL_SERVANT, count=1),
    RoleConfig(role=Role.MORGANA, count=1),
    RoleConfig(role=Role.ASSASSIN, count=1),
]

# Roster size -> role configuration. Only the 5-player table is supported.
ROLE_TABLE: dict[int, list[RoleConfig]] = {
    5: STANDARD_5_PLAYER_CONFIG,
}


def roles_for_config(config: list[RoleConfig]) -> list[Role]:
    """Expand a role configuration into a flat list of roles."""
    roles: list[Role] = []
    for role_config in config:
        roles.extend([role_config.role] * role_config.count)
    return roles


def assign_roles(
    rng: random.Random,
    player_ids: list[str],
    config: list[RoleConfig],
) -> dict[str, Role]:
    """Create shuffled role assignments for a game.

    Args:
        rng: random.Random instance for reproducible shuffling.
        player_ids: Roster ids in seat order.
        config: Role configuration; must expand to exactly one role per player.

    Returns:
        Dict mapping player id -> Role.
    """
    roles = roles_for_config(config)
    if len(roles) != len(player_ids):
        raise ValueError(
            f"Role configuration has {len(roles)} roles for {len(player_ids)} players"
        )

    rng.shuffle(roles)

    return {player_id: roles[index] for index, player_id in enumerate(player_ids)}
