"""Player action commands.

Every state change goes through one of these models. Transport layers
build them from player intents; bots produce them through the same
types so the engine has a single code path for both.
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from avalon.models.mission import VoteChoice, CardChoice
from avalon.models.player import PlayerType


class Action(BaseModel):
    """Base class for all actions."""

    model_config = ConfigDict(frozen=True)


class AddSpectator(Action):
    kind: Literal["add_spectator"] = "add_spectator"
    player_id: str
    name: str
    player_type: PlayerType = PlayerType.HUMAN


class JoinAsPlayer(Action):
    """Move a spectator into the roster.

    requester_id defaults to the spectator joining on their own.
    """

    kind: Literal["join_as_player"] = "join_as_player"
    spectator_id: str
    requester_id: Optional[str] = None


class LeaveLobby(Action):
    kind: Literal["leave_lobby"] = "leave_lobby"
    player_id: str


class ToggleLobbyLock(Action):
    kind: Literal["toggle_lobby_lock"] = "toggle_lobby_lock"
    leader_id: str


class StartGame(Action):
    kind: Literal["start_game"] = "start_game"
    leader_id: str


class ResetProgress(Action):
    kind: Literal["reset_progress"] = "reset_progress"
    leader_id: str


class ConfirmRoleSeen(Action):
    kind: Literal["confirm_role_seen"] = "confirm_role_seen"
    player_id: str


class ProposeTeam(Action):
    kind: Literal["propose_team"] = "propose_team"
    leader_id: str
    member_ids: list[str]


class CastVote(Action):
    kind: Literal["cast_vote"] = "cast_vote"
    player_id: str
    choice: VoteChoice


class PlayCard(Action):
    kind: Literal["play_card"] = "play_card"
    player_id: str
    card: CardChoice


class Assassinate(Action):
    kind: Literal["assassinate"] = "assassinate"
    assassin_id: str
    target_id: str


GameAction = Annotated[
    Union[
        AddSpectator,
        JoinAsPlayer,
        LeaveLobby,
        ToggleLobbyLock,
        StartGame,
        ResetProgress,
        ConfirmRoleSeen,
        ProposeTeam,
        CastVote,
        PlayCard,
        Assassinate,
    ],
    Field(discriminator="kind"),
]
