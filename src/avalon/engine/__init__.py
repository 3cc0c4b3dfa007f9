"""Engine package - game orchestration components."""

from .errors import (
    ErrorKind,
    GameActionError,
    IllegalPhaseAction,
    UnauthorizedActor,
    InvalidTeamSize,
    DuplicateAction,
    IllegalCardChoice,
    RosterSizeInvalid,
    UnknownPlayer,
    InvalidTarget,
    EngineInvariantError,
)
from .actions import (
    Action,
    GameAction,
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
)
from .game_session import GameSession, Vision, VoteTally
from .snapshot import GameSnapshot, PlayerView, MissionView, build_snapshot
from .avalon_game import AvalonGame, ActionResult
from .session_manager import SessionManager
from .validator import (
    GameValidator,
    NoOpValidator,
    CollectingValidator,
    create_validator,
)

__all__ = [
    "ErrorKind",
    "GameActionError",
    "IllegalPhaseAction",
    "UnauthorizedActor",
    "InvalidTeamSize",
    "DuplicateAction",
    "IllegalCardChoice",
    "RosterSizeInvalid",
    "UnknownPlayer",
    "InvalidTarget",
    "EngineInvariantError",
    "Action",
    "GameAction",
    "AddSpectator",
    "JoinAsPlayer",
    "LeaveLobby",
    "ToggleLobbyLock",
    "StartGame",
    "ResetProgress",
    "ConfirmRoleSeen",
    "ProposeTeam",
    "CastVote",
    "PlayCard",
    "Assassinate",
    "GameSession",
    "Vision",
    "VoteTally",
    "GameSnapshot",
    "PlayerView",
    "MissionView",
    "build_snapshot",
    "AvalonGame",
    "ActionResult",
    "SessionManager",
    "GameValidator",
    "NoOpValidator",
    "CollectingValidator",
    "create_validator",
]
