"""Error taxonomy for rejected actions and engine faults."""

from enum import Enum


class ErrorKind(str, Enum):
    """Why an action was rejected."""

    ILLEGAL_PHASE_ACTION = "IllegalPhaseAction"
    UNAUTHORIZED_ACTOR = "UnauthorizedActor"
    INVALID_TEAM_SIZE = "InvalidTeamSize"
    DUPLICATE_ACTION = "DuplicateAction"
    ILLEGAL_CARD_CHOICE = "IllegalCardChoice"
    ROSTER_SIZE_INVALID = "RosterSizeInvalid"
    UNKNOWN_PLAYER = "UnknownPlayer"
    INVALID_TARGET = "InvalidTarget"


class GameActionError(Exception):
    """Raised when a player action is not legal in the current state.

    The session is left unchanged and remains usable. `reason` is a
    human-readable message suitable for showing to the player.
    """

    kind: ErrorKind

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"{self.kind.value}: {reason}")


class IllegalPhaseAction(GameActionError):
    kind = ErrorKind.ILLEGAL_PHASE_ACTION


class UnauthorizedActor(GameActionError):
    kind = ErrorKind.UNAUTHORIZED_ACTOR


class InvalidTeamSize(GameActionError):
    kind = ErrorKind.INVALID_TEAM_SIZE


class DuplicateAction(GameActionError):
    kind = ErrorKind.DUPLICATE_ACTION


class IllegalCardChoice(GameActionError):
    kind = ErrorKind.ILLEGAL_CARD_CHOICE


class RosterSizeInvalid(GameActionError):
    kind = ErrorKind.ROSTER_SIZE_INVALID


class UnknownPlayer(GameActionError):
    kind = ErrorKind.UNKNOWN_PLAYER


class InvalidTarget(GameActionError):
    kind = ErrorKind.INVALID_TARGET


class EngineInvariantError(Exception):
    """Raised when the engine reaches a state its rules cannot produce.

    This is a programming error, not a player mistake. The game that
    raised it is faulted and only accepts a reset afterwards.
    """

    pass
