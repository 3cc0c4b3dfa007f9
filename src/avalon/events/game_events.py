"""Event types for game logging."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, computed_field

from avalon.models.player import Alignment
from avalon.models.mission import VoteChoice, CardChoice


class Phase(str, Enum):
    """Phases of the match state machine."""

    LOBBY_SETUP = "LOBBY_SETUP"
    ROLE_REVEAL = "ROLE_REVEAL"
    TEAM_SELECTION = "TEAM_SELECTION"
    TEAM_VOTING = "TEAM_VOTING"
    MISSION_PLAY = "MISSION_PLAY"
    ASSASSINATION = "ASSASSINATION"
    GAME_OVER = "GAME_OVER"


class VictoryCondition(str, Enum):
    """How the game was won."""

    THREE_MISSIONS_FAILED = "THREE_MISSIONS_FAILED"
    FOUR_REJECTIONS = "FOUR_REJECTIONS"
    MERLIN_ASSASSINATED = "MERLIN_ASSASSINATED"
    MERLIN_SURVIVED = "MERLIN_SURVIVED"


class GameEvent(BaseModel):
    """Base class for all game events."""

    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    mission: int = 0  # 0 = outside a mission (lobby, setup)
    phase: Phase

    @computed_field
    @property
    def event_type(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.__class__.__name__}(mission={self.mission}, phase={self.phase.value})"


# ============================================================================
# Character Actions (events with an actor)
# ============================================================================


class CharacterAction(GameEvent):
    """Base class for events with a player actor."""

    actor: str  # id of the acting player

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(actor={self.actor}, mission={self.mission})"


class PlayerJoined(CharacterAction):
    """A spectator or player entered the session roster or spectators."""

    phase: Phase = Phase.LOBBY_SETUP
    as_player: bool

    def __str__(self) -> str:
        where = "roster" if self.as_player else "spectators"
        return f"PlayerJoined(actor={self.actor}, {where})"


class PlayerLeft(CharacterAction):
    """A roster member went back to the spectators."""

    phase: Phase = Phase.LOBBY_SETUP


class LobbyLockToggled(CharacterAction):
    """The leader locked or unlocked the lobby."""

    phase: Phase = Phase.LOBBY_SETUP
    locked: bool

    def __str__(self) -> str:
        state = "locked" if self.locked else "unlocked"
        return f"LobbyLockToggled(actor={self.actor}, {state})"


class ProgressReset(CharacterAction):
    """Scores, missions and roles were wiped; roster kept."""

    phase: Phase = Phase.LOBBY_SETUP


class RoleConfirmed(CharacterAction):
    """A player acknowledged their revealed role."""

    phase: Phase = Phase.ROLE_REVEAL


class TeamProposal(CharacterAction):
    """The leader put a team up for a vote."""

    phase: Phase = Phase.TEAM_SELECTION
    team: list[str]
    proposal_number: int

    def __str__(self) -> str:
        return f"TeamProposal(actor={self.actor}, mission={self.mission}, team={self.team})"


class Vote(CharacterAction):
    """A player casts their ballot on the proposed team."""

    phase: Phase = Phase.TEAM_VOTING
    choice: VoteChoice

    def __str__(self) -> str:
        return f"Vote(actor={self.actor}, {self.choice.value})"


class CardPlay(CharacterAction):
    """A team member secretly plays a mission card."""

    phase: Phase = Phase.MISSION_PLAY
    card: CardChoice

    def __str__(self) -> str:
        return f"CardPlay(actor={self.actor}, {self.card.value})"


class Assassination(CharacterAction):
    """The Assassin names a target."""

    phase: Phase = Phase.ASSASSINATION
    target: str
    hit: bool  # target was Merlin

    def __str__(self) -> str:
        result = "hit" if self.hit else "miss"
        return f"Assassination(actor={self.actor}, target={self.target}, {result})"


# ============================================================================
# Non-Character Events
# ============================================================================


class GameStart(GameEvent):
    """Roles were dealt and the match began."""

    phase: Phase = Phase.ROLE_REVEAL
    player_count: int
    roles_secret: dict[str, str] = Field(default_factory=dict)  # player id -> role name
    leader: str

    def __str__(self) -> str:
        return f"GameStart(players={self.player_count}, leader={self.leader})"


class VoteOutcome(GameEvent):
    """Tally of a completed ballot."""

    phase: Phase = Phase.TEAM_VOTING
    votes: dict[str, VoteChoice] = Field(default_factory=dict)
    approve: int
    reject: int
    approved: bool
    consecutive_rejections: int

    def __str__(self) -> str:
        result = "approved" if self.approved else "rejected"
        return f"VoteOutcome(mission={self.mission}, {self.approve}-{self.reject} {result})"


class MissionOutcome(GameEvent):
    """Result of a completed mission."""

    phase: Phase = Phase.MISSION_PLAY
    team: list[str]
    fail_count: int
    succeeded: bool
    good_score: int
    evil_score: int

    def __str__(self) -> str:
        result = "succeeded" if self.succeeded else "failed"
        return f"MissionOutcome(mission={self.mission}, {result}, fails={self.fail_count})"


class LeaderChange(GameEvent):
    """Leadership passed to the next roster player."""

    phase: Phase = Phase.TEAM_SELECTION
    previous: Optional[str] = None
    leader: str

    def __str__(self) -> str:
        return f"LeaderChange({self.previous} -> {self.leader})"


class GameOver(GameEvent):
    """Final result."""

    phase: Phase = Phase.GAME_OVER
    winner: Alignment
    condition: VictoryCondition
    good_score: int
    evil_score: int

    def __str__(self) -> str:
        return f"GameOver(winner={self.winner.value}, condition={self.condition.value})"
