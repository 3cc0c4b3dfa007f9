"""Events package."""

from avalon.events.game_events import (
    # Base
    GameEvent,
    CharacterAction,
    # Enums
    Phase,
    VictoryCondition,
    # Character Actions
    PlayerJoined,
    PlayerLeft,
    LobbyLockToggled,
    ProgressReset,
    RoleConfirmed,
    TeamProposal,
    Vote,
    CardPlay,
    Assassination,
    # Non-Character Events
    GameStart,
    VoteOutcome,
    MissionOutcome,
    LeaderChange,
    GameOver,
)

from avalon.events.event_log import (
    GameEventLog,
    MissionLog,
)
from avalon.events.event_formatter import EventFormatter
from avalon.events.event_visibility import (
    VisionMark,
    compute_vision,
    compute_all_visions,
    is_public_event,
    get_public_events,
    get_visible_events,
)

__all__ = [
    # Base
    "GameEvent",
    "CharacterAction",
    # Enums
    "Phase",
    "VictoryCondition",
    # Character Actions
    "PlayerJoined",
    "PlayerLeft",
    "LobbyLockToggled",
    "ProgressReset",
    "RoleConfirmed",
    "TeamProposal",
    "Vote",
    "CardPlay",
    "Assassination",
    # Non-Character Events
    "GameStart",
    "VoteOutcome",
    "MissionOutcome",
    "LeaderChange",
    "GameOver",
    # Logs
    "GameEventLog",
    "MissionLog",
    "EventFormatter",
    # Visibility
    "VisionMark",
    "compute_vision",
    "compute_all_visions",
    "is_public_event",
    "get_public_events",
    "get_visible_events",
]
