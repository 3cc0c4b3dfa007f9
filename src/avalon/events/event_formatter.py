"""Event formatter for human-readable game logs.

Formats game events with Name or Role(Name) notation.
"""

from typing import Optional

from .game_events import (
    GameEvent,
    PlayerJoined,
    PlayerLeft,
    LobbyLockToggled,
    ProgressReset,
    RoleConfirmed,
    TeamProposal,
    Vote,
    CardPlay,
    Assassination,
    GameStart,
    VoteOutcome,
    MissionOutcome,
    LeaderChange,
    GameOver,
)


class EventFormatter:
    """Format game events with player names.

    Takes a names mapping and, optionally, a roles_secret mapping and
    produces strings like:
    - "Alice proposed Bob, Carol for mission 1"
    - "Merlin(Alice) voted APPROVE"
    """

    def __init__(
        self,
        names: dict[str, str],
        roles_secret: Optional[dict[str, str]] = None,
    ):
        """Initialize formatter.

        Args:
            names: Dict mapping player id to display name
            roles_secret: Optional dict mapping player id to role name.
                          If None, roles are never shown.
        """
        self.names = names
        self.roles_secret = roles_secret or {}

    def format(self, event: GameEvent) -> str:
        """Format a single event.

        Args:
            event: The game event to format

        Returns:
            Human-readable string describing the event
        """
        return self._dispatch(event)

    def _dispatch(self, event: GameEvent) -> str:
        """Route event to appropriate formatter method."""
        if isinstance(event, PlayerJoined):
            where = "the game" if event.as_player else "as a spectator"
            return f"{self._who(event.actor)} joined {where}"
        elif isinstance(event, PlayerLeft):
            return f"{self._who(event.actor)} left the game and is now spectating"
        elif isinstance(event, LobbyLockToggled):
            return f"{self._who(event.actor)} {'locked' if event.locked else 'unlocked'} the lobby"
        elif isinstance(event, ProgressReset):
            return f"{self._who(event.actor)} reset the game progress"
        elif isinstance(event, RoleConfirmed):
            return f"{self._who(event.actor)} confirmed their role"
        elif isinstance(event, TeamProposal):
            return self._format_team_proposal(event)
        elif isinstance(event, Vote):
            return f"{self._who(event.actor)} voted {event.choice.value}"
        elif isinstance(event, CardPlay):
            return f"{self._who(event.actor)} played {event.card.value}"
        elif isinstance(event, Assassination):
            return self._format_assassination(event)
        elif isinstance(event, GameStart):
            return f"Game started with {event.player_count} players, {self._who(event.leader)} leads"
        elif isinstance(event, VoteOutcome):
            return self._format_vote_outcome(event)
        elif isinstance(event, MissionOutcome):
            return self._format_mission_outcome(event)
        elif isinstance(event, LeaderChange):
            return f"Leadership passes to {self._who(event.leader)}"
        elif isinstance(event, GameOver):
            return (
                f"GAME OVER: {event.winner.value} wins ({event.condition.value}), "
                f"score {event.good_score}-{event.evil_score}"
            )
        else:
            # Fallback for unknown events
            return str(event)

    def _who(self, player_id: Optional[str]) -> str:
        """Format a player as Name or Role(Name)."""
        if player_id is None:
            return "nobody"
        name = self.names.get(player_id, player_id)
        role = self.roles_secret.get(player_id)
        if role:
            return f"{role}({name})"
        return name

    def _format_team_proposal(self, event: TeamProposal) -> str:
        team = ", ".join(self._who(member) for member in event.team)
        return (
            f"{self._who(event.actor)} proposed {team} for mission {event.mission} "
            f"(proposal {event.proposal_number})"
        )

    def _format_vote_outcome(self, event: VoteOutcome) -> str:
        result = "approved" if event.approved else "rejected"
        line = f"Team {result} ({event.approve} for, {event.reject} against)"
        if not event.approved:
            line += f", rejection {event.consecutive_rejections}"
        return line

    def _format_mission_outcome(self, event: MissionOutcome) -> str:
        result = "succeeded" if event.succeeded else "failed"
        return (
            f"Mission {event.mission} {result} with {event.fail_count} fail card(s); "
            f"Good {event.good_score} - Evil {event.evil_score}"
        )

    def _format_assassination(self, event: Assassination) -> str:
        result = "and found Merlin" if event.hit else "but missed Merlin"
        return f"{self._who(event.actor)} assassinated {self._who(event.target)} {result}"
