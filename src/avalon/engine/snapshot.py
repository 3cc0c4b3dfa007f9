"""Read-only views of a GameSession for the presentation layer.

A snapshot is built for one viewer. It carries only what that viewer is
allowed to know:
- their own role (every role once the game is over)
- their own vision marks while the vision window is open
- ballots once a vote resolved (during voting only who has voted)
- mission cards as counts, never per player
"""

from typing import Optional
from pydantic import BaseModel, Field

from avalon.models.player import Alignment, Role
from avalon.models.mission import MissionStatus, VoteChoice
from avalon.events.game_events import Phase, VictoryCondition
from avalon.events.event_visibility import VisionMark
from avalon.engine.game_session import GameSession, VoteTally


def role_label(role: Role) -> str:
    """Display label for a revealed role: its name if active, else its alignment."""
    return role.value if role.is_active_role else role.alignment.value.capitalize()


class PlayerView(BaseModel):
    """One roster member or spectator as seen by the viewer."""

    id: str
    name: str
    is_bot: bool
    is_leader: bool = False
    role: Optional[Role] = None
    alignment: Optional[Alignment] = None
    role_label: Optional[str] = None  # role name if active, else alignment
    on_team: bool = False
    has_voted: bool = False
    has_played_card: bool = False
    vision_mark: Optional[VisionMark] = None


class MissionView(BaseModel):
    number: int
    required_team_size: int
    fails_required: int
    status: MissionStatus
    team: list[str] = Field(default_factory=list)
    votes: dict[str, VoteChoice] = Field(default_factory=dict)
    voted: list[str] = Field(default_factory=list)
    cards_played: int = 0
    fail_count: Optional[int] = None  # only once resolved
    proposal_count: int = 0


class GameSnapshot(BaseModel):
    """Full state of a game as visible to one viewer (or the public)."""

    game_id: str
    viewer_id: Optional[str] = None
    phase: Phase
    host_id: str
    leader_id: Optional[str] = None
    lobby_locked: bool
    players: list[PlayerView] = Field(default_factory=list)
    spectators: list[PlayerView] = Field(default_factory=list)
    missions: list[MissionView] = Field(default_factory=list)
    current_mission: Optional[int] = None
    good_score: int = 0
    evil_score: int = 0
    consecutive_rejections: int = 0
    last_vote: Optional[VoteTally] = None
    your_role: Optional[Role] = None
    your_role_description: Optional[str] = None
    your_vision: dict[str, VisionMark] = Field(default_factory=dict)
    vision_expires_at: Optional[float] = None
    role_confirmed: bool = False
    assassination_target: Optional[str] = None
    winner: Optional[Alignment] = None
    victory_condition: Optional[VictoryCondition] = None


def build_snapshot(
    session: GameSession,
    viewer_id: Optional[str],
    now: float,
) -> GameSnapshot:
    """Build the snapshot of a session for one viewer.

    Args:
        session: The session to render
        viewer_id: Id of the viewing player, or None for the public view
        now: Current clock reading, used to hide expired vision

    Returns:
        GameSnapshot containing only what the viewer may see
    """
    reveal_all = session.phase == Phase.GAME_OVER
    viewer = session.get_player(viewer_id) if viewer_id else None
    vision = session.active_vision(viewer_id, now) if viewer else {}
    current = session.current_mission

    def view(player, in_roster: bool) -> PlayerView:
        show_role = player.role is not None and (reveal_all or player.id == viewer_id)
        return PlayerView(
            id=player.id,
            name=player.name,
            is_bot=player.is_bot,
            is_leader=in_roster and session.is_leader(player.id),
            role=player.role if show_role else None,
            alignment=player.alignment if show_role else None,
            role_label=role_label(player.role) if show_role else None,
            on_team=current is not None and player.id in current.team,
            has_voted=current is not None and player.id in current.votes,
            has_played_card=current is not None and player.id in current.cards,
            vision_mark=vision.get(player.id),
        )

    missions = []
    for mission in session.missions:
        ballot_open = mission.status == MissionStatus.TEAM_VOTING
        missions.append(MissionView(
            number=mission.number,
            required_team_size=mission.required_team_size,
            fails_required=mission.fails_required,
            status=mission.status,
            team=list(mission.team),
            votes={} if ballot_open else dict(mission.votes),
            voted=list(mission.votes),
            cards_played=len(mission.cards),
            fail_count=mission.fail_count if mission.status.is_resolved else None,
            proposal_count=mission.proposal_count,
        ))

    own_vision = session.visions.get(viewer_id) if viewer and vision else None
    return GameSnapshot(
        game_id=session.game_id,
        viewer_id=viewer_id,
        phase=session.phase,
        host_id=session.host_id,
        leader_id=session.leader_id,
        lobby_locked=session.lobby_locked,
        players=[view(p, True) for p in session.players],
        spectators=[view(s, False) for s in session.spectators],
        missions=missions,
        current_mission=current.number if current else None,
        good_score=session.good_score,
        evil_score=session.evil_score,
        consecutive_rejections=session.consecutive_rejections,
        last_vote=session.last_vote,
        your_role=viewer.role if viewer else None,
        your_role_description=viewer.role.description if viewer and viewer.role else None,
        your_vision=vision,
        vision_expires_at=own_vision.expires_at if own_vision else None,
        role_confirmed=viewer is not None and viewer.id in session.confirmed_roles,
        assassination_target=session.assassination_target,
        winner=session.winner,
        victory_condition=session.victory_condition,
    )
