"""Game session state for one Avalon match.

GameSession is the single owned value holding every per-match field.
Each action has exactly one transition method here; a method either
raises a GameActionError before touching any field, or applies the
whole transition and returns the events it produced.
"""

import logging
import random
from typing import Optional
from pydantic import BaseModel, Field

from avalon.models.player import Alignment, Player, PlayerType, Role, assign_roles
from avalon.models.mission import (
    CardChoice,
    Mission,
    MissionStatus,
    VoteChoice,
    create_missions,
)
from avalon.models.config import GameConfig
from avalon.events.game_events import (
    Assassination,
    CardPlay,
    GameEvent,
    GameOver,
    GameStart,
    LeaderChange,
    LobbyLockToggled,
    MissionOutcome,
    Phase,
    PlayerJoined,
    PlayerLeft,
    ProgressReset,
    RoleConfirmed,
    TeamProposal,
    VictoryCondition,
    Vote,
    VoteOutcome,
)
from avalon.events.event_visibility import VisionMark, compute_all_visions
from avalon.engine.errors import (
    DuplicateAction,
    EngineInvariantError,
    IllegalCardChoice,
    IllegalPhaseAction,
    InvalidTarget,
    InvalidTeamSize,
    RosterSizeInvalid,
    UnauthorizedActor,
    UnknownPlayer,
)

logger = logging.getLogger(__name__)

# Phases in which a dealt role may still be acknowledged
_CONFIRMABLE_PHASES = (
    Phase.ROLE_REVEAL,
    Phase.TEAM_SELECTION,
    Phase.TEAM_VOTING,
    Phase.MISSION_PLAY,
    Phase.ASSASSINATION,
)


class Vision(BaseModel):
    """A player's time-limited view of the players their role reveals."""

    marks: dict[str, VisionMark] = Field(default_factory=dict)
    expires_at: float


class VoteTally(BaseModel):
    """The most recently resolved ballot."""

    mission: int
    votes: dict[str, VoteChoice]
    approve: int
    reject: int
    approved: bool


class GameSession(BaseModel):
    """Represents the complete state of one match.

    The roster and the leader pointer are the only fields that outlive a
    single mission; everything else is scoped to the current mission or
    to the match and is wiped by reset_progress.
    """

    game_id: str
    config: GameConfig = Field(default_factory=GameConfig)
    host_id: str
    players: list[Player] = Field(default_factory=list)  # roster, seat order
    spectators: list[Player] = Field(default_factory=list)

    phase: Phase = Phase.LOBBY_SETUP
    lobby_locked: bool = True
    leader_index: int = 0
    missions: list[Mission] = Field(default_factory=list)
    good_score: int = 0
    evil_score: int = 0
    consecutive_rejections: int = 0

    confirmed_roles: list[str] = Field(default_factory=list)
    pending_visions: dict[str, dict[str, VisionMark]] = Field(default_factory=dict)
    visions: dict[str, Vision] = Field(default_factory=dict)
    last_vote: Optional[VoteTally] = None

    assassination_target: Optional[str] = None
    winner: Optional[Alignment] = None
    victory_condition: Optional[VictoryCondition] = None

    # =========================================================================
    # Queries
    # =========================================================================

    def get_player(self, player_id: str) -> Optional[Player]:
        """Get roster player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_spectator(self, player_id: str) -> Optional[Player]:
        for spectator in self.spectators:
            if spectator.id == player_id:
                return spectator
        return None

    def is_member(self, player_id: str) -> bool:
        """Check if an id belongs to the roster or the spectators."""
        return self.get_player(player_id) is not None or self.get_spectator(player_id) is not None

    def require_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise UnknownPlayer(f"{player_id} is not a player in this game.")
        return player

    @property
    def leader(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.leader_index]

    @property
    def leader_id(self) -> Optional[str]:
        leader = self.leader
        return leader.id if leader else None

    def is_leader(self, player_id: str) -> bool:
        return self.leader_id == player_id

    @property
    def current_mission(self) -> Optional[Mission]:
        """The mission in TEAM_SELECTION, TEAM_VOTING or IN_PROGRESS."""
        for mission in self.missions:
            if mission.status.is_current:
                return mission
        return None

    def require_current_mission(self) -> Mission:
        mission = self.current_mission
        if mission is None:
            raise EngineInvariantError(f"No current mission in phase {self.phase.value}")
        return mission

    @property
    def eligible_voters(self) -> list[str]:
        """Everyone on the roster except the leader."""
        return [player.id for player in self.players if player.id != self.leader_id]

    @property
    def resolved_mission_count(self) -> int:
        return sum(1 for mission in self.missions if mission.status.is_resolved)

    @property
    def is_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def find_role(self, role: Role) -> Optional[Player]:
        for player in self.players:
            if player.role == role:
                return player
        return None

    def active_vision(self, player_id: str, now: float) -> dict[str, VisionMark]:
        """Marks the player may currently see (empty once expired)."""
        vision = self.visions.get(player_id)
        if vision is None or now >= vision.expires_at:
            return {}
        return dict(vision.marks)

    def expire_visions(self, now: float) -> list[str]:
        """Drop every vision whose window has closed.

        Returns:
            Ids of players whose vision was cleared
        """
        expired = [pid for pid, vision in self.visions.items() if now >= vision.expires_at]
        for pid in expired:
            del self.visions[pid]
        return expired

    # =========================================================================
    # Lobby
    # =========================================================================

    def add_spectator(self, player_id: str, name: str, player_type: PlayerType) -> list[GameEvent]:
        if self.is_member(player_id):
            raise DuplicateAction(f"{player_id} is already in this game.")
        self.spectators.append(Player(id=player_id, name=name, player_type=player_type))
        return [PlayerJoined(actor=player_id, as_player=False, phase=self.phase)]

    def join_as_player(self, spectator_id: str, requester_id: Optional[str] = None) -> list[GameEvent]:
        if self.phase != Phase.LOBBY_SETUP:
            raise IllegalPhaseAction("Cannot join as player once the game has started.")
        spectator = self.get_spectator(spectator_id)
        if spectator is None:
            raise UnknownPlayer(f"{spectator_id} is not spectating this game.")
        requester = requester_id or spectator_id
        if requester_id is not None and not self.is_member(requester_id):
            raise UnknownPlayer(f"{requester_id} is not in this game.")
        if self.lobby_locked and not self.is_leader(requester):
            raise UnauthorizedActor(
                "The leader needs to unlock the lobby to allow spectators to join as players."
            )
        if len(self.players) >= self.config.max_roster:
            raise RosterSizeInvalid(f"Maximum number of players ({self.config.max_roster}) reached.")

        self.spectators.remove(spectator)
        spectator.role = None
        self.players.append(spectator)
        return [PlayerJoined(actor=spectator_id, as_player=True)]

    def leave_lobby(self, player_id: str) -> list[GameEvent]:
        if self.phase != Phase.LOBBY_SETUP:
            raise IllegalPhaseAction("Players cannot leave the roster during a match.")
        player = self.require_player(player_id)
        if player_id == self.host_id or self.is_leader(player_id):
            raise UnauthorizedActor("The leader cannot leave the game.")

        index = self.players.index(player)
        self.players.remove(player)
        if index < self.leader_index:
            self.leader_index -= 1
        self.spectators.append(player)
        return [PlayerLeft(actor=player_id)]

    def toggle_lobby_lock(self, leader_id: str) -> list[GameEvent]:
        if self.phase != Phase.LOBBY_SETUP:
            raise IllegalPhaseAction("The lobby can only be locked or unlocked before the game starts.")
        self.require_player(leader_id)
        if not self.is_leader(leader_id):
            raise UnauthorizedActor("Only the leader can lock or unlock the lobby.")
        self.lobby_locked = not self.lobby_locked
        return [LobbyLockToggled(actor=leader_id, locked=self.lobby_locked)]

    # =========================================================================
    # Match setup
    # =========================================================================

    def start_game(self, leader_id: str, rng: random.Random) -> list[GameEvent]:
        if self.phase != Phase.LOBBY_SETUP:
            raise IllegalPhaseAction("The game has already started.")
        self.require_player(leader_id)
        if not self.is_leader(leader_id):
            raise UnauthorizedActor("Only the leader can start the game.")
        size = len(self.players)
        if not self.config.supports_roster(size):
            supported = ", ".join(str(s) for s in self.config.supported_roster_sizes)
            raise RosterSizeInvalid(
                f"You need exactly {supported} players to start. Currently: {size}."
            )

        roles = assign_roles(rng, [p.id for p in self.players], self.config.role_table[size])
        for player in self.players:
            player.role = roles[player.id]

        self.missions = create_missions(self.config.mission_table[size])
        self.missions[0].status = MissionStatus.TEAM_SELECTION
        self.good_score = 0
        self.evil_score = 0
        self.consecutive_rejections = 0
        self.lobby_locked = True
        self.confirmed_roles = []
        self.visions = {}
        self.pending_visions = compute_all_visions(self.players)
        self.last_vote = None
        self.assassination_target = None
        self.winner = None
        self.victory_condition = None
        self.phase = Phase.ROLE_REVEAL

        logger.info("Game %s started with %d players", self.game_id, size)
        return [
            GameStart(
                player_count=size,
                roles_secret={p.id: p.role.value for p in self.players},
                leader=leader_id,
            )
        ]

    def confirm_role_seen(self, player_id: str, now: float) -> list[GameEvent]:
        if self.phase not in _CONFIRMABLE_PHASES:
            raise IllegalPhaseAction("There is no role to confirm right now.")
        self.require_player(player_id)
        if player_id in self.confirmed_roles:
            raise DuplicateAction("You have already confirmed your role.")

        self.confirmed_roles.append(player_id)
        self.visions[player_id] = Vision(
            marks=self.pending_visions.pop(player_id, {}),
            expires_at=now + self.config.vision_seconds,
        )
        phase = self.phase
        if self.phase == Phase.ROLE_REVEAL:
            self.phase = Phase.TEAM_SELECTION
        return [RoleConfirmed(actor=player_id, phase=phase)]

    def reset_progress(self, leader_id: str) -> list[GameEvent]:
        self.require_player(leader_id)
        if not (self.is_leader(leader_id) or leader_id == self.host_id):
            raise UnauthorizedActor("Only the leader can reset the game.")

        for member in self.players + self.spectators:
            member.role = None
        host = self.get_player(self.host_id)
        self.leader_index = self.players.index(host) if host else 0
        self.phase = Phase.LOBBY_SETUP
        self.lobby_locked = True
        self.missions = []
        self.good_score = 0
        self.evil_score = 0
        self.consecutive_rejections = 0
        self.confirmed_roles = []
        self.pending_visions = {}
        self.visions = {}
        self.last_vote = None
        self.assassination_target = None
        self.winner = None
        self.victory_condition = None

        logger.info("Game %s progress reset by %s", self.game_id, leader_id)
        return [ProgressReset(actor=leader_id)]

    # =========================================================================
    # Team selection and voting
    # =========================================================================

    def propose_team(self, leader_id: str, member_ids: list[str]) -> list[GameEvent]:
        if self.phase != Phase.TEAM_SELECTION:
            raise IllegalPhaseAction("Teams can only be proposed during team selection.")
        self.require_player(leader_id)
        if not self.is_leader(leader_id):
            raise UnauthorizedActor("Only the current quest leader can propose a team.")
        mission = self.require_current_mission()
        if mission.status != MissionStatus.TEAM_SELECTION:
            raise EngineInvariantError(
                f"Mission {mission.number} is {mission.status.value} during team selection"
            )
        for member_id in member_ids:
            if self.get_player(member_id) is None:
                raise UnknownPlayer(f"{member_id} is not a player in this game.")
        if len(set(member_ids)) != len(member_ids):
            raise InvalidTarget("A player can only be on the team once.")
        if len(member_ids) != mission.required_team_size:
            raise InvalidTeamSize(
                f"Please select exactly {mission.required_team_size} players for this quest."
            )

        mission.team = list(member_ids)
        mission.votes = {}
        mission.cards = {}
        mission.proposal_count += 1
        mission.status = MissionStatus.TEAM_VOTING
        self.phase = Phase.TEAM_VOTING
        return [
            TeamProposal(
                actor=leader_id,
                mission=mission.number,
                team=list(member_ids),
                proposal_number=mission.proposal_count,
            )
        ]

    def cast_vote(self, player_id: str, choice: VoteChoice) -> list[GameEvent]:
        if self.phase != Phase.TEAM_VOTING:
            raise IllegalPhaseAction("There is no team to vote on right now.")
        self.require_player(player_id)
        if self.is_leader(player_id):
            raise UnauthorizedActor("Leader does not vote on teams.")
        mission = self.require_current_mission()
        if player_id in mission.votes:
            raise DuplicateAction("You have already voted.")

        mission.votes[player_id] = choice
        events: list[GameEvent] = [Vote(actor=player_id, mission=mission.number, choice=choice)]
        if len(mission.votes) == len(self.eligible_voters):
            events.extend(self._resolve_vote(mission))
        return events

    def _resolve_vote(self, mission: Mission) -> list[GameEvent]:
        """Tally a complete ballot. Ties reject."""
        approve = mission.approve_count
        reject = mission.reject_count
        approved = approve > reject

        if approved:
            self.consecutive_rejections = 0
        else:
            self.consecutive_rejections += 1

        self.last_vote = VoteTally(
            mission=mission.number,
            votes=dict(mission.votes),
            approve=approve,
            reject=reject,
            approved=approved,
        )
        events: list[GameEvent] = [
            VoteOutcome(
                mission=mission.number,
                votes=dict(mission.votes),
                approve=approve,
                reject=reject,
                approved=approved,
                consecutive_rejections=self.consecutive_rejections,
            )
        ]
        logger.info(
            "Mission %d proposal %d %s (%d-%d)",
            mission.number, mission.proposal_count,
            "approved" if approved else "rejected", approve, reject,
        )

        if approved:
            mission.status = MissionStatus.IN_PROGRESS
            mission.cards = {}
            self.phase = Phase.MISSION_PLAY
            return events

        if self.consecutive_rejections >= self.config.max_consecutive_rejections:
            self.evil_score = min(self.config.wins_needed, self.evil_score + self.config.wins_needed)
            events.append(self._end_game(Alignment.EVIL, VictoryCondition.FOUR_REJECTIONS, mission.number))
            return events

        mission.status = MissionStatus.TEAM_SELECTION
        mission.team = []
        mission.votes = {}
        self.phase = Phase.TEAM_SELECTION
        events.append(self._pass_leadership(mission.number))
        return events

    # =========================================================================
    # Mission play
    # =========================================================================

    def play_card(self, player_id: str, card: CardChoice) -> list[GameEvent]:
        if self.phase != Phase.MISSION_PLAY:
            raise IllegalPhaseAction("There is no mission underway.")
        player = self.require_player(player_id)
        mission = self.require_current_mission()
        if player_id not in mission.team:
            raise UnauthorizedActor("You are not part of the current quest team.")
        if player_id in mission.cards:
            raise DuplicateAction("You have already played a card for this mission.")
        if card == CardChoice.FAIL and player.alignment != Alignment.EVIL:
            raise IllegalCardChoice("As a Good player, you must play 'Success'.")

        mission.cards[player_id] = card
        events: list[GameEvent] = [CardPlay(actor=player_id, mission=mission.number, card=card)]
        if len(mission.cards) == len(mission.team):
            events.extend(self._resolve_mission(mission))
        return events

    def _resolve_mission(self, mission: Mission) -> list[GameEvent]:
        """Score a mission once every team member has played."""
        fail_count = mission.fail_count
        succeeded = fail_count < mission.fails_required
        wins_needed = self.config.wins_needed

        if succeeded:
            mission.status = MissionStatus.SUCCEEDED
            self.good_score = min(wins_needed, self.good_score + 1)
        else:
            mission.status = MissionStatus.FAILED
            self.evil_score = min(wins_needed, self.evil_score + 1)

        events: list[GameEvent] = [
            MissionOutcome(
                mission=mission.number,
                team=list(mission.team),
                fail_count=fail_count,
                succeeded=succeeded,
                good_score=self.good_score,
                evil_score=self.evil_score,
            )
        ]
        logger.info(
            "Mission %d %s with %d fail card(s); Good %d - Evil %d",
            mission.number, "succeeded" if succeeded else "failed",
            fail_count, self.good_score, self.evil_score,
        )

        if self.good_score >= wins_needed:
            if self.find_role(Role.ASSASSIN) is None:
                # No one can strike; Good's three missions stand
                events.append(self._end_game(Alignment.GOOD, VictoryCondition.MERLIN_SURVIVED, mission.number))
            else:
                self.phase = Phase.ASSASSINATION
            return events

        if self.evil_score >= wins_needed:
            events.append(self._end_game(Alignment.EVIL, VictoryCondition.THREE_MISSIONS_FAILED, mission.number))
            return events

        next_mission = next((m for m in self.missions if m.status == MissionStatus.PENDING), None)
        if next_mission is None:
            raise EngineInvariantError("No pending missions, but game not decided by score.")

        events.append(self._pass_leadership(mission.number))
        next_mission.status = MissionStatus.TEAM_SELECTION
        next_mission.team = []
        next_mission.votes = {}
        next_mission.cards = {}
        self.phase = Phase.TEAM_SELECTION
        return events

    # =========================================================================
    # Assassination
    # =========================================================================

    def assassinate(self, assassin_id: str, target_id: str) -> list[GameEvent]:
        if self.phase != Phase.ASSASSINATION:
            raise IllegalPhaseAction("The Assassin can only strike after Good wins three quests.")
        assassin = self.require_player(assassin_id)
        if assassin.role != Role.ASSASSIN:
            raise UnauthorizedActor("Only the Assassin can name a target.")
        target = self.require_player(target_id)
        if target_id == assassin_id:
            raise InvalidTarget("The Assassin cannot target themselves.")

        hit = target.role == Role.MERLIN
        self.assassination_target = target_id
        events: list[GameEvent] = [Assassination(actor=assassin_id, target=target_id, hit=hit)]
        if hit:
            events.append(self._end_game(Alignment.EVIL, VictoryCondition.MERLIN_ASSASSINATED))
        else:
            events.append(self._end_game(Alignment.GOOD, VictoryCondition.MERLIN_SURVIVED))
        return events

    # =========================================================================
    # Helpers
    # =========================================================================

    def _pass_leadership(self, mission_number: int) -> LeaderChange:
        """Round-robin to the next roster player."""
        previous = self.leader_id
        self.leader_index = (self.leader_index + 1) % len(self.players)
        return LeaderChange(
            previous=previous,
            leader=self.leader_id,
            mission=mission_number,
            phase=Phase.TEAM_SELECTION,
        )

    def _end_game(
        self,
        winner: Alignment,
        condition: VictoryCondition,
        mission_number: int = 0,
    ) -> GameOver:
        self.phase = Phase.GAME_OVER
        self.winner = winner
        self.victory_condition = condition
        logger.info("Game %s over: %s wins (%s)", self.game_id, winner.value, condition.value)
        return GameOver(
            mission=mission_number,
            winner=winner,
            condition=condition,
            good_score=self.good_score,
            evil_score=self.evil_score,
        )
