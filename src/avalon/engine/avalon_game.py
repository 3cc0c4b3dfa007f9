"""AvalonGame - the game engine that owns one match and applies actions."""

import logging
import random
import time
from typing import Callable, Optional, TYPE_CHECKING
from pydantic import BaseModel, Field, SerializeAsAny

from avalon.models import (
    Alignment,
    CardChoice,
    GameConfig,
    MissionStatus,
    Player,
    PlayerType,
    Role,
    VoteChoice,
)
from avalon.events import GameEvent, GameEventLog, GameOver, Phase, get_visible_events
from avalon.engine.actions import (
    Action,
    AddSpectator,
    Assassinate,
    CastVote,
    ConfirmRoleSeen,
    JoinAsPlayer,
    LeaveLobby,
    PlayCard,
    ProposeTeam,
    ResetProgress,
    StartGame,
    ToggleLobbyLock,
)
from avalon.engine.errors import (
    EngineInvariantError,
    ErrorKind,
    GameActionError,
    IllegalPhaseAction,
    UnauthorizedActor,
)
from avalon.engine.game_session import GameSession
from avalon.engine.snapshot import GameSnapshot, build_snapshot
from avalon.ai.stub_ai import BotPolicy, StubBot
from avalon.ai.advisor import AssassinationAdvisor, AssassinationSuggestion

# Import validator for type hints (avoid circular import)
if TYPE_CHECKING:
    from avalon.engine.validator import GameValidator

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[GameSnapshot], None]


class ActionResult(BaseModel):
    """Outcome of one submitted action.

    Accepted actions carry the snapshot as seen by the acting player and
    the events the action produced (bot follow-ups included) that the
    acting player may see. Rejected actions carry the error kind and a
    reason for display.
    """

    accepted: bool
    snapshot: Optional[GameSnapshot] = None
    events: list[SerializeAsAny[GameEvent]] = Field(default_factory=list)
    error: Optional[ErrorKind] = None
    reason: Optional[str] = None


def _actor_of(action: Action) -> Optional[str]:
    """Id of the player an action acts on behalf of."""
    for field in ("player_id", "leader_id", "assassin_id", "requester_id", "spectator_id"):
        value = getattr(action, field, None)
        if value is not None:
            return value
    return None


class AvalonGame:
    """Main game controller - owns one GameSession and serializes its mutation.

    Game Flow:
        1. Lobby: spectators join the roster, leader locks/unlocks, starts with 5
        2. Role reveal: roles dealt, each player confirms and sees their vision
        3. Missions: propose -> vote -> play cards, leader rotating
        4. Assassination once Good wins three missions
        5. Game over

    Every action goes through handle(). A rejected action leaves the
    session exactly as it was.
    """

    def __init__(
        self,
        game_id: str,
        host_id: str,
        host_name: str,
        host_type: PlayerType = PlayerType.HUMAN,
        config: Optional[GameConfig] = None,
        bot_policy: Optional[BotPolicy] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
        validator: Optional["GameValidator"] = None,
    ):
        """Initialize the AvalonGame.

        Args:
            game_id: Session identifier.
            host_id: Id of the lobby creator, the first player and leader.
            host_name: Display name of the host.
            host_type: Whether the host is a human or a bot.
            config: Game rules; defaults to the standard 5-player rules.
            bot_policy: Decision maker for bot players. Defaults to StubBot.
            seed: Optional random seed for reproducible role deals.
            clock: Returns the current time in seconds; drives vision expiry.
                   Defaults to time.monotonic.
            validator: Optional validator for runtime rule checking.
                       Pass None or NoOpValidator for production (zero overhead).
        """
        self._session = GameSession(
            game_id=game_id,
            config=config or GameConfig(),
            host_id=host_id,
            players=[Player(id=host_id, name=host_name, player_type=host_type)],
        )
        self._rng = random.Random(seed)
        self._bot_policy: BotPolicy = bot_policy or StubBot(seed=seed)
        self._clock = clock or time.monotonic
        self._validator = validator
        self._listeners: list[SnapshotListener] = []
        self._event_log = self._new_event_log()
        self._faulted = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def game_id(self) -> str:
        return self._session.game_id

    @property
    def session(self) -> GameSession:
        """The live session. Treat as read-only; mutate through handle()."""
        return self._session

    @property
    def phase(self) -> Phase:
        return self._session.phase

    @property
    def event_log(self) -> GameEventLog:
        return self._event_log

    @property
    def is_faulted(self) -> bool:
        return self._faulted

    # =========================================================================
    # Action API
    # =========================================================================

    def handle(self, action: Action) -> ActionResult:
        """Validate and apply one action atomically.

        Bot follow-ups (votes, cards, proposals, assassination) are
        resolved in the same call once the human inputs they wait on are in.

        Raises:
            EngineInvariantError: If the engine reached an impossible state.
                The game is faulted afterwards and only accepts ResetProgress.
        """
        if self._faulted and not isinstance(action, ResetProgress):
            raise EngineInvariantError(f"Game {self.game_id} is faulted; reset required")

        backup = self._session.model_copy(deep=True)
        try:
            self._session.expire_visions(self._clock())
            events = self._apply(action)
            events.extend(self._resolve_bots())
        except GameActionError as exc:
            self._session = backup
            logger.warning("Rejected %s: %s", type(action).__name__, exc)
            return ActionResult(accepted=False, error=exc.kind, reason=exc.reason)
        except EngineInvariantError:
            self._faulted = True
            logger.error("Game %s faulted while applying %s", self.game_id, action, exc_info=True)
            raise

        if isinstance(action, ResetProgress):
            self._faulted = False

        logger.debug("Applied %s producing %d event(s)", type(action).__name__, len(events))
        self._record(events)

        if self._validator:
            self._validator.on_action_applied(action, self._session, events)
            if any(isinstance(event, GameOver) for event in events):
                self._validator.on_game_over(self._session)

        self._broadcast()
        actor_id = _actor_of(action)
        return ActionResult(
            accepted=True,
            snapshot=self.snapshot(actor_id),
            events=get_visible_events(events, actor_id),
        )

    def add_spectator(
        self,
        player_id: str,
        name: str,
        player_type: PlayerType = PlayerType.HUMAN,
    ) -> ActionResult:
        return self.handle(AddSpectator(player_id=player_id, name=name, player_type=player_type))

    def join_as_player(self, spectator_id: str, requester_id: Optional[str] = None) -> ActionResult:
        return self.handle(JoinAsPlayer(spectator_id=spectator_id, requester_id=requester_id))

    def leave_lobby(self, player_id: str) -> ActionResult:
        return self.handle(LeaveLobby(player_id=player_id))

    def toggle_lobby_lock(self, leader_id: str) -> ActionResult:
        return self.handle(ToggleLobbyLock(leader_id=leader_id))

    def start_game(self, leader_id: str) -> ActionResult:
        return self.handle(StartGame(leader_id=leader_id))

    def reset_progress(self, leader_id: str) -> ActionResult:
        return self.handle(ResetProgress(leader_id=leader_id))

    def confirm_role_seen(self, player_id: str) -> ActionResult:
        return self.handle(ConfirmRoleSeen(player_id=player_id))

    def propose_team(self, leader_id: str, member_ids: list[str]) -> ActionResult:
        return self.handle(ProposeTeam(leader_id=leader_id, member_ids=list(member_ids)))

    def cast_vote(self, player_id: str, choice: VoteChoice) -> ActionResult:
        return self.handle(CastVote(player_id=player_id, choice=choice))

    def play_card(self, player_id: str, card: CardChoice) -> ActionResult:
        return self.handle(PlayCard(player_id=player_id, card=card))

    def assassinate(self, assassin_id: str, target_id: str) -> ActionResult:
        return self.handle(Assassinate(assassin_id=assassin_id, target_id=target_id))

    # =========================================================================
    # Read side
    # =========================================================================

    def snapshot(self, viewer_id: Optional[str] = None) -> GameSnapshot:
        """Current state as visible to viewer_id (public view if None)."""
        now = self._clock()
        self._session.expire_visions(now)
        return build_snapshot(self._session, viewer_id, now)

    def tick(self, now: Optional[float] = None) -> list[str]:
        """Clear expired visions; for external schedulers.

        Args:
            now: Clock reading to expire against (defaults to the game clock)

        Returns:
            Ids of players whose vision was cleared
        """
        return self._session.expire_visions(self._clock() if now is None else now)

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a callback receiving the public snapshot after each accepted action."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener) -> None:
        self._listeners.remove(listener)

    async def request_assassination_advice(
        self,
        requester_id: str,
        advisor: AssassinationAdvisor,
        transcript: Optional[str] = None,
    ) -> AssassinationSuggestion:
        """Ask an advisor who to strike. Never changes the game.

        Args:
            requester_id: Must be the Assassin
            advisor: The oracle to consult
            transcript: Free-text transcript; defaults to the public event log

        Raises:
            IllegalPhaseAction: Outside the assassination phase
            UnauthorizedActor: Requester is not the Assassin
            ValueError: The advisor named someone outside the roster
        """
        session = self._session
        if session.phase != Phase.ASSASSINATION:
            raise IllegalPhaseAction("Advice is only available during the assassination.")
        requester = session.require_player(requester_id)
        if requester.role != Role.ASSASSIN:
            raise UnauthorizedActor("Only the Assassin may consult the advisor.")

        names = [p.name for p in session.players]
        text = transcript if transcript is not None else self._event_log.to_transcript()
        suggestion = await advisor.suggest(names, text)
        if suggestion.target not in names:
            raise ValueError(f"Advisor suggested unknown player {suggestion.target!r}")
        return suggestion

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(self, action: Action) -> list[GameEvent]:
        """Route an action to its session transition."""
        session = self._session
        if isinstance(action, AddSpectator):
            return session.add_spectator(action.player_id, action.name, action.player_type)
        elif isinstance(action, JoinAsPlayer):
            return session.join_as_player(action.spectator_id, action.requester_id)
        elif isinstance(action, LeaveLobby):
            return session.leave_lobby(action.player_id)
        elif isinstance(action, ToggleLobbyLock):
            return session.toggle_lobby_lock(action.leader_id)
        elif isinstance(action, StartGame):
            events = session.start_game(action.leader_id, self._rng)
            self._event_log = self._new_event_log()
            return events
        elif isinstance(action, ResetProgress):
            return session.reset_progress(action.leader_id)
        elif isinstance(action, ConfirmRoleSeen):
            return session.confirm_role_seen(action.player_id, self._clock())
        elif isinstance(action, ProposeTeam):
            return session.propose_team(action.leader_id, action.member_ids)
        elif isinstance(action, CastVote):
            return session.cast_vote(action.player_id, action.choice)
        elif isinstance(action, PlayCard):
            return session.play_card(action.player_id, action.card)
        elif isinstance(action, Assassinate):
            return session.assassinate(action.assassin_id, action.target_id)
        raise TypeError(f"Unsupported action {type(action).__name__}")

    def _resolve_bots(self) -> list[GameEvent]:
        """Apply bot decisions until the game waits on a human (or ends)."""
        events: list[GameEvent] = []
        while True:
            action = self._next_bot_action()
            if action is None:
                return events
            try:
                events.extend(self._apply(action))
            except GameActionError as exc:
                raise EngineInvariantError(f"Bot produced an illegal action {action!r}: {exc}") from exc

    def _next_bot_action(self) -> Optional[Action]:
        """The next bot decision the current barrier needs, if any.

        Bots act only after every human participant of the barrier has.
        """
        session = self._session
        policy = self._bot_policy
        phase = session.phase

        if phase == Phase.ROLE_REVEAL:
            # Only an all-bot roster needs a bot to open team selection
            if any(not p.is_bot for p in session.players):
                return None
            bot = session.players[0]
            return ConfirmRoleSeen(player_id=bot.id)

        if phase == Phase.TEAM_SELECTION:
            leader = session.leader
            if leader is None or not leader.is_bot:
                return None
            return ProposeTeam(leader_id=leader.id, member_ids=policy.propose_team(session, leader.id))

        if phase == Phase.TEAM_VOTING:
            mission = session.require_current_mission()
            pending = [
                session.get_player(pid) for pid in session.eligible_voters
                if pid not in mission.votes
            ]
            if any(not p.is_bot for p in pending) or not pending:
                return None
            bot = pending[0]
            return CastVote(player_id=bot.id, choice=policy.vote(session, bot.id))

        if phase == Phase.MISSION_PLAY:
            mission = session.require_current_mission()
            if mission.status != MissionStatus.IN_PROGRESS:
                raise EngineInvariantError(f"Mission {mission.number} is {mission.status.value} during play")
            pending = [session.get_player(pid) for pid in mission.team if pid not in mission.cards]
            if any(not p.is_bot for p in pending) or not pending:
                return None
            bot = pending[0]
            return PlayCard(player_id=bot.id, card=policy.play_card(session, bot.id))

        if phase == Phase.ASSASSINATION:
            assassin = session.find_role(Role.ASSASSIN)
            if assassin is None or not assassin.is_bot:
                return None
            return Assassinate(
                assassin_id=assassin.id,
                target_id=policy.choose_assassination_target(session, assassin.id),
            )

        return None

    def _new_event_log(self) -> GameEventLog:
        return GameEventLog(
            game_id=self._session.game_id,
            names={p.id: p.name for p in self._session.players + self._session.spectators},
        )

    def _record(self, events: list[GameEvent]) -> None:
        log = self._event_log
        for member in self._session.players + self._session.spectators:
            log.names.setdefault(member.id, member.name)
        for event in events:
            log.add_event(event)

    def _broadcast(self) -> None:
        if not self._listeners:
            return
        public = self.snapshot(None)
        for listener in list(self._listeners):
            try:
                listener(public)
            except Exception:
                logger.exception("Snapshot listener failed for game %s", self.game_id)

    @property
    def winner(self) -> Optional[Alignment]:
        return self._session.winner
