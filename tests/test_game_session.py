"""Tests for GameSession transitions.

These drive GameSession directly, without the AvalonGame controller,
so rejected actions here raise instead of producing an ActionResult.
"""

import random
import pytest

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
from avalon.events import (
    GameOver,
    LeaderChange,
    MissionOutcome,
    Phase,
    VictoryCondition,
    VoteOutcome,
    compute_all_visions,
)
from avalon.engine import (
    DuplicateAction,
    EngineInvariantError,
    GameSession,
    IllegalCardChoice,
    IllegalPhaseAction,
    InvalidTarget,
    InvalidTeamSize,
    RosterSizeInvalid,
    UnauthorizedActor,
    UnknownPlayer,
)

ROLES_BY_SEAT = [Role.MERLIN, Role.PERCIVAL, Role.LOYAL_SERVANT, Role.MORGANA, Role.ASSASSIN]


def create_lobby_session(size: int = 5) -> GameSession:
    """Helper to create a lobby with players p1..pN, p1 hosting."""
    players = [
        Player(id=f"p{i + 1}", name=f"Player{i + 1}", player_type=PlayerType.HUMAN)
        for i in range(size)
    ]
    return GameSession(game_id="test", host_id="p1", players=players)


def create_started_session(roles: list[Role] = ROLES_BY_SEAT, **config) -> GameSession:
    """Create a session in TEAM_SELECTION with roles fixed by seat."""
    players = [Player(id=f"p{i + 1}", name=f"Player{i + 1}") for i in range(5)]
    session = GameSession(game_id="test", host_id="p1", players=players, config=GameConfig(**config))
    session.start_game("p1", random.Random(0))
    for player, role in zip(session.players, roles):
        player.role = role
    session.pending_visions = compute_all_visions(session.players)
    session.confirm_role_seen("p1", now=0.0)
    return session


def vote_all(session: GameSession, choice: VoteChoice) -> list:
    events = []
    for pid in session.eligible_voters:
        events.extend(session.cast_vote(pid, choice))
    return events


def run_mission(session: GameSession, team: list[str], cards: dict[str, CardChoice] = None) -> list:
    """Propose, approve unanimously and play cards (SUCCESS unless given)."""
    cards = cards or {}
    events = session.propose_team(session.leader_id, team)
    events.extend(vote_all(session, VoteChoice.APPROVE))
    for pid in team:
        events.extend(session.play_card(pid, cards.get(pid, CardChoice.SUCCESS)))
    return events


class TestStartGame:
    """Tests for LOBBY_SETUP -> ROLE_REVEAL."""

    def test_start_deals_roles_and_missions(self):
        session = create_lobby_session()
        events = session.start_game("p1", random.Random(3))
        assert session.phase == Phase.ROLE_REVEAL
        assert all(p.role is not None for p in session.players)
        assert len(session.missions) == 5
        assert session.missions[0].status == MissionStatus.TEAM_SELECTION
        assert all(m.status == MissionStatus.PENDING for m in session.missions[1:])
        assert events[0].roles_secret == {p.id: p.role.value for p in session.players}

    def test_pending_visions_computed_at_deal(self):
        session = create_lobby_session()
        session.start_game("p1", random.Random(3))
        assert set(session.pending_visions) == {"p1", "p2", "p3", "p4", "p5"}
        assert session.visions == {}

    def test_wrong_roster_size(self):
        session = create_lobby_session(size=4)
        with pytest.raises(RosterSizeInvalid):
            session.start_game("p1", random.Random(0))
        assert session.phase == Phase.LOBBY_SETUP

    def test_non_leader_cannot_start(self):
        session = create_lobby_session()
        with pytest.raises(UnauthorizedActor):
            session.start_game("p2", random.Random(0))

    def test_cannot_start_twice(self):
        session = create_lobby_session()
        session.start_game("p1", random.Random(0))
        with pytest.raises(IllegalPhaseAction):
            session.start_game("p1", random.Random(0))


class TestConfirmRole:
    def test_first_confirmation_opens_team_selection(self):
        session = create_started_session()
        assert session.phase == Phase.TEAM_SELECTION
        assert session.confirmed_roles == ["p1"]

    def test_later_confirmation_keeps_phase(self):
        session = create_started_session()
        session.confirm_role_seen("p2", now=5.0)
        assert session.phase == Phase.TEAM_SELECTION
        assert session.visions["p2"].expires_at == 15.0

    def test_vision_moves_from_pending(self):
        session = create_started_session()
        assert "p1" not in session.pending_visions
        assert set(session.visions["p1"].marks) == {"p4", "p5"}

    def test_duplicate_confirmation(self):
        session = create_started_session()
        with pytest.raises(DuplicateAction):
            session.confirm_role_seen("p1", now=1.0)

    def test_confirm_in_lobby(self):
        session = create_lobby_session()
        with pytest.raises(IllegalPhaseAction):
            session.confirm_role_seen("p1", now=0.0)


class TestProposeTeam:
    """Tests for TEAM_SELECTION -> TEAM_VOTING."""

    def test_valid_proposal(self):
        session = create_started_session()
        events = session.propose_team("p1", ["p1", "p3"])
        assert session.phase == Phase.TEAM_VOTING
        mission = session.current_mission
        assert mission.status == MissionStatus.TEAM_VOTING
        assert mission.team == ["p1", "p3"]
        assert mission.proposal_count == 1
        assert events[0].team == ["p1", "p3"]

    def test_non_leader(self):
        session = create_started_session()
        with pytest.raises(UnauthorizedActor):
            session.propose_team("p2", ["p1", "p2"])

    def test_wrong_size(self):
        session = create_started_session()
        with pytest.raises(InvalidTeamSize):
            session.propose_team("p1", ["p1", "p2", "p3"])

    def test_duplicate_member(self):
        session = create_started_session()
        with pytest.raises(InvalidTarget):
            session.propose_team("p1", ["p2", "p2"])

    def test_unknown_member(self):
        session = create_started_session()
        with pytest.raises(UnknownPlayer):
            session.propose_team("p1", ["p1", "nobody"])

    def test_wrong_phase(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        with pytest.raises(IllegalPhaseAction):
            session.propose_team("p1", ["p1", "p2"])


class TestVoting:
    """Tests for ballot collection and resolution."""

    def test_leader_cannot_vote(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        with pytest.raises(UnauthorizedActor):
            session.cast_vote("p1", VoteChoice.APPROVE)

    def test_duplicate_vote(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        session.cast_vote("p2", VoteChoice.APPROVE)
        with pytest.raises(DuplicateAction):
            session.cast_vote("p2", VoteChoice.REJECT)
        assert session.current_mission.votes == {"p2": VoteChoice.APPROVE}

    def test_partial_ballot_does_not_resolve(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        for pid in ("p2", "p3", "p4"):
            events = session.cast_vote(pid, VoteChoice.APPROVE)
            assert not any(isinstance(e, VoteOutcome) for e in events)
        assert session.phase == Phase.TEAM_VOTING

    def test_majority_approves(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        session.cast_vote("p2", VoteChoice.APPROVE)
        session.cast_vote("p3", VoteChoice.APPROVE)
        session.cast_vote("p4", VoteChoice.APPROVE)
        events = session.cast_vote("p5", VoteChoice.REJECT)
        outcome = next(e for e in events if isinstance(e, VoteOutcome))
        assert outcome.approved
        assert (outcome.approve, outcome.reject) == (3, 1)
        assert session.phase == Phase.MISSION_PLAY
        assert session.current_mission.status == MissionStatus.IN_PROGRESS
        assert session.leader_id == "p1"

    def test_tie_rejects(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        session.cast_vote("p2", VoteChoice.APPROVE)
        session.cast_vote("p3", VoteChoice.APPROVE)
        session.cast_vote("p4", VoteChoice.REJECT)
        session.cast_vote("p5", VoteChoice.REJECT)
        assert session.phase == Phase.TEAM_SELECTION
        assert session.consecutive_rejections == 1
        assert session.last_vote.approved is False

    def test_rejection_passes_leadership_and_clears_team(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        events = vote_all(session, VoteChoice.REJECT)
        mission = session.current_mission
        assert mission.number == 1
        assert mission.status == MissionStatus.TEAM_SELECTION
        assert mission.team == []
        assert mission.votes == {}
        assert session.leader_id == "p2"
        assert any(isinstance(e, LeaderChange) and e.leader == "p2" for e in events)

    def test_approval_resets_rejection_counter(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        vote_all(session, VoteChoice.REJECT)
        session.propose_team("p2", ["p1", "p2"])
        vote_all(session, VoteChoice.APPROVE)
        assert session.consecutive_rejections == 0

    def test_four_rejections_evil_wins(self):
        """Evil score jumps to the cap regardless of mission results."""
        session = create_started_session()
        events = []
        for _ in range(4):
            events.extend(session.propose_team(session.leader_id, ["p1", "p2"]))
            events.extend(vote_all(session, VoteChoice.REJECT))
        assert session.phase == Phase.GAME_OVER
        assert session.winner == Alignment.EVIL
        assert session.victory_condition == VictoryCondition.FOUR_REJECTIONS
        assert session.evil_score == 3
        assert session.good_score == 0
        assert isinstance(events[-1], GameOver)


class TestMissionPlay:
    """Tests for card play and mission resolution."""

    def test_success(self):
        session = create_started_session()
        events = run_mission(session, ["p1", "p2"])
        outcome = next(e for e in events if isinstance(e, MissionOutcome))
        assert outcome.succeeded
        assert session.missions[0].status == MissionStatus.SUCCEEDED
        assert session.good_score == 1
        assert session.current_mission.number == 2
        assert session.leader_id == "p2"

    def test_single_fail_fails_mission(self):
        session = create_started_session()
        run_mission(session, ["p1", "p4"], {"p4": CardChoice.FAIL})
        assert session.missions[0].status == MissionStatus.FAILED
        assert session.evil_score == 1

    def test_good_cannot_fail(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        vote_all(session, VoteChoice.APPROVE)
        with pytest.raises(IllegalCardChoice):
            session.play_card("p2", CardChoice.FAIL)
        assert session.current_mission.cards == {}

    def test_evil_may_succeed(self):
        session = create_started_session()
        run_mission(session, ["p4", "p5"], {"p4": CardChoice.SUCCESS, "p5": CardChoice.SUCCESS})
        assert session.good_score == 1

    def test_non_team_member(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        vote_all(session, VoteChoice.APPROVE)
        with pytest.raises(UnauthorizedActor):
            session.play_card("p3", CardChoice.SUCCESS)

    def test_duplicate_card(self):
        session = create_started_session()
        session.propose_team("p1", ["p1", "p2"])
        vote_all(session, VoteChoice.APPROVE)
        session.play_card("p1", CardChoice.SUCCESS)
        with pytest.raises(DuplicateAction):
            session.play_card("p1", CardChoice.SUCCESS)

    def test_three_fails_evil_wins(self):
        session = create_started_session()
        run_mission(session, ["p1", "p4"], {"p4": CardChoice.FAIL})
        run_mission(session, ["p2", "p3", "p5"], {"p5": CardChoice.FAIL})
        run_mission(session, ["p4", "p5"], {"p5": CardChoice.FAIL})
        assert session.phase == Phase.GAME_OVER
        assert session.winner == Alignment.EVIL
        assert session.victory_condition == VictoryCondition.THREE_MISSIONS_FAILED

    def test_three_successes_go_to_assassination(self):
        session = create_started_session()
        run_mission(session, ["p1", "p2"])
        run_mission(session, ["p1", "p2", "p3"])
        run_mission(session, ["p2", "p3"])
        assert session.phase == Phase.ASSASSINATION
        assert session.good_score == 3
        assert session.current_mission is None
        assert session.missions[3].status == MissionStatus.PENDING

    def test_no_assassin_good_wins_outright(self):
        roles = [Role.MERLIN, Role.PERCIVAL, Role.LOYAL_SERVANT, Role.LOYAL_SERVANT, Role.MORGANA]
        session = create_started_session(roles=roles)
        run_mission(session, ["p1", "p2"])
        run_mission(session, ["p1", "p2", "p3"])
        run_mission(session, ["p2", "p3"])
        assert session.phase == Phase.GAME_OVER
        assert session.winner == Alignment.GOOD
        assert session.victory_condition == VictoryCondition.MERLIN_SURVIVED


class TestAssassination:
    def create_assassination_session(self) -> GameSession:
        session = create_started_session()
        run_mission(session, ["p1", "p2"])
        run_mission(session, ["p1", "p2", "p3"])
        run_mission(session, ["p2", "p3"])
        return session

    def test_hit_merlin(self):
        session = self.create_assassination_session()
        session.assassinate("p5", "p1")
        assert session.winner == Alignment.EVIL
        assert session.victory_condition == VictoryCondition.MERLIN_ASSASSINATED
        assert session.assassination_target == "p1"

    def test_miss(self):
        session = self.create_assassination_session()
        session.assassinate("p5", "p2")
        assert session.winner == Alignment.GOOD
        assert session.victory_condition == VictoryCondition.MERLIN_SURVIVED

    def test_only_assassin(self):
        session = self.create_assassination_session()
        with pytest.raises(UnauthorizedActor):
            session.assassinate("p4", "p1")

    def test_not_self(self):
        session = self.create_assassination_session()
        with pytest.raises(InvalidTarget):
            session.assassinate("p5", "p5")

    def test_unknown_target(self):
        session = self.create_assassination_session()
        with pytest.raises(UnknownPlayer):
            session.assassinate("p5", "nobody")

    def test_wrong_phase(self):
        session = create_started_session()
        with pytest.raises(IllegalPhaseAction):
            session.assassinate("p5", "p1")


class TestLeaderRotation:
    def test_round_robin_wraps(self):
        session = create_started_session()
        leaders = [session.leader_id]
        for _ in range(3):
            session.propose_team(session.leader_id, ["p1", "p2"])
            vote_all(session, VoteChoice.REJECT)
            leaders.append(session.leader_id)
        session.propose_team(session.leader_id, ["p1", "p2"])
        vote_all(session, VoteChoice.APPROVE)
        session.play_card("p1", CardChoice.SUCCESS)
        session.play_card("p2", CardChoice.SUCCESS)
        leaders.append(session.leader_id)
        for _ in range(2):
            session.propose_team(session.leader_id, ["p1", "p2", "p3"])
            vote_all(session, VoteChoice.REJECT)
            leaders.append(session.leader_id)
        assert leaders == ["p1", "p2", "p3", "p4", "p5", "p1", "p2"]

    def test_each_player_leads_fairly(self):
        session = create_started_session()
        counts = {p.id: 0 for p in session.players}
        counts[session.leader_id] += 1
        changes = 0
        # Alternate three rejections and one success so the game never ends early
        for _ in range(2):
            for _ in range(3):
                size = session.current_mission.required_team_size
                session.propose_team(session.leader_id, ["p1", "p2", "p3"][:size])
                vote_all(session, VoteChoice.REJECT)
                counts[session.leader_id] += 1
                changes += 1
            size = session.current_mission.required_team_size
            run_mission(session, ["p1", "p2", "p3"][:size])
            counts[session.leader_id] += 1
            changes += 1
        total = changes + 1
        low, high = total // 5, -(-total // 5)
        assert all(low <= n <= high for n in counts.values())


class TestResetProgress:
    def test_reset_keeps_roster(self):
        session = create_started_session()
        run_mission(session, ["p1", "p2"])
        session.reset_progress("p1")
        assert session.phase == Phase.LOBBY_SETUP
        assert [p.id for p in session.players] == ["p1", "p2", "p3", "p4", "p5"]
        assert all(p.role is None for p in session.players)
        assert session.missions == []
        assert session.good_score == 0
        assert session.leader_id == "p1"
        assert session.lobby_locked
        assert session.visions == {}
        assert session.pending_visions == {}

    def test_current_leader_may_reset(self):
        session = create_started_session()
        run_mission(session, ["p1", "p2"])
        assert session.leader_id == "p2"
        session.reset_progress("p2")
        assert session.leader_id == "p1"

    def test_other_player_cannot_reset(self):
        session = create_started_session()
        with pytest.raises(UnauthorizedActor):
            session.reset_progress("p3")

    def test_reset_then_start_again(self):
        session = create_started_session()
        session.reset_progress("p1")
        session.start_game("p1", random.Random(1))
        assert session.phase == Phase.ROLE_REVEAL


class TestLobby:
    """Tests for lobby membership transitions."""

    def test_add_spectator_and_join_when_unlocked(self):
        session = create_lobby_session(size=1)
        session.add_spectator("s1", "Sam", PlayerType.HUMAN)
        session.toggle_lobby_lock("p1")
        assert not session.lobby_locked
        session.join_as_player("s1")
        assert session.get_player("s1") is not None
        assert session.get_spectator("s1") is None

    def test_locked_lobby_needs_leader(self):
        session = create_lobby_session(size=1)
        session.add_spectator("s1", "Sam", PlayerType.HUMAN)
        with pytest.raises(UnauthorizedActor):
            session.join_as_player("s1")
        session.join_as_player("s1", requester_id="p1")
        assert session.get_player("s1") is not None

    def test_duplicate_id(self):
        session = create_lobby_session(size=1)
        with pytest.raises(DuplicateAction):
            session.add_spectator("p1", "Again", PlayerType.HUMAN)

    def test_roster_cap(self):
        session = create_lobby_session(size=10)
        session.add_spectator("s1", "Sam", PlayerType.HUMAN)
        with pytest.raises(RosterSizeInvalid):
            session.join_as_player("s1", requester_id="p1")

    def test_leave_lobby(self):
        session = create_lobby_session()
        session.leave_lobby("p3")
        assert [p.id for p in session.players] == ["p1", "p2", "p4", "p5"]
        assert session.get_spectator("p3") is not None

    def test_host_cannot_leave(self):
        session = create_lobby_session()
        with pytest.raises(UnauthorizedActor):
            session.leave_lobby("p1")

    def test_toggle_by_non_leader(self):
        session = create_lobby_session()
        with pytest.raises(UnauthorizedActor):
            session.toggle_lobby_lock("p2")

    def test_lobby_actions_after_start(self):
        session = create_started_session()
        session.add_spectator("s1", "Sam", PlayerType.HUMAN)
        with pytest.raises(IllegalPhaseAction):
            session.join_as_player("s1", requester_id=session.leader_id)
        with pytest.raises(IllegalPhaseAction):
            session.leave_lobby("p3")
        with pytest.raises(IllegalPhaseAction):
            session.toggle_lobby_lock(session.leader_id)


class TestQueries:
    def test_no_current_mission_in_lobby(self):
        session = create_lobby_session()
        assert session.current_mission is None
        with pytest.raises(EngineInvariantError):
            session.require_current_mission()

    def test_eligible_voters_exclude_leader(self):
        session = create_started_session()
        assert session.eligible_voters == ["p2", "p3", "p4", "p5"]

    def test_active_vision_expires(self):
        session = create_started_session()
        assert session.active_vision("p1", now=9.9)
        assert session.active_vision("p1", now=10.0) == {}
        assert session.expire_visions(now=10.0) == ["p1"]
        assert "p1" not in session.visions
