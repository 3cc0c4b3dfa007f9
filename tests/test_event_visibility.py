"""Tests for role vision and public event filtering."""

from avalon.models import Player, Role, VoteChoice, CardChoice
from avalon.events import (
    CardPlay,
    GameStart,
    Phase,
    RoleConfirmed,
    TeamProposal,
    Vote,
    VisionMark,
    compute_all_visions,
    compute_vision,
    get_public_events,
    get_visible_events,
    is_public_event,
)


def create_roster(roles: list[Role]) -> list[Player]:
    """Helper to create a roster with ids p1..pN in the given roles."""
    return [
        Player(id=f"p{i + 1}", name=f"Player{i + 1}", role=role)
        for i, role in enumerate(roles)
    ]


def get(players: list[Player], role: Role) -> Player:
    return next(p for p in players if p.role == role)


STANDARD_ROLES = [Role.MERLIN, Role.PERCIVAL, Role.LOYAL_SERVANT, Role.MORGANA, Role.ASSASSIN]
EXTENDED_ROLES = [Role.MERLIN, Role.PERCIVAL, Role.MORDRED, Role.OBERON, Role.ASSASSIN]


class TestMerlinVision:
    """Merlin sees Evil, except Mordred."""

    def test_sees_all_evil_in_standard_game(self):
        players = create_roster(STANDARD_ROLES)
        vision = compute_vision(get(players, Role.MERLIN), players)
        assert vision == {"p4": VisionMark.EVIL, "p5": VisionMark.EVIL}

    def test_mordred_hidden(self):
        players = create_roster(EXTENDED_ROLES)
        vision = compute_vision(get(players, Role.MERLIN), players)
        assert "p3" not in vision
        assert vision == {"p4": VisionMark.EVIL, "p5": VisionMark.EVIL}


class TestPercivalVision:
    def test_sees_merlin_and_morgana_with_same_mark(self):
        players = create_roster(STANDARD_ROLES)
        vision = compute_vision(get(players, Role.PERCIVAL), players)
        assert vision == {
            "p1": VisionMark.MERLIN_OR_MORGANA,
            "p4": VisionMark.MERLIN_OR_MORGANA,
        }

    def test_sees_only_merlin_without_morgana(self):
        players = create_roster(EXTENDED_ROLES)
        vision = compute_vision(get(players, Role.PERCIVAL), players)
        assert vision == {"p1": VisionMark.MERLIN_OR_MORGANA}


class TestEvilVision:
    """Evil players see each other, except Oberon."""

    def test_morgana_and_assassin_see_each_other(self):
        players = create_roster(STANDARD_ROLES)
        assert compute_vision(get(players, Role.MORGANA), players) == {"p5": VisionMark.EVIL}
        assert compute_vision(get(players, Role.ASSASSIN), players) == {"p4": VisionMark.EVIL}

    def test_oberon_is_hidden_from_evil(self):
        players = create_roster(EXTENDED_ROLES)
        assert compute_vision(get(players, Role.ASSASSIN), players) == {"p3": VisionMark.EVIL}
        assert compute_vision(get(players, Role.MORDRED), players) == {"p5": VisionMark.EVIL}

    def test_oberon_sees_no_one(self):
        players = create_roster(EXTENDED_ROLES)
        assert compute_vision(get(players, Role.OBERON), players) == {}


class TestOtherVision:
    def test_loyal_servant_sees_no_one(self):
        players = create_roster(STANDARD_ROLES)
        assert compute_vision(get(players, Role.LOYAL_SERVANT), players) == {}

    def test_unassigned_viewer_sees_no_one(self):
        players = create_roster(STANDARD_ROLES)
        viewer = Player(id="x", name="Spectator")
        assert compute_vision(viewer, players) == {}

    def test_compute_all_visions_covers_roster(self):
        players = create_roster(STANDARD_ROLES)
        visions = compute_all_visions(players)
        assert set(visions) == {"p1", "p2", "p3", "p4", "p5"}
        assert visions["p3"] == {}


class TestPublicEvents:
    """Tests for is_public_event and get_public_events."""

    def test_private_events(self):
        assert not is_public_event(GameStart(player_count=5, leader="p1", roles_secret={"p1": "Merlin"}))
        assert not is_public_event(CardPlay(actor="p1", mission=1, card=CardChoice.FAIL))
        assert not is_public_event(RoleConfirmed(actor="p1"))

    def test_public_events(self):
        assert is_public_event(TeamProposal(actor="p1", mission=1, team=["p1", "p2"], proposal_number=1))
        assert is_public_event(Vote(actor="p2", mission=1, choice=VoteChoice.APPROVE))

    def test_filter_preserves_order(self):
        events = [
            TeamProposal(actor="p1", mission=1, team=["p1", "p2"], proposal_number=1),
            CardPlay(actor="p1", mission=1, card=CardChoice.SUCCESS, phase=Phase.MISSION_PLAY),
            Vote(actor="p2", mission=1, choice=VoteChoice.REJECT),
        ]
        public = get_public_events(events)
        assert [type(e).__name__ for e in public] == ["TeamProposal", "Vote"]


class TestVisibleEvents:
    """Tests for get_visible_events."""

    def create_events(self):
        return [
            GameStart(player_count=5, leader="p1", roles_secret={"p1": "Merlin"}),
            RoleConfirmed(actor="p1"),
            RoleConfirmed(actor="p2"),
            TeamProposal(actor="p1", mission=1, team=["p1", "p2"], proposal_number=1),
            CardPlay(actor="p1", mission=1, card=CardChoice.SUCCESS),
            CardPlay(actor="p2", mission=1, card=CardChoice.FAIL),
        ]

    def test_viewer_sees_own_private_events(self):
        visible = get_visible_events(self.create_events(), "p1")
        assert [(type(e).__name__, e.actor) for e in visible] == [
            ("RoleConfirmed", "p1"),
            ("TeamProposal", "p1"),
            ("CardPlay", "p1"),
        ]

    def test_role_deal_never_visible(self):
        for viewer in ("p1", "p2", None):
            visible = get_visible_events(self.create_events(), viewer)
            assert not any(isinstance(e, GameStart) for e in visible)

    def test_anonymous_viewer_sees_public_only(self):
        visible = get_visible_events(self.create_events(), None)
        assert [type(e).__name__ for e in visible] == ["TeamProposal"]
