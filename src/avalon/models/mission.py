"""Mission models and the mission table."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class MissionStatus(str, Enum):
    """Lifecycle of a single mission."""

    PENDING = "PENDING"
    TEAM_SELECTION = "TEAM_SELECTION"
    TEAM_VOTING = "TEAM_VOTING"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    @property
    def is_current(self) -> bool:
        """Active statuses: neither Pending nor resolved."""
        return self in (
            MissionStatus.TEAM_SELECTION,
            MissionStatus.TEAM_VOTING,
            MissionStatus.IN_PROGRESS,
        )

    @property
    def is_resolved(self) -> bool:
        return self in (MissionStatus.SUCCEEDED, MissionStatus.FAILED)


class VoteChoice(str, Enum):
    """A ballot on a proposed team."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


class CardChoice(str, Enum):
    """A secretly played mission card."""

    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


class MissionSpec(BaseModel):
    """Static shape of one mission for a roster size."""

    required_team_size: int
    fails_required: int = 1

    model_config = ConfigDict(frozen=True)


# Roster size -> [M1..M5]
MISSION_TABLE: dict[int, list[MissionSpec]] = {
    5: [
        MissionSpec(required_team_size=2),
        MissionSpec(required_team_size=3),
        MissionSpec(required_team_size=2),
        MissionSpec(required_team_size=3),
        MissionSpec(required_team_size=3),
    ],
}

MISSION_COUNT = 5


class Mission(BaseModel):
    """One of the five scored rounds.

    team, votes and cards are scoped to the current proposal and are
    replaced wholesale at each phase transition.
    """

    number: int  # 1..5
    required_team_size: int
    fails_required: int = 1
    status: MissionStatus = MissionStatus.PENDING
    team: list[str] = Field(default_factory=list)
    votes: dict[str, VoteChoice] = Field(default_factory=dict)
    cards: dict[str, CardChoice] = Field(default_factory=dict)
    proposal_count: int = 0

    @property
    def approve_count(self) -> int:
        return sum(1 for v in self.votes.values() if v == VoteChoice.APPROVE)

    @property
    def reject_count(self) -> int:
        return sum(1 for v in self.votes.values() if v == VoteChoice.REJECT)

    @property
    def fail_count(self) -> int:
        """Fail cards among the team's plays."""
        return sum(
            1 for player_id, card in self.cards.items()
            if player_id in self.team and card == CardChoice.FAIL
        )


def create_missions(specs: list[MissionSpec]) -> list[Mission]:
    """Build a fresh list of Pending missions from the table row."""
    return [
        Mission(
            number=index + 1,
            required_team_size=spec.required_team_size,
            fails_required=spec.fails_required,
        )
        for index, spec in enumerate(specs)
    ]
