"""State Consistency Validators (S.1-S.8).

Rules:
- S.1: good_score and evil_score stay within 0..wins_needed
- S.2: good_score and evil_score never both reach wins_needed
- S.3: consecutive_rejections stays within 0..max_consecutive_rejections
- S.4: Exactly one current mission during TEAM_SELECTION, TEAM_VOTING and MISSION_PLAY
- S.5: leader_index points into the roster
- S.6: Ballots come only from eligible voters (roster minus leader)
- S.7: Mission cards come only from team members, and Good plays only SUCCESS
- S.8: Dealt roles match the role table for the roster size
"""

from collections import Counter

from avalon.engine.game_session import GameSession
from avalon.events.game_events import Phase
from avalon.models.mission import CardChoice, MissionStatus
from avalon.models.player import Alignment, roles_for_config
from .types import ValidationViolation, ValidationSeverity

CATEGORY = "State Consistency"

_MISSION_PHASES = (Phase.TEAM_SELECTION, Phase.TEAM_VOTING, Phase.MISSION_PLAY)


def validate_state_consistency(session: GameSession) -> list[ValidationViolation]:
    """Validate state consistency rules S.1-S.8.

    Args:
        session: Current game session

    Returns:
        List of validation violations (empty if valid)
    """
    violations: list[ValidationViolation] = []
    config = session.config
    cap = config.wins_needed

    # S.1: scores within bounds
    for label, score in (("good_score", session.good_score), ("evil_score", session.evil_score)):
        if not 0 <= score <= cap:
            violations.append(ValidationViolation(
                rule_id="S.1",
                category=CATEGORY,
                message=f"{label}={score} outside 0..{cap}",
                context={label: score},
            ))

    # S.2: never both at the cap
    if session.good_score >= cap and session.evil_score >= cap:
        violations.append(ValidationViolation(
            rule_id="S.2",
            category=CATEGORY,
            message="good_score and evil_score both reached the win threshold",
            context={"good_score": session.good_score, "evil_score": session.evil_score},
        ))

    # S.3: rejection counter
    limit = config.max_consecutive_rejections
    if not 0 <= session.consecutive_rejections <= limit:
        violations.append(ValidationViolation(
            rule_id="S.3",
            category=CATEGORY,
            message=f"consecutive_rejections={session.consecutive_rejections} outside 0..{limit}",
        ))

    # S.4: one current mission
    if session.phase in _MISSION_PHASES:
        current = [m.number for m in session.missions if m.status.is_current]
        if len(current) != 1:
            violations.append(ValidationViolation(
                rule_id="S.4",
                category=CATEGORY,
                message=f"Expected exactly one current mission in {session.phase.value}, found {len(current)}",
                context={"current_missions": current},
            ))

    # S.5: leader pointer
    if session.players and not 0 <= session.leader_index < len(session.players):
        violations.append(ValidationViolation(
            rule_id="S.5",
            category=CATEGORY,
            message=f"leader_index={session.leader_index} outside roster of {len(session.players)}",
        ))

    mission = session.current_mission

    # S.6: ballots only from eligible voters
    if mission is not None and mission.status == MissionStatus.TEAM_VOTING:
        eligible = set(session.eligible_voters)
        stray = [pid for pid in mission.votes if pid not in eligible]
        if stray:
            violations.append(ValidationViolation(
                rule_id="S.6",
                category=CATEGORY,
                message="Ballots recorded from players who may not vote",
                context={"voters": stray},
            ))

    # S.7: cards only from team members, Good only SUCCESS
    for m in session.missions:
        for pid, card in m.cards.items():
            if pid not in m.team:
                violations.append(ValidationViolation(
                    rule_id="S.7",
                    category=CATEGORY,
                    message=f"Mission {m.number}: card from non-team player {pid}",
                ))
                continue
            player = session.get_player(pid)
            if card == CardChoice.FAIL and player is not None and player.alignment == Alignment.GOOD:
                violations.append(ValidationViolation(
                    rule_id="S.7",
                    category=CATEGORY,
                    message=f"Mission {m.number}: Good player {pid} played FAIL",
                ))

    # S.8: role deal matches the table
    if session.phase != Phase.LOBBY_SETUP:
        size = len(session.players)
        dealt = Counter(p.role for p in session.players)
        expected = Counter(roles_for_config(config.role_table.get(size, [])))
        if dealt != expected:
            violations.append(ValidationViolation(
                rule_id="S.8",
                category=CATEGORY,
                message=f"Dealt roles do not match the {size}-player role table",
                severity=ValidationSeverity.ERROR,
                context={
                    "dealt": {str(k): v for k, v in dealt.items()},
                    "expected": {str(k): v for k, v in expected.items()},
                },
            ))

    return violations
