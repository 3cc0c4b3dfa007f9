"""Victory Condition Validators (V.1-V.2).

Rules:
- V.1: A finished game declares a winner and a victory condition
- V.2: The declared winner matches the condition and the final state
"""

from avalon.engine.game_session import GameSession
from avalon.events.game_events import Phase, VictoryCondition
from avalon.models.player import Alignment, Role
from .types import ValidationViolation

CATEGORY = "Victory Conditions"

_CONDITION_WINNER = {
    VictoryCondition.THREE_MISSIONS_FAILED: Alignment.EVIL,
    VictoryCondition.FOUR_REJECTIONS: Alignment.EVIL,
    VictoryCondition.MERLIN_ASSASSINATED: Alignment.EVIL,
    VictoryCondition.MERLIN_SURVIVED: Alignment.GOOD,
}


def validate_v1_game_has_result(session: GameSession) -> list[ValidationViolation]:
    """V.1: A finished game declares a winner and a victory condition."""
    if session.phase != Phase.GAME_OVER:
        return []
    if session.winner is None or session.victory_condition is None:
        return [ValidationViolation(
            rule_id="V.1",
            category=CATEGORY,
            message="Game is over without a declared winner and condition",
            context={"winner": session.winner, "condition": session.victory_condition},
        )]
    return []


def validate_v2_winner_matches_state(session: GameSession) -> list[ValidationViolation]:
    """V.2: The declared winner matches the condition and the final state.

    Args:
        session: Finished game session

    Returns:
        List of validation violations
    """
    violations: list[ValidationViolation] = []
    condition = session.victory_condition
    if session.phase != Phase.GAME_OVER or condition is None:
        return violations

    cap = session.config.wins_needed

    if session.winner != _CONDITION_WINNER[condition]:
        violations.append(ValidationViolation(
            rule_id="V.2",
            category=CATEGORY,
            message=f"{condition.value} declares {session.winner} as winner",
        ))

    if condition == VictoryCondition.THREE_MISSIONS_FAILED and session.evil_score < cap:
        violations.append(ValidationViolation(
            rule_id="V.2",
            category=CATEGORY,
            message=f"Evil won by missions with evil_score={session.evil_score}",
        ))

    if condition == VictoryCondition.FOUR_REJECTIONS:
        if session.consecutive_rejections < session.config.max_consecutive_rejections:
            violations.append(ValidationViolation(
                rule_id="V.2",
                category=CATEGORY,
                message=f"Evil won by rejections with only {session.consecutive_rejections}",
            ))

    if condition in (VictoryCondition.MERLIN_ASSASSINATED, VictoryCondition.MERLIN_SURVIVED):
        if session.good_score < cap:
            violations.append(ValidationViolation(
                rule_id="V.2",
                category=CATEGORY,
                message=f"Assassination outcome with good_score={session.good_score}",
            ))
        target = session.get_player(session.assassination_target) if session.assassination_target else None
        hit = target is not None and target.role == Role.MERLIN
        if condition == VictoryCondition.MERLIN_ASSASSINATED and not hit:
            violations.append(ValidationViolation(
                rule_id="V.2",
                category=CATEGORY,
                message="Merlin declared assassinated but the target was not Merlin",
            ))
        if condition == VictoryCondition.MERLIN_SURVIVED and hit:
            violations.append(ValidationViolation(
                rule_id="V.2",
                category=CATEGORY,
                message="Merlin declared surviving but the Assassin named Merlin",
            ))

    return violations


def validate_victory(session: GameSession) -> list[ValidationViolation]:
    """Validate all victory rules V.1-V.2."""
    return validate_v1_game_has_result(session) + validate_v2_winner_matches_state(session)
