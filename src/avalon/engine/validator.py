"""GameValidator - runtime validation hooks for game rules.

This module provides a Protocol for validating game state transitions
and rule compliance at runtime. Hooks run after every accepted action
to catch violations early.

Usage:
    # In tests or development
    validator = CollectingValidator()
    game = AvalonGame("g1", "host", "Host", validator=validator)
    violations = validator.get_violations()

    # No overhead in production (validator=None)
    game = AvalonGame("g1", "host", "Host")
"""

from typing import Protocol

from avalon.engine.actions import Action
from avalon.engine.game_session import GameSession
from avalon.events import GameEvent


class GameValidator(Protocol):
    """Hooks for runtime validation at key game points."""

    def on_action_applied(
        self,
        action: Action,
        session: GameSession,
        events: list[GameEvent],
    ) -> None:
        """Called after each accepted action (bot follow-ups included)."""
        ...

    def on_game_over(self, session: GameSession) -> list:
        """Called when the game ends. Returns all violations found."""
        ...


class NoOpValidator:
    """No-op validator for production use (zero overhead)."""

    def on_action_applied(
        self,
        action: Action,
        session: GameSession,
        events: list[GameEvent],
    ) -> None:
        pass

    def on_game_over(self, session: GameSession) -> list:
        return []


class CollectingValidator(NoOpValidator):
    """Validator that collects violations for later inspection.

    Use this in tests to verify game rules are being followed.
    With fail_fast=True the first violating check raises ValidationError.

    Lazy imports are used to avoid circular imports.
    """

    def __init__(self, fail_fast: bool = False):
        self._violations = []
        self._fail_fast = fail_fast

    def get_violations(self):
        """Get all collected violations."""
        return list(self._violations)

    def clear(self):
        """Clear collected violations."""
        self._violations.clear()

    def _record(self, violations) -> None:
        self._violations.extend(violations)
        if violations and self._fail_fast:
            from avalon.validation import ValidationError
            raise ValidationError(violations)

    def on_action_applied(
        self,
        action: Action,
        session: GameSession,
        events: list[GameEvent],
    ) -> None:
        """Validate state consistency S.1-S.8."""
        from avalon.validation import validate_state_consistency
        self._record(validate_state_consistency(session))

    def on_game_over(self, session: GameSession) -> list:
        """Validate victory rules V.1-V.2 and return all collected violations."""
        from avalon.validation import validate_victory
        self._record(validate_victory(session))
        return self.get_violations()


def create_validator(collect: bool = False, fail_fast: bool = False):
    """Factory function to create appropriate validator.

    Args:
        collect: If True, returns CollectingValidator for tests.
                 If False, returns NoOpValidator for production.
        fail_fast: Raise ValidationError on the first violation (collect only).

    Returns:
        A GameValidator implementation.
    """
    if collect:
        return CollectingValidator(fail_fast=fail_fast)
    return NoOpValidator()
