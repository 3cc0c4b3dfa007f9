"""Avalon validation module.

This module provides runtime validation for game rules.

Files:
- types.py: Shared ValidationViolation, ValidationSeverity
- exceptions.py: ValidationError exception
- state_consistency.py: S.1-S.8 state invariant checks
- victory.py: V.1-V.2 victory condition checks
"""

from .types import ValidationViolation, ValidationSeverity
from .exceptions import ValidationError
from .state_consistency import validate_state_consistency
from .victory import (
    validate_victory,
    validate_v1_game_has_result,
    validate_v2_winner_matches_state,
)

__all__ = [
    "ValidationViolation",
    "ValidationSeverity",
    "ValidationError",
    "validate_state_consistency",
    "validate_victory",
    "validate_v1_game_has_result",
    "validate_v2_winner_matches_state",
]
