"""Role vision and event visibility filtering.

This module provides:

- Vision: which players a role lets a player see right after the deal
- Public events: the subset of the event log every player may read

Vision is computed once per match. Its on-screen presentation expires,
and the engine never recomputes it afterwards.
"""

from enum import Enum
from typing import Iterable, Optional

from avalon.models.player import Player, Role
from avalon.events.game_events import (
    GameEvent,
    GameStart,
    CardPlay,
    RoleConfirmed,
)


class VisionMark(str, Enum):
    """How a seen player is highlighted."""

    EVIL = "EVIL"
    MERLIN_OR_MORGANA = "MERLIN_OR_MORGANA"  # Percival cannot tell which


def compute_vision(viewer: Player, players: Iterable[Player]) -> dict[str, VisionMark]:
    """Compute the players a viewer's role reveals.

    Rules:
    - Merlin sees all Evil players except Mordred
    - Percival sees Merlin and Morgana with the same mark
    - Evil players other than Oberon see other Evil players except Oberon
    - Oberon and everyone else see no one

    Args:
        viewer: The player whose vision to compute (role must be assigned)
        players: The full roster

    Returns:
        Dict mapping seen player id -> VisionMark
    """
    role = viewer.role
    if role is None:
        return {}

    seen: dict[str, VisionMark] = {}
    for other in players:
        if other.id == viewer.id or other.role is None:
            continue

        if role == Role.MERLIN:
            if other.role.is_evil and other.role != Role.MORDRED:
                seen[other.id] = VisionMark.EVIL
        elif role == Role.PERCIVAL:
            if other.role in (Role.MERLIN, Role.MORGANA):
                seen[other.id] = VisionMark.MERLIN_OR_MORGANA
        elif role.is_evil and role != Role.OBERON:
            if other.role.is_evil and other.role != Role.OBERON:
                seen[other.id] = VisionMark.EVIL

    return seen


def compute_all_visions(players: list[Player]) -> dict[str, dict[str, VisionMark]]:
    """Compute vision for every roster member."""
    return {player.id: compute_vision(player, players) for player in players}


# Events that never leave the engine unredacted
_PRIVATE_EVENT_TYPES = (GameStart, CardPlay, RoleConfirmed)


def is_public_event(event: GameEvent) -> bool:
    """Check if an event may be shown to every player.

    Private events:
    - GameStart: carries the role deal
    - CardPlay: individual mission cards are secret (only counts are public)
    - RoleConfirmed: not relevant to other players
    """
    return not isinstance(event, _PRIVATE_EVENT_TYPES)


def get_public_events(events: Iterable[GameEvent]) -> list[GameEvent]:
    """Filter events down to the public ones, preserving order."""
    return [event for event in events if is_public_event(event)]


def get_visible_events(events: Iterable[GameEvent], viewer_id: Optional[str]) -> list[GameEvent]:
    """Filter events down to what one player may read, preserving order.

    A viewer sees every public event plus their own card plays and role
    confirmations. The role deal in GameStart is never visible.
    """
    visible = []
    for event in events:
        if is_public_event(event):
            visible.append(event)
        elif isinstance(event, (CardPlay, RoleConfirmed)) and event.actor == viewer_id:
            visible.append(event)
    return visible
