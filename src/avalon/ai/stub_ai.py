"""Stub bot implementations for simulated participants.

These bots generate valid actions without calling an LLM.
Useful for:
- Filling a 5-player roster in the lobby
- Integration tests (full game flow without humans)
- The console simulation

Bots never touch the session. The engine asks a BotPolicy for a
decision and applies it through the same action path as a human's.
"""

import random
from typing import Optional, Protocol, TYPE_CHECKING

from avalon.models.mission import CardChoice, VoteChoice
from avalon.models.player import Alignment
from avalon.events.event_visibility import compute_vision

if TYPE_CHECKING:
    from avalon.engine.game_session import GameSession


class BotPolicy(Protocol):
    """Decision maker for every bot in a game."""

    def propose_team(self, session: "GameSession", bot_id: str) -> list[str]:
        """Return exactly required_team_size distinct roster ids."""
        ...

    def vote(self, session: "GameSession", bot_id: str) -> VoteChoice:
        ...

    def play_card(self, session: "GameSession", bot_id: str) -> CardChoice:
        """Return a legal card: SUCCESS for Good bots."""
        ...

    def choose_assassination_target(self, session: "GameSession", bot_id: str) -> str:
        """Return a roster id other than the bot's own."""
        ...


class StubBot:
    """A stub bot policy that can handle every bot decision.

    Defaults reproduce the simple lobby bots: always approve teams, Good
    bots play SUCCESS and Evil bots play FAIL.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        approve_probability: float = 1.0,
        evil_fail_probability: float = 1.0,
    ):
        """Initialize stub bot with optional random seed.

        Args:
            seed: Seed for the bot's own random.Random
            approve_probability: Chance of voting APPROVE on any team
            evil_fail_probability: Chance an Evil bot on a team plays FAIL
        """
        self._rng = random.Random(seed)
        self.approve_probability = approve_probability
        self.evil_fail_probability = evil_fail_probability

    def propose_team(self, session: "GameSession", bot_id: str) -> list[str]:
        """Propose self plus random other players."""
        mission = session.require_current_mission()
        others = [p.id for p in session.players if p.id != bot_id]
        self._rng.shuffle(others)
        return [bot_id] + others[: mission.required_team_size - 1]

    def vote(self, session: "GameSession", bot_id: str) -> VoteChoice:
        if self._rng.random() < self.approve_probability:
            return VoteChoice.APPROVE
        return VoteChoice.REJECT

    def play_card(self, session: "GameSession", bot_id: str) -> CardChoice:
        player = session.require_player(bot_id)
        if player.alignment == Alignment.EVIL and self._rng.random() < self.evil_fail_probability:
            return CardChoice.FAIL
        return CardChoice.SUCCESS

    def choose_assassination_target(self, session: "GameSession", bot_id: str) -> str:
        """Pick a random player the bot does not know to be Evil."""
        bot = session.require_player(bot_id)
        known_evil = set(compute_vision(bot, session.players))
        candidates = [
            p.id for p in session.players
            if p.id != bot_id and p.id not in known_evil
        ]
        if not candidates:
            candidates = [p.id for p in session.players if p.id != bot_id]
        return self._rng.choice(candidates)


def create_stub_bot(seed: Optional[int] = None, **kwargs) -> StubBot:
    """Factory function to create a stub bot policy.

    Args:
        seed: Optional random seed for reproducibility
        **kwargs: Probabilities forwarded to StubBot

    Returns:
        StubBot instance
    """
    return StubBot(seed=seed, **kwargs)
