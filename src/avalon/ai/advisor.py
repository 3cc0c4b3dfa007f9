"""Assassination advisor contract.

The advisor reads the player list and a free-text transcript of play and
suggests who the Assassin should strike. It is advisory only: the engine
shows the suggestion to the Assassin and never picks the target itself.
"""

import random
from typing import Optional, Protocol
from pydantic import BaseModel, Field


class AssassinationSuggestion(BaseModel):
    """Output of an advisor."""

    target: str = Field(description="The name of the player the assassin should target.")
    reasoning: str = Field(description="The reasoning behind choosing this player as the target.")


class AssassinationAdvisor(Protocol):
    """External oracle suggesting the most likely Merlin."""

    async def suggest(self, players: list[str], transcript: str) -> AssassinationSuggestion:
        """Suggest a target.

        Args:
            players: Player names in roster order
            transcript: Free-text record of what happened in the game

        Returns:
            AssassinationSuggestion naming one of the players
        """
        ...


ADVISOR_SYSTEM_PROMPT = (
    "You are the game master for Avalon. Based on the game transcript and player "
    "list, determine who is the most influential player for the assassin to target. "
    "Influential players could be those who lead successful quests, influenced "
    "decisions, or are suspected of being Merlin."
)


def build_advisor_prompt(players: list[str], transcript: str) -> tuple[str, str]:
    """Build (system_prompt, user_prompt) for an LLM-backed advisor."""
    user = (
        f"Players: {', '.join(players)}\n"
        f"Game Transcript:\n{transcript}\n\n"
        "Target the player that is most likely Merlin or has had the most impact on the game.\n"
        'Return your answer as JSON: {"target": "<player name>", "reasoning": "<why>"}'
    )
    return ADVISOR_SYSTEM_PROMPT, user


def parse_advisor_response(raw: str) -> AssassinationSuggestion:
    """Parse a JSON advisor response.

    Raises:
        pydantic.ValidationError: If the response is not the expected JSON
    """
    return AssassinationSuggestion.model_validate_json(raw.strip())


class StubAdvisor:
    """Advisor that picks the player named most often in the transcript.

    Ties and an empty transcript fall back to a seeded random choice.
    """

    def __init__(self, seed: Optional[int] = None, exclude: Optional[list[str]] = None):
        self._rng = random.Random(seed)
        self._exclude = set(exclude or [])

    async def suggest(self, players: list[str], transcript: str) -> AssassinationSuggestion:
        candidates = [name for name in players if name not in self._exclude] or list(players)
        mentions = {name: transcript.count(name) for name in candidates}
        best = max(mentions.values(), default=0)
        top = [name for name in candidates if mentions[name] == best]
        target = top[0] if len(top) == 1 else self._rng.choice(top)
        return AssassinationSuggestion(
            target=target,
            reasoning=f"{target} appears {mentions[target]} time(s) in the transcript, "
                      "more than any other candidate.",
        )
