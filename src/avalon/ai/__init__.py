"""Bot and advisor implementations for Avalon game participants."""

from avalon.ai.stub_ai import (
    BotPolicy,
    StubBot,
    create_stub_bot,
)
from avalon.ai.advisor import (
    AssassinationAdvisor,
    AssassinationSuggestion,
    StubAdvisor,
    build_advisor_prompt,
    parse_advisor_response,
)

__all__ = [
    "BotPolicy",
    "StubBot",
    "create_stub_bot",
    "AssassinationAdvisor",
    "AssassinationSuggestion",
    "StubAdvisor",
    "build_advisor_prompt",
    "parse_advisor_response",
]
