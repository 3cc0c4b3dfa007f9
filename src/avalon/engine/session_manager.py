"""SessionManager - holds live games and serializes actions per game.

One asyncio.Lock per game id; actions on the same game are applied one
at a time while different games proceed independently.
"""

import asyncio
import logging
from typing import Optional

from avalon.engine.actions import Action
from avalon.engine.avalon_game import ActionResult, AvalonGame

logger = logging.getLogger(__name__)


class SessionManager:
    """Registry of running games keyed by game id."""

    def __init__(self) -> None:
        self._games: dict[str, AvalonGame] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_lock = asyncio.Lock()  # guards the lock dictionary

    def create_game(self, game_id: str, host_id: str, host_name: str, **kwargs) -> AvalonGame:
        """Create and register a game. kwargs are forwarded to AvalonGame.

        Raises:
            ValueError: If game_id is already registered
        """
        if game_id in self._games:
            raise ValueError(f"Game {game_id} already exists")
        game = AvalonGame(game_id, host_id, host_name, **kwargs)
        self._games[game_id] = game
        logger.info("Created game %s hosted by %s", game_id, host_id)
        return game

    def get_game(self, game_id: str) -> Optional[AvalonGame]:
        return self._games.get(game_id)

    def discard_game(self, game_id: str) -> None:
        """Forget a game. Unknown ids are ignored."""
        self._games.pop(game_id, None)
        self._locks.pop(game_id, None)

    @property
    def game_ids(self) -> list[str]:
        return list(self._games)

    async def _get_lock(self, game_id: str) -> asyncio.Lock:
        async with self._lock_lock:
            if game_id not in self._locks:
                self._locks[game_id] = asyncio.Lock()
            return self._locks[game_id]

    async def submit(self, game_id: str, action: Action) -> ActionResult:
        """Apply an action to a game under that game's lock.

        Raises:
            KeyError: If no game is registered under game_id
        """
        game = self._games.get(game_id)
        if game is None:
            raise KeyError(f"Unknown game {game_id}")
        lock = await self._get_lock(game_id)
        async with lock:
            return game.handle(action)
