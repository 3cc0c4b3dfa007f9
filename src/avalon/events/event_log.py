"""Chronological event log organized by mission."""

from datetime import datetime
from typing import Optional
import yaml
from pydantic import BaseModel, Field, SerializeAsAny, model_validator

from .game_events import (
    GameEvent,
    GameStart,
    Assassination,
    GameOver,
)
from .event_formatter import EventFormatter
from .event_visibility import is_public_event


# ============================================================================
# MissionLog Container
# ============================================================================

class MissionLog(BaseModel):
    """All events that happened while a mission was current.

    Mission numbering rules:
    - number must be in 1..5
    - a mission log may hold several proposals (rejected teams)
    """

    number: int
    events: list[SerializeAsAny[GameEvent]] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_number(self) -> "MissionLog":
        if not 1 <= self.number <= 5:
            raise ValueError(f"number must be in 1..5, got {self.number}")
        return self

    def describe(
        self,
        formatter: EventFormatter,
        public_only: bool = False,
    ) -> str:
        """Format mission log as string."""
        lines = [f"=== MISSION {self.number} ==="]
        for event in self.events:
            if public_only and not is_public_event(event):
                continue
            lines.append(f"  {formatter.format(event)}")
        return "\n".join(lines)


# ============================================================================
# Full Game Event Log
# ============================================================================

class GameEventLog(BaseModel):
    """
    Chronological event log for one match.

    Structure:
    - setup_events: lobby activity and role confirmations outside missions
    - game_start: the deal
    - missions: one MissionLog per mission that became current
    - assassination: the Assassin's strike (if reached)
    - game_over: final result
    """

    game_id: str = Field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    player_count: int = 0
    names: dict[str, str] = Field(default_factory=dict)
    roles_secret: dict[str, str] = Field(default_factory=dict)

    setup_events: list[SerializeAsAny[GameEvent]] = Field(default_factory=list)
    game_start: Optional[GameStart] = None
    missions: list[MissionLog] = Field(default_factory=list)
    assassination: Optional[Assassination] = None
    game_over: Optional[GameOver] = None

    def add_event(self, event: GameEvent) -> None:
        """Route an event to its place in the log."""
        if isinstance(event, GameStart):
            self.game_start = event
            self.player_count = event.player_count
            self.roles_secret = dict(event.roles_secret)
        elif isinstance(event, Assassination):
            self.assassination = event
        elif isinstance(event, GameOver):
            self.game_over = event
        elif event.mission == 0:
            self.setup_events.append(event)
        else:
            self.get_or_create_mission(event.mission).events.append(event)

    def get_mission(self, number: int) -> Optional[MissionLog]:
        """Get a specific mission log."""
        for mission_log in self.missions:
            if mission_log.number == number:
                return mission_log
        return None

    def get_or_create_mission(self, number: int) -> MissionLog:
        mission_log = self.get_mission(number)
        if mission_log is None:
            mission_log = MissionLog(number=number)
            self.missions.append(mission_log)
        return mission_log

    def all_events(self) -> list[GameEvent]:
        """All events in chronological order."""
        events: list[GameEvent] = list(self.setup_events)
        if self.game_start:
            events.append(self.game_start)
        for mission_log in self.missions:
            events.extend(mission_log.events)
        if self.assassination:
            events.append(self.assassination)
        if self.game_over:
            events.append(self.game_over)
        return events

    def describe(self, include_roles: bool = False, public_only: bool = False) -> str:
        """Human-readable summary of the match."""
        formatter = EventFormatter(
            self.names,
            self.roles_secret if include_roles else None,
        )

        lines = [f"Game {self.game_id} ({self.player_count} players)"]
        if self.game_start and not public_only:
            lines.append(f"  {formatter.format(self.game_start)}")

        for mission_log in self.missions:
            lines.append("")
            lines.append(mission_log.describe(formatter, public_only=public_only))

        if self.assassination:
            lines.append("")
            lines.append(f"  {formatter.format(self.assassination)}")

        if self.game_over:
            lines.append("")
            lines.append(f"  {formatter.format(self.game_over)}")

        return "\n".join(lines)

    def to_transcript(self) -> str:
        """Public play-by-play without secret information."""
        return self.describe(include_roles=False, public_only=True)

    def __str__(self) -> str:
        return self.describe(include_roles=True)

    def to_yaml(self, include_roles: bool = False) -> str:
        """Serialize the event log to YAML string."""
        data = self.model_dump(mode='json')

        if not include_roles:
            data["roles_secret"] = {}
            if data.get("game_start"):
                data["game_start"]["roles_secret"] = {}

        return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def save_to_file(self, filepath: str, include_roles: bool = False) -> None:
        """Serialize the event log to a YAML file."""
        yaml_content = self.to_yaml(include_roles=include_roles)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(yaml_content)
