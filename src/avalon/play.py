#!/usr/bin/env python
"""Bot-only Avalon matches on the console.

Usage:
    avalon                           # One all-bot game with a random seed
    avalon --seed 42                 # Reproducible game with seed
    avalon --watch --delay 0.5       # Print every event as it happens
    avalon --games 100               # Stress test with validators
"""

import argparse
import asyncio
import logging
import random
import sys
import time
from collections import Counter
from typing import Optional

# Enable Windows console colors
if sys.platform == "win32":
    import colorama
    colorama.init()

from rich.console import Console
from rich.panel import Panel

from avalon.models import PlayerType
from avalon.events import EventFormatter, GameEvent
from avalon.engine import (
    CollectingValidator,
    JoinAsPlayer,
    AddSpectator,
    AvalonGame,
    SessionManager,
    StartGame,
)
from avalon.engine.validator import GameValidator
from avalon.ai.stub_ai import create_stub_bot

BOT_NAMES = ["Arthur", "Gawain", "Lancelot", "Tristan", "Bedivere"]


async def play_bot_game(
    manager: SessionManager,
    game_id: str,
    seed: int,
    validator: Optional[GameValidator] = None,
    approve_probability: float = 0.8,
) -> tuple[list[GameEvent], AvalonGame]:
    """Set up a five-bot lobby and start it.

    Bots resolve the whole match inside the StartGame action. The
    returned events come from the full event log, hidden ones included.

    Returns:
        Tuple of (events from the start onwards, the AvalonGame)
    """
    host_id = "bot-1"
    game = manager.create_game(
        game_id,
        host_id,
        BOT_NAMES[0],
        host_type=PlayerType.BOT,
        bot_policy=create_stub_bot(seed=seed, approve_probability=approve_probability),
        seed=seed,
        validator=validator,
    )
    for index, name in enumerate(BOT_NAMES[1:], start=2):
        bot_id = f"bot-{index}"
        await manager.submit(game_id, AddSpectator(player_id=bot_id, name=name, player_type=PlayerType.BOT))
        result = await manager.submit(game_id, JoinAsPlayer(spectator_id=bot_id, requester_id=host_id))
        if not result.accepted:
            raise RuntimeError(f"Bot {bot_id} could not join: {result.reason}")

    result = await manager.submit(game_id, StartGame(leader_id=host_id))
    if not result.accepted:
        raise RuntimeError(f"Game {game_id} did not start: {result.reason}")
    return game.event_log.all_events(), game


async def run_ai_simulation(
    seed: int,
    validator: Optional[GameValidator] = None,
    log_file: Optional[str] = "game_log.yaml",
    watch_mode: bool = False,
    delay: float = 0.0,
) -> str:
    """Run one all-bot game and print the outcome.

    Args:
        seed: Random seed for the game
        validator: Optional game validator
        log_file: File to save the YAML event log (None to disable)
        watch_mode: If True, print each event
        delay: Delay in seconds between printed events

    Returns:
        Winner string
    """
    console = Console()
    console.print(f"\n[bold]Running AI simulation (seed {seed})...[/bold]\n")

    manager = SessionManager()
    events, game = await play_bot_game(manager, f"game-{seed}", seed, validator=validator)

    if watch_mode:
        log = game.event_log
        formatter = EventFormatter(log.names, log.roles_secret)
        for event in events:
            formatted = formatter.format(event)
            if formatted.strip():
                console.print(formatted)
            if delay > 0:
                await asyncio.sleep(delay)

    session = game.session
    winner = session.winner.value if session.winner else "none"
    condition = session.victory_condition.value if session.victory_condition else "none"
    console.print(Panel(
        f"[bold]Game Over[/bold]\n\n"
        f"Winner: {winner}\n"
        f"Condition: {condition}\n"
        f"Score: Good {session.good_score} - Evil {session.evil_score}",
        title="Result"
    ))

    if log_file:
        try:
            game.event_log.save_to_file(log_file, include_roles=True)
            console.print(f"Event log saved to {log_file}")
        except OSError as e:
            console.print(f"[red]Failed to save log: {e}[/red]")

    return winner


def run_stress_test(num_games: int, seed_base: Optional[int] = None) -> None:
    """Run many games with validators and report results."""
    console = Console()
    if seed_base is None:
        seed_base = random.randint(1, 1000000)

    console.print(f"\n[bold]Running stress test: {num_games} games...[/bold]")
    console.print(f"Seed base: {seed_base}")
    console.print("-" * 50)

    async def run_all() -> list[dict]:
        manager = SessionManager()
        results = []
        for game_num in range(num_games):
            seed = seed_base + game_num
            validator = CollectingValidator()
            try:
                _, game = await play_bot_game(manager, f"stress-{seed}", seed, validator=validator)
            except Exception as e:
                results.append({"seed": seed, "error": str(e)})
                continue
            results.append({
                "seed": seed,
                "winner": game.session.winner.value if game.session.winner else None,
                "condition": game.session.victory_condition,
                "violations": validator.get_violations(),
                "error": None,
            })
            manager.discard_game(f"stress-{seed}")
        return results

    started = time.perf_counter()
    results = asyncio.run(run_all())
    elapsed = time.perf_counter() - started

    errors = [r for r in results if r["error"]]
    completed = [r for r in results if not r["error"]]
    violations = [v for r in completed for v in r["violations"]]

    console.print("=" * 60)
    console.print("STRESS TEST REPORT")
    console.print("=" * 60)
    console.print(f"\nGames run: {num_games} in {elapsed:.2f}s")
    console.print(f"Completed: {len(completed)}")
    console.print(f"Errors: {len(errors)}")

    console.print("\nWinner Distribution:")
    for winner, count in sorted(Counter(r["winner"] for r in completed).items(), key=lambda x: str(x[0])):
        console.print(f"  {winner}: {count} ({count / num_games * 100:.1f}%)")

    console.print("\nVictory Conditions:")
    for condition, count in sorted(Counter(r["condition"].value for r in completed).items()):
        console.print(f"  {condition}: {count}")

    console.print("\nViolations:")
    by_rule = Counter(v.rule_id for v in violations)
    if by_rule:
        for rule_id, count in sorted(by_rule.items()):
            console.print(f"  {rule_id}: {count}")
    else:
        console.print("  None")

    if errors:
        console.print(f"\nErrors ({len(errors)}):")
        for e in errors[:5]:
            console.print(f"  Seed {e['seed']}: {e['error']}")
    console.print("=" * 60)


def main():
    """Main entry point."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="Avalon - bot-only matches of The Resistance: Avalon",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible games"
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Print every event of the game"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.0,
        help="Delay in seconds between events when using --watch (default: 0)"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Enable in-game validators"
    )
    parser.add_argument(
        "--games",
        type=int,
        default=None,
        help="Run N games with validators (stress test mode)"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default="game_log.yaml",
        help="File to save the YAML event log (default: game_log.yaml, use '' to disable)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show engine logging at INFO level"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger("avalon").setLevel(logging.INFO)

    if args.seed is None:
        args.seed = random.randint(1, 1000000)

    if args.games is not None and args.games < 1:
        print("Error: --games must be a positive integer")
        return 1

    validator: Optional[GameValidator] = None
    if args.validate:
        validator = CollectingValidator()

    if args.games is not None:
        run_stress_test(args.games, seed_base=args.seed)
    else:
        asyncio.run(run_ai_simulation(
            args.seed,
            validator=validator,
            log_file=args.log_file or None,
            watch_mode=args.watch,
            delay=args.delay,
        ))
        if validator is not None:
            violations = validator.get_violations()
            print(f"Violations: {len(violations)}")
            for v in violations:
                print(f"  {v}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
