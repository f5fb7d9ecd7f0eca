"""
Console blackjack.

Run ``python -m chipjack`` to play at a table backed by a local SQLite
database. Balances and history persist between sessions per ``--user``.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
import argparse
import asyncio
import logging
import sys

from chipjack.blackjack.action import Action
from chipjack.common.io_interface import (
    ConsoleIOInterface,
    InputAbortedError,
    IOInterface,
    TranscriptIOInterface,
)
from chipjack.engine import BlackjackEngine, SettlementStatus
from chipjack.events import EngineEventType
from chipjack.state import RoundStatus
from chipjack.storage import PlayerIdentity, SQLiteStore
from chipjack.storage.schema import default_db_path

logger = logging.getLogger(__name__)

RESULT_MESSAGES = {
    "win": "You win!",
    "loss": "Dealer wins.",
    "push": "Push.",
    "blackjack": "Blackjack!",
}


class ConsoleGame:
    """Plays rounds at a table engine through an IOInterface."""

    def __init__(self, engine: BlackjackEngine, io: IOInterface):
        self.engine = engine
        self.io = io

    def watch(self) -> Callable[[], None]:
        """
        Follow the table's events.

        Every event is traced at debug level, and a failed settlement is
        reported to the player straight away.

        Returns:
            A function that stops watching
        """
        bus = self.engine.event_bus
        stops = [
            bus.on_any(self._trace),
            bus.on(EngineEventType.SETTLEMENT_FAILED, self._settlement_failed),
        ]

        def stop():
            for unsubscribe in stops:
                unsubscribe()

        return stop

    @staticmethod
    def _trace(event: Tuple[str, Dict[str, Any]]) -> None:
        name, data = event
        logger.debug("%s %s", name, data)

    def _settlement_failed(self, data: Dict[str, Any]) -> None:
        self.io.output("Warning: this round could not be saved.")

    async def show(self, message: str) -> None:
        await self.io.output_async(message)

    async def render(self) -> None:
        state = self.engine.render_state()
        dealer, player = state["dealer"], state["player"]
        await self.show(f"Dealer: {' '.join(dealer['cards'])} ({dealer['value']})")
        await self.show(f"You:    {' '.join(player['cards'])} ({player['value']})")

    async def play(self, rounds: Optional[int] = None) -> None:
        """
        Play until the player quits, runs out of chips, or `rounds` are played.
        """
        played = 0
        while rounds is None or played < rounds:
            if self.engine.chips < self.engine.rules.min_bet:
                await self.show("You are out of chips. Game over.")
                break

            bet = self.io.check_numeric_response(
                f"\nChips: {self.engine.chips}. Your bet (0 to quit): "
            )
            if bet == 0:
                break
            transition = await self.engine.place_bet(bet)
            if transition.rejected:
                await self.show(transition.reason)
                continue

            await self.engine.deal()
            await self.play_hand()
            played += 1
            await self.engine.reset()

    async def play_hand(self) -> None:
        """Take hit/stand/hint commands until the round is over."""
        while self.engine.state.status == RoundStatus.PLAYING:
            await self.render()
            command = self.io.input("hit, stand or hint? ").strip().lower()
            if command == "hint":
                await self.show(f"Suggestion: {self.engine.hint().value}")
                continue
            try:
                action = Action.from_input(command)
            except ValueError:
                await self.show("Please enter hit, stand or hint.")
                continue
            if action not in (Action.HIT, Action.STAND):
                await self.show("Please enter hit, stand or hint.")
                continue
            await self.engine.execute_action(action)

        await self.render()
        result = self.engine.state.last_result
        if self.engine.state.status == RoundStatus.PLAYER_BUST:
            await self.show("You busted!")
        else:
            await self.show(RESULT_MESSAGES[result.outcome.value])
        await self.show(f"Chips change: {result.delta:+d}")

    async def summary(self) -> None:
        """Report unconfirmed settlements and lifetime statistics."""
        await self.engine.wait_for_settlement()
        unconfirmed = [
            s for s in self.engine.settlements if s.status == SettlementStatus.UNCONFIRMED
        ]
        if unconfirmed:
            await self.show(f"{len(unconfirmed)} round(s) could not be saved.")

        stats = await self.engine.statistics()
        await self.show(
            f"Games: {stats.total_games}  Wins: {stats.total_wins}  "
            f"Losses: {stats.total_losses}  Pushes: {stats.total_pushes}  "
            f"Win rate: {stats.win_rate}%  Net: {stats.total_chips_won:+d}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play blackjack in the console.")
    parser.add_argument("--user", default="guest", help="Player id to load and save")
    parser.add_argument("--name", default=None, help="Display name (defaults to --user)")
    parser.add_argument("--db", default=None, help="SQLite database path")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the card source")
    parser.add_argument("--rounds", type=int, default=None, help="Stop after this many rounds")
    parser.add_argument(
        "--starting-chips", type=int, default=1000, help="Balance for a new player"
    )
    parser.add_argument("--transcript", default=None, help="Append table output to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


async def run(args: argparse.Namespace, io: Optional[IOInterface] = None) -> None:
    io = io or ConsoleIOInterface()
    if args.transcript:
        io = TranscriptIOInterface(io, args.transcript)

    store = SQLiteStore(args.db or default_db_path())
    identity = PlayerIdentity(user_id=args.user, username=args.name or args.user)
    engine = BlackjackEngine(
        identity,
        store,
        config={"seed": args.seed, "rules": {"starting_chips": args.starting_chips}},
    )
    game = ConsoleGame(engine, io)
    stop_watching = game.watch()
    await engine.initialize()
    try:
        await game.play(args.rounds)
    except InputAbortedError as e:
        await game.show(str(e))
    finally:
        await game.summary()
        await engine.shutdown()
        stop_watching()
        store.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(args))
    except (KeyboardInterrupt, EOFError):
        print("\nThank you for playing!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
