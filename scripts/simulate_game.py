"""Simulate a match between computer personalities and print the play-by-play."""

import asyncio
import random

from unotable.agents import ComputerPlayer, Personality
from unotable.config import Settings
from unotable.engine import GameMode, MatchState, Player
from unotable.orchestration import GameRunner, GameSession


def main():
    styles = [Personality.RUTHLESS, Personality.FRIENDLY, Personality.SASSY]
    players = [Player(id=f"p{i}", name=f"{s.value}Bot", is_computer=True) for i, s in enumerate(styles)]
    seats = {i: ComputerPlayer(s) for i, s in enumerate(styles)}

    session = GameSession(
        players,
        GameMode.AI,
        Settings(target_score=200, think_delay=0.0),
        seat_computers=seats,
        rng=random.Random(42),
    )

    # Log every move to see the game progress
    def log(state: MatchState) -> None:
        print(f"> {state.commentary}")

    session.subscribe(log)
    result = asyncio.run(GameRunner(session).run())

    print(f"Match finished! Winner: {result.winner}")
    print(f"Rounds: {result.num_rounds}  Turns: {result.num_turns}")
    for name, score in result.scores.items():
        print(f"  {name}: {score}")


if __name__ == "__main__":
    main()
