"""CLI entry point."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Optional

import typer
from dotenv import load_dotenv

from unotable.config import Settings, load_settings

if TYPE_CHECKING:
    from unotable.agents.protocol import MoveService
    from unotable.engine import MatchState
    from unotable.net.peers import _Peer

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(help="UNO rules engine: play the computer, pass-and-play, or play over the network")

AVATAR_URL = "https://api.dicebear.com/9.x/{style}/svg?seed={seed}"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _settings(target: Optional[int], personality: Optional[str]) -> Settings:
    from dataclasses import replace

    from unotable.agents.strategy import Personality

    try:
        settings = load_settings()
        if target is not None:
            settings = replace(settings, target_score=target)
        if personality is not None:
            settings = replace(settings, personality=Personality.parse(personality))
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    return settings


def _move_service(settings: Settings, offline: bool) -> Optional["MoveService"]:
    if offline:
        return None
    from unotable.agents.llm_agent import LLMMoveService

    try:
        return LLMMoveService(
            provider=settings.llm_provider,
            model=settings.llm_model,
            timeout=settings.decision_timeout,
        )
    except ValueError as e:
        typer.echo(f"LLM unavailable ({e}); the computer will use its built-in strategy.")
        return None


def _echo_round(state: "MatchState") -> None:
    typer.echo(f"\n*** {state.round_winner} wins the round (+{state.points_won}) ***")
    for p in state.players:
        typer.echo(f"  {p.name}: {p.score}")


def _echo_result(result) -> None:
    typer.echo(f"\nWinner: {result.winner or 'None (unfinished)'}")
    typer.echo(f"Rounds: {result.num_rounds}  Turns: {result.num_turns}")
    for name, score in result.scores.items():
        typer.echo(f"  {name}: {score}")


@app.command()
def play(
    name: str = typer.Option("You", "--name", "-n", help="Your display name"),
    personality: Optional[str] = typer.Option(
        None, "--personality", "-p", help="Computer style: Friendly, Sassy or Ruthless"
    ),
    target: Optional[int] = typer.Option(None, "--target", "-t", help="Score that wins the match"),
    offline: bool = typer.Option(False, "--offline", help="Skip the LLM; use the built-in strategy"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Play a match against the computer."""
    from unotable.agents.computer import ComputerPlayer
    from unotable.agents.human_agent import HumanAgent
    from unotable.engine import GameMode, Player
    from unotable.orchestration import GameRunner, GameSession
    from unotable.stats import MemoryStatsSink

    _setup_logging(verbose)
    settings = _settings(target, personality)
    computer = ComputerPlayer(
        settings.personality,
        service=_move_service(settings, offline),
        timeout=settings.decision_timeout,
    )
    players = [
        Player(id="human", name=name, avatar=AVATAR_URL.format(style="avataaars", seed=name)),
        Player(id="computer", name="Computer", is_computer=True, avatar=AVATAR_URL.format(style="bottts", seed="unotable")),
    ]
    sink = MemoryStatsSink()
    session = GameSession(players, GameMode.AI, settings, computer=computer, stats_sink=sink, rng=random.Random(seed))
    runner = GameRunner(session, agents={0: HumanAgent(name)}, on_round_over=_echo_round)
    try:
        result = asyncio.run(runner.run())
    finally:
        session.close()
    _echo_result(result)
    if sink.summaries:
        summary = sink.summaries[-1]
        typer.echo(f"{'You won' if summary.is_win else 'You lost'} in {summary.match_duration_seconds:.0f}s, "
                   f"playing {len(summary.cards_played)} cards.")


@app.command()
def local(
    names: str = typer.Option("Player 1,Player 2", "--names", help="Comma-separated player names (2-10)"),
    target: Optional[int] = typer.Option(None, "--target", "-t", help="Score that wins the match"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Pass-and-play between humans on this terminal."""
    from unotable.agents.human_agent import HumanAgent
    from unotable.engine import GameMode, Player
    from unotable.orchestration import GameRunner, GameSession

    _setup_logging(verbose)
    seats = [n.strip() for n in names.split(",") if n.strip()]
    if not 2 <= len(seats) <= 10:
        raise typer.BadParameter("Give between 2 and 10 player names.")
    settings = _settings(target, None)
    players = [Player(id=f"player_{i}", name=n) for i, n in enumerate(seats)]
    session = GameSession(players, GameMode.LOCAL, settings, rng=random.Random(seed))
    agents = {i: HumanAgent(n) for i, n in enumerate(seats)}
    runner = GameRunner(session, agents=agents, on_round_over=_echo_round)
    _echo_result(asyncio.run(runner.run()))


async def _play_networked(peer: "_Peer", seat: int, name: str, listen) -> None:
    """Terminal loop shared by host and follower: prompt whenever it is our turn."""
    from unotable.agents.human_agent import HumanAgent
    from unotable.engine import MatchStatus, PlayerView, get_legal_actions
    from unotable.engine.rules import PlayCard
    from unotable.net import HostPeer

    agent = HumanAgent(name)
    changed = asyncio.Event()
    peer.subscribe(lambda _state: changed.set())
    listener = asyncio.create_task(listen())
    try:
        while peer.connected:
            changed.clear()
            state = peer.state
            if state.status == MatchStatus.PLAYING and state.current_index == seat:
                legal = get_legal_actions(state, seat)
                action = await asyncio.to_thread(agent.get_action, PlayerView.from_state(state, seat), legal, seat)
                if isinstance(action, PlayCard):
                    sent = await peer.play(action.card_id, action.chosen_color)
                else:
                    sent = await peer.draw()
                if not sent:
                    continue
            elif state.status in (MatchStatus.ROUND_OVER, MatchStatus.GAME_OVER):
                _echo_round(state)
                if state.status == MatchStatus.GAME_OVER:
                    typer.echo(f"Match won by {state.winner}.")
                if not await asyncio.to_thread(typer.confirm, "Play on?", True):
                    break
                if isinstance(peer, HostPeer):
                    await peer.restart()
                else:
                    await peer.request_restart()
            # Wait for the next snapshot unless something already moved on
            if peer.state is state:
                await changed.wait()
    finally:
        listener.cancel()
        await peer.close()
    typer.echo(peer.state.commentary or "Disconnected.")


@app.command()
def host(
    port: int = typer.Option(7777, "--port", help="TCP port to listen on"),
    bind: str = typer.Option("0.0.0.0", "--bind", help="Address to listen on"),
    name: str = typer.Option("Host", "--name", "-n", help="Your display name"),
    target: Optional[int] = typer.Option(None, "--target", "-t", help="Score that wins the match"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Host a networked match for the first opponent that connects."""
    from unotable.engine import Player
    from unotable.net import HOST_INDEX, HostPeer, serve_host

    _setup_logging(verbose)
    settings = _settings(target, None)

    async def main() -> None:
        done = asyncio.Event()

        async def on_connect(transport) -> None:
            peer = HostPeer(
                transport,
                Player(id="host", name=name, avatar=AVATAR_URL.format(style="avataaars", seed=name)),
                Player(id="client", name="Opponent", avatar=AVATAR_URL.format(style="avataaars", seed="client")),
                target_score=settings.target_score,
            )
            await peer.start_match()
            await _play_networked(peer, HOST_INDEX, name, peer.serve)
            done.set()

        server = await serve_host(bind, port, on_connect)
        typer.echo(f"Waiting for an opponent on {bind}:{port} ...")
        async with server:
            await done.wait()

    asyncio.run(main())


@app.command()
def join(
    address: str = typer.Argument(..., help="host:port of the match to join"),
    name: str = typer.Option("Opponent", "--name", "-n", help="Your display name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Join a networked match hosted elsewhere."""
    from unotable.net import FOLLOWER_INDEX, FollowerPeer, connect_to_host

    _setup_logging(verbose)
    hostname, _, port = address.rpartition(":")
    if not hostname or not port.isdigit():
        raise typer.BadParameter("Address must look like host:port")

    async def main() -> None:
        try:
            transport = await connect_to_host(hostname, int(port))
        except OSError as e:
            typer.echo(f"Could not connect: {e}")
            raise typer.Exit(code=1)
        peer = FollowerPeer(transport)
        await _play_networked(peer, FOLLOWER_INDEX, name, peer.listen)

    asyncio.run(main())


@app.command()
def simulate(
    personalities: str = typer.Option(
        "Ruthless,Friendly", "--personalities", help="Comma-separated computer styles, one per seat"
    ),
    games: int = typer.Option(1, "--games", "-g", help="Number of matches"),
    target: Optional[int] = typer.Option(None, "--target", "-t", help="Score that wins a match"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run computer-vs-computer matches with the built-in strategies."""
    from collections import Counter
    from dataclasses import replace

    from unotable.agents.computer import ComputerPlayer
    from unotable.agents.strategy import Personality
    from unotable.engine import GameMode, Player
    from unotable.orchestration import GameRunner, GameSession

    _setup_logging(verbose)
    try:
        styles = [Personality.parse(p) for p in personalities.split(",") if p.strip()]
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    if len(styles) < 2:
        raise typer.BadParameter("Give at least two personalities.")

    settings = replace(_settings(target, None), think_delay=0.0)
    players = [Player(id=f"cpu_{i}", name=f"{s.value} #{i}", is_computer=True) for i, s in enumerate(styles)]
    seats = {i: ComputerPlayer(s) for i, s in enumerate(styles)}
    rng = random.Random(seed)
    wins: Counter = Counter()
    for _ in range(games):
        session = GameSession(players, GameMode.AI, settings, seat_computers=seats, rng=random.Random(rng.random()))
        result = asyncio.run(GameRunner(session).run())
        if result.winner:
            wins[result.winner] += 1
        if games == 1:
            _echo_result(result)
    if games > 1:
        typer.echo("Simulation results:")
        for pid, w in wins.most_common():
            typer.echo(f"  {pid}: {w} wins")


if __name__ == "__main__":
    app()
