"""Tests for the TCP transport: newline framing, bad input and a localhost match."""

import asyncio
import random

import pytest

from unotable.engine import MatchStatus, Player
from unotable.net import (
    FollowerPeer,
    HostPeer,
    ProtocolError,
    StreamTransport,
    connect_to_host,
    encode_message,
    player_draw,
    serve_host,
)
from unotable.net.messages import MessageKind


async def _until(predicate, timeout: float = 2.0) -> None:
    async def poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout)


def _reader(data: bytes, limit: int = 2 ** 16) -> asyncio.StreamReader:
    reader = asyncio.StreamReader(limit=limit)
    reader.feed_data(data)
    reader.feed_eof()
    return reader


def _draw_line() -> bytes:
    return encode_message(player_draw()).encode("utf-8") + b"\n"


def test_invalid_utf8_is_a_protocol_error() -> None:
    async def scenario():
        transport = StreamTransport(_reader(b"\xff\xfe garbage\n" + _draw_line()), None)
        with pytest.raises(ProtocolError):
            await transport.receive()
        message = await transport.receive()
        return message, await transport.receive()

    message, after_eof = asyncio.run(scenario())
    assert message.kind == MessageKind.PLAYER_DRAW
    assert after_eof is None


def test_oversized_line_is_a_protocol_error() -> None:
    async def scenario():
        transport = StreamTransport(_reader(b"x" * 500 + b"\n" + _draw_line(), limit=128), None)
        with pytest.raises(ProtocolError):
            await transport.receive()
        return await transport.receive()

    assert asyncio.run(scenario()).kind == MessageKind.PLAYER_DRAW


async def _start_host(seed: int = 3):
    hosted: asyncio.Queue = asyncio.Queue()

    async def on_connect(transport: StreamTransport) -> None:
        peer = HostPeer(transport, Player(id="host", name="Host"), Player(id="guest", name="Guest"), rng=random.Random(seed))
        await hosted.put(peer)
        await peer.start_match()
        await peer.serve()
        await peer.close()

    server = await serve_host("127.0.0.1", 0, on_connect)
    port = server.sockets[0].getsockname()[1]
    return server, port, hosted


async def _stop(server) -> None:
    server.close()
    await asyncio.wait_for(server.wait_closed(), 2.0)


def test_match_over_localhost() -> None:
    async def scenario():
        server, port, hosted = await _start_host()
        follower = FollowerPeer(await connect_to_host("127.0.0.1", port))
        listening = asyncio.create_task(follower.listen())
        host = await asyncio.wait_for(hosted.get(), 2.0)

        await _until(lambda: follower.state.status == MatchStatus.PLAYING)
        assert follower.state == host.state

        assert await host.draw()
        await _until(lambda: follower.last_sequence == 2)
        assert follower.state.current_index == 1

        assert await follower.draw()
        await _until(lambda: follower.last_sequence == 3)
        assert len(host.state.players[1].hand) == 8
        assert follower.state == host.state

        await follower.close()
        await _until(lambda: not host.connected)
        listening.cancel()
        await asyncio.gather(listening, return_exceptions=True)
        await _stop(server)
        return host

    host = asyncio.run(scenario())
    assert host.state.status == MatchStatus.LOBBY
    assert host.state.commentary == "Opponent disconnected."


def test_host_skips_garbage_then_sees_eof() -> None:
    async def scenario():
        server, port, hosted = await _start_host()
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        host = await asyncio.wait_for(hosted.get(), 2.0)
        await _until(lambda: host.state.status == MatchStatus.PLAYING)

        writer.write(b"\xff\xfe garbage\n")
        writer.write(b'{"type": "NOPE"}\n')
        await writer.drain()
        await asyncio.sleep(0.05)
        still_connected = host.connected

        writer.close()
        await _until(lambda: not host.connected)
        await _stop(server)
        return host, still_connected

    host, still_connected = asyncio.run(scenario())
    assert still_connected
    assert host.state.status == MatchStatus.LOBBY


def test_only_one_follower_is_accepted() -> None:
    async def scenario():
        server, port, hosted = await _start_host()
        follower = FollowerPeer(await connect_to_host("127.0.0.1", port))
        listening = asyncio.create_task(follower.listen())
        host = await asyncio.wait_for(hosted.get(), 2.0)
        await _until(lambda: follower.state.status == MatchStatus.PLAYING)

        try:
            extra = await connect_to_host("127.0.0.1", port)
        except OSError:
            extra_message = None
        else:
            extra_message = await asyncio.wait_for(extra.receive(), 2.0)
            await extra.close()

        await follower.close()
        await _until(lambda: not host.connected)
        listening.cancel()
        await asyncio.gather(listening, return_exceptions=True)
        await _stop(server)
        return extra_message, hosted.empty()

    extra_message, no_second_host = asyncio.run(scenario())
    assert extra_message is None
    assert no_second_host
