"""Transports: the send/receive contract peers talk through."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, Tuple

from unotable.net.messages import Message, ProtocolError, decode_message, encode_message

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Reliable, ordered message channel to one peer."""

    async def send(self, message: Message) -> None:
        """Send a message. Raises ConnectionError once the channel is closed."""
        ...

    async def receive(self) -> Optional[Message]:
        """Next message, or None once the channel is closed."""
        ...

    async def close(self) -> None:
        ...


_CLOSED = None


class LoopbackTransport:
    """In-process transport; messages still go through the wire codec."""

    def __init__(self, inbox: asyncio.Queue, outbox: asyncio.Queue):
        self._inbox = inbox
        self._outbox = outbox
        self._closed = False

    @classmethod
    def pair(cls) -> Tuple["LoopbackTransport", "LoopbackTransport"]:
        """Two connected ends, e.g. host and follower."""
        a: asyncio.Queue = asyncio.Queue()
        b: asyncio.Queue = asyncio.Queue()
        return cls(a, b), cls(b, a)

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: Message) -> None:
        if self._closed:
            raise ConnectionError("Transport is closed")
        await self._outbox.put(encode_message(message))

    async def receive(self) -> Optional[Message]:
        if self._closed:
            return None
        raw = await self._inbox.get()
        if raw is _CLOSED:
            self._closed = True
            return None
        return decode_message(raw)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._outbox.put(_CLOSED)


class StreamTransport:
    """Newline-delimited JSON over an asyncio stream (TCP)."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self._reader = reader
        self._writer = writer

    async def send(self, message: Message) -> None:
        if self._writer.is_closing():
            raise ConnectionError("Transport is closed")
        self._writer.write(encode_message(message).encode("utf-8") + b"\n")
        await self._writer.drain()

    async def receive(self) -> Optional[Message]:
        try:
            line = await self._reader.readline()
        except (ConnectionError, asyncio.IncompleteReadError):
            return None
        except ValueError as e:
            # Line over the stream limit; the reader has already dropped it
            raise ProtocolError(f"Oversized message: {e}") from e
        if not line:
            return None
        try:
            text = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Message is not valid UTF-8: {e}") from e
        return decode_message(text)

    async def close(self) -> None:
        if self._writer.is_closing():
            return
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except ConnectionError as e:
            logger.debug("Connection dropped while closing: %s", e)


async def serve_host(
    host: str,
    port: int,
    on_connect: Callable[[StreamTransport], Awaitable[None]],
) -> asyncio.AbstractServer:
    """Listen for one follower and run ``on_connect`` for it.

    The server stops listening once the follower is accepted; any
    connection that still slips in is closed straight away.
    """
    server: Optional[asyncio.AbstractServer] = None
    accepted = False

    async def _handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        nonlocal accepted
        peer = writer.get_extra_info("peername")
        if accepted:
            logger.info("Refusing extra connection from %s", peer)
            writer.close()
            return
        accepted = True
        if server is not None:
            server.close()
        logger.info("Follower connected from %s", peer)
        await on_connect(StreamTransport(reader, writer))

    server = await asyncio.start_server(_handle, host, port)
    return server


async def connect_to_host(host: str, port: int) -> StreamTransport:
    reader, writer = await asyncio.open_connection(host, port)
    return StreamTransport(reader, writer)
