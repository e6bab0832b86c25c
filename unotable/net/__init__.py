"""Networked play: message codec, transports and the host/follower peers."""

from unotable.net.messages import (
    Message,
    MessageKind,
    ProtocolError,
    decode_message,
    encode_message,
    player_draw,
    player_move,
    restart_request,
    state_update,
)
from unotable.net.peers import FOLLOWER_INDEX, HOST_INDEX, FollowerPeer, HostPeer
from unotable.net.transport import LoopbackTransport, StreamTransport, Transport, connect_to_host, serve_host

__all__ = [
    "Message",
    "MessageKind",
    "ProtocolError",
    "decode_message",
    "encode_message",
    "player_draw",
    "player_move",
    "restart_request",
    "state_update",
    "FOLLOWER_INDEX",
    "HOST_INDEX",
    "FollowerPeer",
    "HostPeer",
    "LoopbackTransport",
    "StreamTransport",
    "Transport",
    "connect_to_host",
    "serve_host",
]
