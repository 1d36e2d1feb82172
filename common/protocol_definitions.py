"""
Protocol definitions for the Remote File Shell.

This module defines the message structures and wire formats used by the
command shell (line-oriented text) and the transfer service (length-prefixed
binary frames).
"""

import os
import socket
import struct
from dataclasses import dataclass, field
from typing import List

from common.constants import (
    LINE_END, HELP_ENTRIES, TEXT_ENCODING, TOKEN_HEADER_SIZE, LENGTH_FIELD_SIZE
)

TOKEN_HEADER = struct.Struct('>H')
LENGTH_FIELD = struct.Struct('>q')


class TransferProtocolError(ConnectionError):
    """Raised when the transfer stream ends or carries a malformed frame."""


@dataclass
class Command:
    """Parsed shell command line."""
    verb: str
    args: List[str] = field(default_factory=list)

    @property
    def arity(self) -> int:
        return len(self.args)


@dataclass
class CommandResult:
    """Response lines produced by one shell command."""
    responses: List[str] = field(default_factory=list)
    close: bool = False

    def add(self, text: str):
        self.responses.append(text)


def parse_command(line: str) -> Command:
    """Split a received line into verb and arguments.

    Line terminators are removed first; an empty line yields an empty verb.
    """
    tokens = line.replace('\n', '').replace('\r', '').split()
    if not tokens:
        return Command(verb='')
    return Command(verb=tokens[0], args=tokens[1:])


def split_command_lines(text: str) -> List[str]:
    """Split a decoded read into command lines (at least one)."""
    return text.splitlines() or [text]


def create_greeting_message(username: str) -> str:
    """Create the greeting sent on accept."""
    return f"Hello, {username}!{LINE_END}"


def create_prompt_message(username: str, location: str) -> str:
    """Create the prompt sent after every command."""
    return f"{username}:{location}$ "


def create_help_message() -> List[str]:
    """Create one help line per command."""
    return [f"\t{usage}    {description}{LINE_END}" for usage, description in HELP_ENTRIES]


def create_listing_message(names: List[str]) -> str:
    """Create the space-joined directory listing line."""
    return ' '.join(names) + LINE_END


def create_failure_message(action: str, path: str, reason: str) -> str:
    """Create a per-entry failure line for copy/delete."""
    return f"Can't {action} {path}: {reason}{LINE_END}"


def display_path(root_name: str, relative: str) -> str:
    """Render a root-relative path the way the prompt shows it."""
    if relative in ('', '.'):
        return root_name + os.sep
    return root_name + os.sep + relative + os.sep


# ---------------------------------------------------------------------------
# Transfer framing
# ---------------------------------------------------------------------------

def encode_token(text: str) -> bytes:
    """Encode a string token as a 2-byte length followed by UTF-8 bytes."""
    data = text.encode(TEXT_ENCODING)
    if len(data) > 0xFFFF:
        raise ValueError(f"Token too long: {len(data)} bytes")
    return TOKEN_HEADER.pack(len(data)) + data


def encode_length(size: int) -> bytes:
    """Encode a payload length as an 8-byte big-endian field."""
    return LENGTH_FIELD.pack(size)


def recv_exact(sock: socket.socket, nbytes: int) -> bytes:
    """Receive exactly nbytes from sock.

    Raises TransferProtocolError if the peer closes first.
    """
    buf = bytearray()
    while len(buf) < nbytes:
        chunk = sock.recv(nbytes - len(buf))
        if not chunk:
            raise TransferProtocolError(
                f"Connection closed after {len(buf)}/{nbytes} bytes")
        buf.extend(chunk)
    return bytes(buf)


def send_token(sock: socket.socket, text: str):
    sock.sendall(encode_token(text))


def recv_token(sock: socket.socket) -> str:
    """Read one length-prefixed string token."""
    (length,) = TOKEN_HEADER.unpack(recv_exact(sock, TOKEN_HEADER_SIZE))
    data = recv_exact(sock, length)
    try:
        return data.decode(TEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise TransferProtocolError(f"Malformed token: {e}")


def send_length(sock: socket.socket, size: int):
    sock.sendall(encode_length(size))


def recv_length(sock: socket.socket) -> int:
    """Read one 8-byte payload length."""
    (size,) = LENGTH_FIELD.unpack(recv_exact(sock, LENGTH_FIELD_SIZE))
    return size
