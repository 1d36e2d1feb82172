"""
Shell connection multiplexer.

This module runs the line-oriented command shell: one asyncio event loop
accepts and reads every connection, while filesystem work is handed to a
bounded worker pool so a long copy or delete does not stall other clients.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Dict

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_MAX_WORKERS, DEFAULT_USERNAME,
    READ_BUFFER_SIZE, ROOT_DIR, TEXT_ENCODING, Responses
)
from common.protocol_definitions import create_greeting_message, split_command_lines
from server.shell.interpreter import CommandInterpreter, ShellSession
from server.shell.navigator import Navigator
from server.utils.logger import logger


class ShellServer:
    """Accepts shell connections and routes their commands."""

    def __init__(self, root_dir: str = ROOT_DIR, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 max_workers: int = DEFAULT_MAX_WORKERS, default_username: str = DEFAULT_USERNAME,
                 read_buffer_size: int = READ_BUFFER_SIZE):
        self.host = host
        self.port = port
        self.default_username = default_username
        self.read_buffer_size = read_buffer_size
        self.navigator = Navigator(root_dir)
        self.interpreter = CommandInterpreter(self.navigator)
        self.sessions: Dict[tuple, ShellSession] = {}  # address -> session
        self.clients: Dict[tuple, asyncio.StreamWriter] = {}  # address -> writer
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='shell-fs')
        self.server = None
        self.stopped = None

    async def send_message(self, address: tuple, message: str) -> bool:
        """Send text to the connection with the given address."""
        writer = self.clients.get(address)
        if writer is None:
            return False
        try:
            writer.write(message.encode(TEXT_ENCODING))
            await writer.drain()
            return True
        except Exception as e:
            logger.error(f"Failed to send to {address}: {e}")
            return False

    async def disconnect_client(self, address: tuple):
        """Close a connection and forget its session."""
        self.sessions.pop(address, None)
        writer = self.clients.pop(address, None)
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except Exception as e:
            logger.debug(f"Error while closing {address}: {e}")
        logger.log_disconnect(address)

    async def run_command(self, session: ShellSession, line: str) -> bool:
        """Execute one command line on the worker pool and send its output.

        Returns False once the connection should be closed.
        """
        logger.log_command(session.address, line)
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(self.executor, self.interpreter.execute, session, line)
        except Exception as e:
            logger.log_error(f"command {line!r} from {session.address}", e)
            await self.send_message(session.address, self.interpreter.prompt(session))
            return True

        for response in result.responses:
            if not await self.send_message(session.address, response):
                return False
        return not result.close

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        address = writer.get_extra_info('peername')
        session = self.interpreter.new_session(address, self.default_username)
        self.clients[address] = writer
        self.sessions[address] = session

        logger.log_connection(address)

        try:
            await self.send_message(address, create_greeting_message(session.username))
            await self.send_message(address, Responses.HINT)

            keep_open = True
            while keep_open:
                data = await reader.read(self.read_buffer_size)
                if not data:
                    break

                text = data.decode(TEXT_ENCODING, errors='replace')
                for line in split_command_lines(text):
                    keep_open = await self.run_command(session, line)
                    if not keep_open:
                        break

        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for {address}")
        except Exception as e:
            logger.error(f"Socket error for {address}: {e}")
        finally:
            await self.disconnect_client(address)

    async def start_serving(self) -> asyncio.AbstractServer:
        """Bind the listening socket and start accepting connections."""
        self.stopped = asyncio.Event()
        self.server = await asyncio.start_server(self.handle_client, self.host, self.port)
        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Shell server listening on {addr}, root={self.navigator.root}")
        return self.server

    async def start(self):
        """Start the server and serve until cancelled."""
        await self.start_serving()
        try:
            await self.stopped.wait()
        finally:
            await self.stop()

    async def stop(self):
        """Close the listening socket, every connection and the worker pool."""
        if self.stopped is not None:
            self.stopped.set()
        server, self.server = self.server, None
        if server is not None:
            server.close()
        for address in list(self.clients):
            await self.disconnect_client(address)
        if server is not None:
            await server.wait_closed()
        self.executor.shutdown(wait=True)
