"""
Shell command interpreter.

This module parses shell command lines and runs them against a connection's
session. Every command, recognized or not, ends with the prompt; only
``exit`` closes the connection instead.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List

from common.constants import Responses, TEXT_ENCODING, LINE_END
from common.protocol_definitions import (
    Command, CommandResult, parse_command, create_prompt_message, create_help_message,
    create_listing_message, create_failure_message
)
from server.shell.navigator import Navigator, OutsideRootError
from server.shell.tree_operator import TreeOperator, EntryResult, RootProtectedError, RecursiveCopyError
from server.utils.logger import logger


@dataclass
class ShellSession:
    """State owned by a single shell connection."""
    address: tuple
    username: str
    cwd: Path


class CommandInterpreter:
    """Dispatches shell commands by argument count and verb."""

    def __init__(self, navigator: Navigator, tree_operator: TreeOperator = None):
        self.navigator = navigator
        self.tree_operator = tree_operator or TreeOperator(navigator)
        self._handlers: Dict[int, Dict[str, Callable]] = {
            0: {
                '--help': self._help,
                'ls': self._list,
                'exit': self._exit,
            },
            1: {
                'nick': self._nick,
                'touch': self._touch,
                'rm': self._remove,
                'mkdir': self._mkdir,
                'cd': self._change_directory,
                'cat': self._cat,
            },
            2: {
                'copy': self._copy,
            },
        }

    def new_session(self, address: tuple, username: str) -> ShellSession:
        """Create a session positioned at the root."""
        return ShellSession(address=address, username=username, cwd=self.navigator.root)

    def prompt(self, session: ShellSession) -> str:
        return create_prompt_message(session.username, self.navigator.display(session.cwd))

    def execute(self, session: ShellSession, line: str) -> CommandResult:
        """Run one command line and return everything to send back."""
        result = CommandResult()
        # another connection may have deleted our working directory
        session.cwd = self.navigator.nearest_existing(session.cwd)

        command = parse_command(line)
        handler = self._handlers.get(command.arity, {}).get(command.verb)
        if handler is not None:
            try:
                handler(session, command, result)
            except OutsideRootError:
                result.add(Responses.OUTSIDE_ROOT)
            except OSError as e:
                logger.log_error(f"'{command.verb}' from {session.address}", e)
                result.add(create_failure_message(command.verb, ' '.join(command.args), e.strerror or str(e)))

        if not result.close:
            result.add(self.prompt(session))
        return result

    def _help(self, session: ShellSession, command: Command, result: CommandResult):
        for line in create_help_message():
            result.add(line)

    def _list(self, session: ShellSession, command: Command, result: CommandResult):
        names = sorted(entry.name for entry in session.cwd.iterdir())
        result.add(create_listing_message(names))

    def _exit(self, session: ShellSession, command: Command, result: CommandResult):
        session.cwd = self.navigator.root
        result.close = True

    def _nick(self, session: ShellSession, command: Command, result: CommandResult):
        session.username = command.args[0]

    def _touch(self, session: ShellSession, command: Command, result: CommandResult):
        path = self.navigator.resolve(session.cwd, command.args[0])
        try:
            path.touch(exist_ok=False)
        except FileExistsError:
            result.add(Responses.FILE_EXISTS)

    def _mkdir(self, session: ShellSession, command: Command, result: CommandResult):
        path = self.navigator.resolve(session.cwd, command.args[0])
        path.mkdir(parents=True, exist_ok=True)

    def _change_directory(self, session: ShellSession, command: Command, result: CommandResult):
        session.cwd, message = self.navigator.change_directory(session.cwd, command.args[0])
        if message:
            result.add(message)

    def _cat(self, session: ShellSession, command: Command, result: CommandResult):
        path = self.navigator.resolve(session.cwd, command.args[0])
        if not path.exists():
            result.add(Responses.NOT_FOUND)
            return
        try:
            with open(path, 'r', encoding=TEXT_ENCODING) as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"cat {path} failed: {e}")
            result.add(Responses.CANT_READ)
            return
        for text in lines:
            result.add(text + LINE_END)

    def _remove(self, session: ShellSession, command: Command, result: CommandResult):
        target = self.navigator.resolve_entry(session.cwd, command.args[0])
        try:
            entries = self.tree_operator.delete(target)
        except RootProtectedError:
            logger.warning(f"Refused to delete root requested by {session.address}")
            return
        except FileNotFoundError:
            result.add(Responses.NOT_FOUND)
            return
        self._report_failures('delete', entries, result)
        session.cwd = self.navigator.nearest_existing(session.cwd)

    def _copy(self, session: ShellSession, command: Command, result: CommandResult):
        source = self.navigator.resolve_entry(session.cwd, command.args[0])
        destination = self.navigator.resolve(session.cwd, command.args[1])
        try:
            entries = self.tree_operator.copy(source, destination)
        except FileNotFoundError:
            result.add(Responses.NOT_FOUND)
            return
        except RecursiveCopyError:
            result.add(Responses.COPY_INTO_ITSELF)
            return
        self._report_failures('copy', entries, result)

    def _report_failures(self, action: str, entries: List[EntryResult], result: CommandResult):
        for entry in entries:
            if entry.ok:
                continue
            shown = self.navigator.relative(entry.path)
            logger.log_tree_failure(action, entry.path, entry.error)
            result.add(create_failure_message(action, shown, entry.error))
