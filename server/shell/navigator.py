"""
Virtual filesystem navigation.

Resolves the path tokens typed in the shell against a session's working
directory and keeps every resolved path inside the server root.
"""

from pathlib import Path, PurePath
from typing import Optional, Tuple

from common.constants import Responses
from common.protocol_definitions import display_path


class OutsideRootError(ValueError):
    """Raised when a path resolves above or beside the server root."""


class Navigator:
    """Path resolution and working-directory movement within one root."""

    def __init__(self, root_dir):
        root = Path(root_dir)
        root.mkdir(parents=True, exist_ok=True)
        self.root = root.resolve()
        self.root_name = self.root.name

    def contains(self, path: Path) -> bool:
        """Canonical prefix containment."""
        return path == self.root or self.root in path.parents

    def is_rooted(self, token: str) -> bool:
        """Tokens starting with a separator or the root's own name are rooted."""
        if token.startswith(('/', '\\')):
            return True
        parts = PurePath(token).parts
        return bool(parts) and parts[0] == self.root_name

    def _candidate(self, cwd: Path, token: str) -> Path:
        if self.is_rooted(token):
            parts = PurePath(token.lstrip('/\\')).parts
            if parts and parts[0] == self.root_name:
                parts = parts[1:]
            return self.root.joinpath(*parts)
        return cwd / token

    def resolve(self, cwd: Path, token: str) -> Path:
        """Resolve a user-supplied token to a canonical path inside the root.

        Raises OutsideRootError if the result escapes the root.
        """
        resolved = self._candidate(cwd, token).resolve()
        if not self.contains(resolved):
            raise OutsideRootError(f"{token} resolves outside {self.root}")
        return resolved

    def resolve_entry(self, cwd: Path, token: str) -> Path:
        """Like resolve, but a symlink in the last segment is returned as the link itself."""
        candidate = self._candidate(cwd, token)
        if candidate.name in ('', '..'):
            return self.resolve(cwd, token)
        resolved = candidate.parent.resolve() / candidate.name
        if not self.contains(resolved):
            raise OutsideRootError(f"{token} resolves outside {self.root}")
        return resolved

    def change_directory(self, cwd: Path, token: str) -> Tuple[Path, Optional[str]]:
        """Return the new working directory and an optional message.

        The working directory only moves to an existing directory; anything
        else leaves it unchanged without a message.
        """
        if token == '..':
            if cwd == self.root:
                return cwd, Responses.ALREADY_IN_ROOT
            return cwd.parent, None
        if token == '~':
            return self.root, None

        # strip a single trailing dot, never the one in '..'
        if token.endswith('.') and not token.endswith('..'):
            token = token[:-1]

        try:
            target = self.resolve(cwd, token)
        except OutsideRootError:
            return cwd, None
        if target.is_dir():
            return target, None
        return cwd, None

    def nearest_existing(self, path: Path) -> Path:
        """Walk up from path to the closest directory that still exists."""
        while path != self.root and not path.is_dir():
            if not self.contains(path.parent):
                return self.root
            path = path.parent
        return path

    def relative(self, path: Path) -> str:
        """Path relative to the root, '.' for the root itself."""
        return str(path.relative_to(self.root))

    def display(self, path: Path) -> str:
        """Working directory as shown in the prompt."""
        return display_path(self.root_name, self.relative(path))
