"""
Recursive tree operations for the shell.

Copy and delete walk a directory tree with an explicit stack instead of
recursion and report the outcome of every entry they touch, so one failing
entry never aborts the rest of the traversal.
"""

import errno
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from server.shell.navigator import Navigator


class RootProtectedError(PermissionError):
    """Raised when a delete targets the server root."""


class RecursiveCopyError(ValueError):
    """Raised when a copy destination lies inside its own source."""


@dataclass
class EntryResult:
    """Outcome of one filesystem entry during copy or delete."""
    path: Path
    ok: bool
    error: Optional[str] = None

    @classmethod
    def failed(cls, path: Path, exc: OSError) -> 'EntryResult':
        return cls(path=path, ok=False, error=exc.strerror or str(exc))


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def _sorted_children(path: Path) -> List[Path]:
    return sorted(path.iterdir(), key=lambda child: child.name)


class TreeOperator:
    """Whole-subtree copy and delete within a navigator's root."""

    def __init__(self, navigator: Navigator):
        self.navigator = navigator

    def delete(self, target: Path) -> List[EntryResult]:
        """Delete target and everything below it, children before parents."""
        if target.name == self.navigator.root_name or target == self.navigator.root:
            raise RootProtectedError(errno.EPERM, "Refusing to delete the root folder", str(target))
        if not target.exists() and not target.is_symlink():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(target))

        results = []
        # (path, children_pushed)
        stack = [(target, False)]
        while stack:
            path, expanded = stack.pop()
            if _is_real_dir(path):
                if not expanded:
                    try:
                        children = _sorted_children(path)
                    except OSError as e:
                        results.append(EntryResult.failed(path, e))
                        continue
                    stack.append((path, True))
                    stack.extend((child, False) for child in reversed(children))
                    continue
                remove = path.rmdir
            else:
                remove = path.unlink
            try:
                remove()
                results.append(EntryResult(path=path, ok=True))
            except OSError as e:
                results.append(EntryResult.failed(path, e))
        return results

    def copy(self, source: Path, destination: Path) -> List[EntryResult]:
        """Copy source into destination/<source name>, parents before children."""
        if not source.exists() and not source.is_symlink():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(source))
        target_root = destination / source.name
        if _is_real_dir(source) and (target_root == source or source in target_root.parents):
            raise RecursiveCopyError(f"{target_root} is inside {source}")

        results = []
        stack = [source]
        while stack:
            path = stack.pop()
            target = target_root / path.relative_to(source)
            if _is_real_dir(path):
                try:
                    target.mkdir()
                    results.append(EntryResult(path=target, ok=True))
                except OSError as e:
                    results.append(EntryResult.failed(target, e))
                try:
                    stack.extend(reversed(_sorted_children(path)))
                except OSError as e:
                    results.append(EntryResult.failed(path, e))
                continue
            try:
                if target.exists() or target.is_symlink():
                    raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(target))
                shutil.copyfile(path, target, follow_symlinks=False)
                results.append(EntryResult(path=target, ok=True))
            except OSError as e:
                results.append(EntryResult.failed(target, e))
        return results
