"""
Exceptions raised by phxtree.
"""

from typing import List, Optional


class PhxTreeError(Exception):
    """Base exception for phxtree operations."""
    pass


class InvalidInputError(PhxTreeError):
    """Feature name, project name or port cannot be used."""
    pass


class CollisionError(PhxTreeError):
    """A derived worktree, branch or container already exists."""
    pass


class CommandError(PhxTreeError):
    """An external tool exited with a non-zero status."""

    def __init__(self, message: str, command: Optional[List[str]] = None, stderr: str = ''):
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr
