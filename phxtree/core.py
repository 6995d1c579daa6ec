"""
Core phxtree functionality - Git repository wrapper and project config.
"""

import subprocess
import sys
from pathlib import Path
from typing import Dict, Optional, Any

import git
from git import Repo

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from phxtree.errors import PhxTreeError, InvalidInputError, CollisionError, CommandError

__all__ = [
    'DEFAULT_OPTIONS',
    'PhxTreeRepo',
    'PhxTreeError',
    'InvalidInputError',
    'CollisionError',
    'CommandError',
]


DEFAULT_OPTIONS: Dict[str, Any] = {
    'container_isolation': 'false',
    'postgres_image': 'postgres:16',
    'postgres_user': 'postgres',
    'postgres_password': 'postgres',
    'run_setup': 'true',
    'check_port': 'true',
}


def _toml_string(value: str) -> str:
    """Quote a value as a TOML basic string."""
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    escaped = escaped.replace('\n', '\\n').replace('\t', '\\t').replace('\r', '\\r')
    return f'"{escaped}"'


class PhxTreeRepo:
    """Wrapper around the Git repository of a Phoenix project."""

    def __init__(self, repo_path: Optional[str] = None):
        """Initialize with repository path (defaults to current directory)."""
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        try:
            self.repo = Repo(self.repo_path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise PhxTreeError(f"Not a Git repository: {self.repo_path}")

    @property
    def config_file(self) -> Path:
        """Path to .phxtree file."""
        return self.repo_path / '.phxtree'

    def load_config(self) -> Dict[str, Any]:
        """Load .phxtree file."""
        if not self.config_file.exists():
            return {'options': {}}

        with open(self.config_file, 'rb') as f:
            try:
                config = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise PhxTreeError(f"Invalid configuration in {self.config_file}: {e}")

        config.setdefault('options', {})
        # Booleans are kept as strings for consistency with --set
        for key, value in config['options'].items():
            if isinstance(value, bool):
                config['options'][key] = str(value).lower()
        return config

    def save_config(self, config: Dict[str, Any]) -> None:
        """Save configuration to .phxtree file."""
        with open(self.config_file, 'w') as f:
            f.write('# phxtree configuration\n\n')
            f.write('[options]\n')
            for key, value in config.get('options', {}).items():
                if isinstance(value, bool):
                    f.write(f'{key} = {str(value).lower()}\n')
                elif isinstance(value, str):
                    f.write(f'{key} = {_toml_string(value)}\n')
                else:
                    f.write(f'{key} = {value}\n')

    def get_option(self, key: str, default: Any = None) -> Any:
        """Get a configuration option value, falling back to built-in defaults."""
        options = self.load_config().get('options', {})
        if key in options:
            return options[key]
        if default is not None:
            return default
        return DEFAULT_OPTIONS.get(key)

    def get_flag(self, key: str) -> bool:
        """Get a boolean configuration option."""
        return str(self.get_option(key)).lower() in ('true', 'yes', '1')

    def set_option(self, key: str, value: Any) -> None:
        """Set a configuration option value."""
        config = self.load_config()
        config['options'][key] = value
        self.save_config(config)

    def branch_exists(self, branch_name: str) -> bool:
        """Check whether a local branch exists."""
        return any(head.name == branch_name for head in self.repo.heads)

    def delete_branch(self, branch_name: str) -> None:
        """Force-delete a local branch."""
        try:
            self.repo.delete_head(branch_name, force=True)
        except git.exc.GitCommandError as e:
            raise CommandError(f"Failed to delete branch {branch_name}: {e.stderr}",
                               ['git', 'branch', '-D', branch_name], str(e.stderr))

    def create_worktree(self, path: str, branch_name: str, base: Optional[str] = None) -> None:
        """Create a new worktree on a new branch."""
        args = ['git', 'worktree', 'add', '-b', branch_name, path]
        if base:
            args.append(base)

        result = subprocess.run(args, cwd=self.repo_path, capture_output=True, text=True)
        if result.returncode != 0:
            raise CommandError(f"Failed to create worktree: {result.stderr}", args, result.stderr)

    def remove_worktree(self, path: str, force: bool = False) -> None:
        """Remove a worktree."""
        args = ['git', 'worktree', 'remove']
        if force:
            args.append('--force')
        args.append(path)

        result = subprocess.run(args, cwd=self.repo_path, capture_output=True, text=True)
        if result.returncode != 0:
            raise CommandError(f"Failed to remove worktree: {result.stderr}", args, result.stderr)

    def prune_worktrees(self) -> None:
        """Clean up stale worktree administrative data."""
        try:
            self.repo.git.worktree('prune')
        except git.exc.GitCommandError as e:
            raise CommandError(f"Failed to prune worktrees: {e.stderr}",
                               ['git', 'worktree', 'prune'], str(e.stderr))
