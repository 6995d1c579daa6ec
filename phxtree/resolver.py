"""
Environment resolver - derives feature names and ports, detects the environment.

Everything here is a pure function of its inputs except detect_environment,
which reads the override config file through a ConfigSource.
"""

import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from phxtree.errors import InvalidInputError

MAIN_PORT = 4000
PORT_BASE = 4100
PORT_SPAN = 900
DB_PORT_OFFSET = 1000

OVERRIDE_CONFIG = Path('config') / 'dev.local.exs'
TEST_OVERRIDE_CONFIG = Path('config') / 'test.local.exs'

PORT_PATTERN = re.compile(r'port:\s*(\d+)')
DATABASE_PATTERN = re.compile(r'database:\s*"([^"]*)"')


@dataclass(frozen=True)
class FeatureIdentity:
    """Names derived from a feature name and the project name."""
    raw_name: str
    safe_name: str
    project_name: str
    branch_name: str
    worktree_dir: Path
    dev_db_name: str
    test_db_name: str
    container_name: str

    def worktree_path(self, repo_root: Path) -> Path:
        """Absolute worktree location for a checkout rooted at repo_root."""
        return (Path(repo_root) / self.worktree_dir).resolve()


@dataclass(frozen=True)
class PortAssignment:
    """HTTP port of the app and host port of its database container."""
    app_port: int
    db_port: int


class EnvironmentKind(Enum):
    MAIN = 'main'
    WORKTREE = 'worktree'


@dataclass(frozen=True)
class Environment:
    """Detected environment of a working directory.

    app_port is None when a worktree override file has no port in it yet.
    """
    kind: EnvironmentKind
    app_port: Optional[int]

    @property
    def is_worktree(self) -> bool:
        return self.kind is EnvironmentKind.WORKTREE

    @property
    def port_label(self) -> str:
        return str(self.app_port) if self.app_port is not None else 'unknown'


class ConfigSource:
    """Read access to override config files."""

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def read_port(self, path: Path) -> Optional[int]:
        raise NotImplementedError


class LocalConfigSource(ConfigSource):
    """ConfigSource backed by the local filesystem."""

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def read_port(self, path: Path) -> Optional[int]:
        try:
            text = Path(path).read_text()
        except (OSError, UnicodeDecodeError):
            return None
        return find_port(text)


def find_port(text: str, last: bool = False) -> Optional[int]:
    """Return the first (or last) `port: <int>` value in text, or None."""
    matches = PORT_PATTERN.findall(text)
    if not matches:
        return None
    return int(matches[-1] if last else matches[0])


def find_database(text: str) -> Optional[str]:
    """Return the first `database: "<name>"` value in text, or None."""
    match = DATABASE_PATTERN.search(text)
    return match.group(1) if match else None


def normalize(name: str) -> str:
    """Lowercase a feature name and turn hyphens into underscores.

    Names that differ only by separator style map to the same value,
    e.g. "user-management" and "user_management".
    """
    return name.lower().replace('-', '_')


def derive_identity(raw_name: str, project_name: str) -> FeatureIdentity:
    """Derive branch, directory, database and container names for a feature."""
    if not raw_name or not raw_name.strip():
        raise InvalidInputError("Feature name must not be empty")
    if not project_name:
        raise InvalidInputError("Project name must not be empty")

    safe_name = normalize(raw_name)
    prefix = f"{project_name}_{safe_name}"
    return FeatureIdentity(
        raw_name=raw_name,
        safe_name=safe_name,
        project_name=project_name,
        branch_name=f"feature/{safe_name}",
        worktree_dir=Path('..') / prefix,
        dev_db_name=f"{prefix}_dev",
        test_db_name=f"{prefix}_test",
        container_name=f"postgres_{prefix}",
    )


def derive_port(safe_name: str, explicit_port: Union[int, str, None] = None) -> int:
    """Return the explicit port, or a stable port in [4100, 4999] for safe_name.

    The auto port is the first three hex digits of SHA-1(safe_name + newline)
    modulo 900 plus 4100. Changing the hash moves every existing feature to a
    different port. Collisions between features are not detected here.
    """
    if explicit_port is not None and explicit_port != '':
        try:
            return int(explicit_port)
        except (TypeError, ValueError):
            raise InvalidInputError(f"Invalid port: {explicit_port!r}")

    digest = hashlib.sha1(f"{safe_name}\n".encode('utf-8')).hexdigest()
    return int(digest[:3], 16) % PORT_SPAN + PORT_BASE


def derive_db_port(app_port: int) -> int:
    return app_port + DB_PORT_OFFSET


def derive_ports(identity: FeatureIdentity,
                 explicit_port: Union[int, str, None] = None) -> PortAssignment:
    app_port = derive_port(identity.safe_name, explicit_port)
    return PortAssignment(app_port=app_port, db_port=derive_db_port(app_port))


def detect_environment(cwd: Optional[Path] = None,
                       source: Optional[ConfigSource] = None) -> Environment:
    """Tell whether cwd is the main checkout or a feature worktree.

    Never raises for a missing or malformed override file.
    """
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    source = source or LocalConfigSource()
    override = cwd / OVERRIDE_CONFIG

    if not source.exists(override):
        return Environment(EnvironmentKind.MAIN, MAIN_PORT)
    return Environment(EnvironmentKind.WORKTREE, source.read_port(override))
