"""
Utilities for writing per-worktree Phoenix config overrides.
"""

from pathlib import Path
from typing import Optional, Set

from phxtree.resolver import FeatureIdentity, PortAssignment


def camelize(name: str) -> str:
    """Turn an OTP app name into its Elixir module prefix (my_app -> MyApp)."""
    return ''.join(part[:1].upper() + part[1:] for part in name.split('_'))


def _repo_settings(database: str, ports: Optional[PortAssignment],
                   username: str, password: str) -> str:
    lines = [f'  database: "{database}"']
    if ports is not None:
        lines += [
            '  hostname: "localhost"',
            f'  port: {ports.db_port}',
            f'  username: "{username}"',
            f'  password: "{password}"',
        ]
    return ',\n'.join(lines)


def render_dev_local(identity: FeatureIdentity, ports: PortAssignment,
                     container: bool = False, username: str = 'postgres',
                     password: str = 'postgres') -> str:
    """Render config/dev.local.exs.

    The endpoint block comes first so the first `port:` in the file is always
    the HTTP port; the database port, when present, is the last one.
    """
    app = identity.project_name
    module = camelize(app)
    repo_settings = _repo_settings(identity.dev_db_name, ports if container else None,
                                   username, password)
    return f"""import Config

# Custom configuration for worktree: {identity.safe_name}
# This file is gitignored and contains worktree-specific overrides

# Use custom port to avoid conflicts
config :{app}, {module}Web.Endpoint,
  http: [ip: {{127, 0, 0, 1}}, port: {ports.app_port}]

# Use custom database
config :{app}, {module}.Repo,
{repo_settings}

# Optional: Disable file watchers for better performance in worktrees
# config :{app}, {module}Web.Endpoint,
#   watchers: []
"""


def render_test_local(identity: FeatureIdentity, ports: PortAssignment,
                      container: bool = False, username: str = 'postgres',
                      password: str = 'postgres') -> str:
    """Render config/test.local.exs."""
    app = identity.project_name
    module = camelize(app)
    repo_settings = _repo_settings(identity.test_db_name, ports if container else None,
                                   username, password)
    return f"""import Config

# Custom test configuration for worktree: {identity.safe_name}
# This file is gitignored and contains worktree-specific test overrides

# Use custom test database
config :{app}, {module}.Repo,
{repo_settings}
"""


def _gitignore_entries(gitignore_path: Path) -> Set[str]:
    entries = set()
    if not gitignore_path.exists():
        return entries

    with open(gitignore_path, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            entries.add(line)
    return entries


def ensure_gitignored(worktree: Path, entry: str) -> bool:
    """Append entry to the worktree .gitignore. Returns True if it was added."""
    gitignore_path = Path(worktree) / '.gitignore'
    if entry in _gitignore_entries(gitignore_path):
        return False

    prefix = ''
    if gitignore_path.exists():
        content = gitignore_path.read_text()
        if content and not content.endswith('\n'):
            prefix = '\n'
    with open(gitignore_path, 'a') as f:
        f.write(f"{prefix}{entry}\n")
    return True


def ensure_import_config(config_file: Path, local_name: str) -> bool:
    """Make config/<env>.exs import its local override when it exists.

    Returns True if the import line was appended.
    """
    config_file = Path(config_file)
    if not config_file.exists():
        return False
    if local_name in config_file.read_text():
        return False

    env = local_name.split('.')[0]
    label = '' if env == 'dev' else f"{env} "

    with open(config_file, 'a') as f:
        f.write('\n')
        f.write(f"# Import worktree-specific {label}configuration if it exists\n")
        f.write(f'if File.exists?("config/{local_name}"), do: import_config("{local_name}")\n')
    return True
