"""
Command for showing the environment of the current checkout.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from phxtree.errors import InvalidInputError
from phxtree.resolver import (
    OVERRIDE_CONFIG,
    Environment,
    detect_environment,
    find_database,
    find_port,
)
from phxtree.utils.docker import docker_available, container_running
from phxtree.utils.mix import read_project_name

logger = logging.getLogger('phxtree')


def describe_environment(env: Environment) -> str:
    """One-line banner for the detected environment."""
    if env.is_worktree:
        return f"🔧 Detected worktree environment (port: {env.port_label})"
    return f"🏠 Using main development environment (port: {env.port_label})"


def show_status(cwd: Optional[Path] = None, verbose: bool = False) -> int:
    """Show project, port, database and container for the current checkout."""
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    env = detect_environment(cwd)

    try:
        project_name = read_project_name(cwd)
    except InvalidInputError as e:
        logger.warning(str(e))
        project_name = 'unknown'

    print("📊 Project status:")
    print(f"  Project: {project_name}")
    print(f"  Port: {env.port_label}")
    print(f"  Environment: {env.kind.value}")

    if env.is_worktree:
        _show_worktree_details(cwd / OVERRIDE_CONFIG, verbose)

    print(f"  URL: http://localhost:{env.port_label}")
    return 0


def _show_worktree_details(override: Path, verbose: bool) -> None:
    try:
        text = override.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {override}: {e}")
        text = ''

    db_port = find_port(text, last=True)
    print(f"  Database port: {db_port if db_port is not None else 'unknown'}")

    database = find_database(text)
    if database is None:
        print("  Container: unknown")
        return

    if database.endswith('_dev'):
        database = database[:-len('_dev')]
    container = f"postgres_{database}"
    print(f"  Container: {container}")

    if docker_available():
        if container_running(container):
            print("  Container status: running ✅")
        else:
            print("  Container status: stopped ❌")
    elif verbose:
        print("  Container status: docker not installed")


def main(args: List[str]) -> int:
    """Main entry point for status command."""
    parser = argparse.ArgumentParser(
        prog='phxtree status',
        description='Show the environment of the current checkout'
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Verbose format'
    )

    parsed_args = parser.parse_args(args)
    return show_status(verbose=parsed_args.verbose)


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
