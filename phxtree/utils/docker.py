"""
Utilities for per-feature PostgreSQL containers.
"""

import logging
import shutil
import subprocess
import time
from typing import List

from phxtree.errors import CommandError

logger = logging.getLogger('phxtree')


def docker_available() -> bool:
    """Check if the docker CLI is installed."""
    return shutil.which('docker') is not None


def _container_names(all_containers: bool) -> List[str]:
    args = ['docker', 'ps', '--format', '{{.Names}}']
    if all_containers:
        args.insert(2, '-a')
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except FileNotFoundError:
        return []
    if result.returncode != 0:
        logger.debug(f"docker ps failed: {result.stderr.strip()}")
        return []
    return [name for name in result.stdout.split('\n') if name]


def container_exists(name: str) -> bool:
    """Check whether a container with exactly this name exists (any state)."""
    return name in _container_names(all_containers=True)


def container_running(name: str) -> bool:
    """Check whether a container with exactly this name is running."""
    return name in _container_names(all_containers=False)


def run_postgres_container(name: str, host_port: int, image: str,
                           user: str = 'postgres', password: str = 'postgres') -> None:
    """Start a detached PostgreSQL container mapped to host_port."""
    args = [
        'docker', 'run', '-d',
        '--name', name,
        '-e', f'POSTGRES_USER={user}',
        '-e', f'POSTGRES_PASSWORD={password}',
        '-p', f'{host_port}:5432',
        image,
    ]
    result = subprocess.run(args, capture_output=True, text=True)
    if result.returncode != 0:
        raise CommandError(f"Failed to start container {name}: {result.stderr}", args, result.stderr)


def wait_for_postgres(name: str, user: str = 'postgres', max_attempts: int = 30) -> bool:
    """Wait until pg_isready succeeds inside the container."""
    for _ in range(max_attempts):
        result = subprocess.run(
            ['docker', 'exec', name, 'pg_isready', '-U', user],
            capture_output=True
        )
        if result.returncode == 0:
            return True
        time.sleep(1)
    return False


def remove_container(name: str) -> None:
    """Stop and remove a container."""
    args = ['docker', 'rm', '-f', name]
    result = subprocess.run(args, capture_output=True, text=True)
    if result.returncode != 0:
        raise CommandError(f"Failed to remove container {name}: {result.stderr}", args, result.stderr)
