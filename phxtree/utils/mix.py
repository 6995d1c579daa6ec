"""
Utilities for reading mix.exs and running mix tasks.
"""

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import List, Optional

from phxtree.errors import CommandError, InvalidInputError

logger = logging.getLogger('phxtree')

APP_PATTERN = re.compile(r'^\s*app:\s*:([A-Za-z0-9_]+)', re.MULTILINE)


def read_project_name(project_dir: Path) -> str:
    """Read the OTP app name (`app: :name`) from mix.exs."""
    manifest = Path(project_dir) / 'mix.exs'
    if not manifest.exists():
        raise InvalidInputError(f"Could not find mix.exs in {project_dir}")

    match = APP_PATTERN.search(manifest.read_text())
    if not match:
        raise InvalidInputError("Could not extract project name from mix.exs")
    return match.group(1)


def run_mix(args: List[str], cwd: Path, mix_env: Optional[str] = None,
            program: str = 'mix') -> None:
    """Run a mix task in cwd, streaming its output.

    program lets callers run `iex -S mix ...` through the same path.
    """
    command = [program] + args
    env = None
    if mix_env:
        env = dict(os.environ, MIX_ENV=mix_env)
        logger.debug(f"MIX_ENV={mix_env} {' '.join(command)}")
    else:
        logger.debug(' '.join(command))

    try:
        result = subprocess.run(command, cwd=cwd, env=env)
    except FileNotFoundError:
        raise CommandError(f"{program} not found on PATH", command)
    if result.returncode != 0:
        raise CommandError(f"'{' '.join(command)}' exited with status {result.returncode}", command)
