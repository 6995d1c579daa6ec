"""
Command for printing the names and ports derived for a feature.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Union

from phxtree.core import PhxTreeError
from phxtree.resolver import derive_identity, derive_ports
from phxtree.utils.mix import read_project_name


def show_resolution(
    feature: str,
    port: Union[int, str, None] = None,
    project_dir: Optional[Path] = None,
    project_name: Optional[str] = None
) -> int:
    """Print the identity and ports for a feature without changing anything."""
    if project_name is None:
        project_name = read_project_name(project_dir or Path.cwd())

    identity = derive_identity(feature, project_name)
    ports = derive_ports(identity, port)

    print(f"Project:        {identity.project_name}")
    print(f"Feature:        {identity.raw_name} -> {identity.safe_name}")
    print(f"Branch:         {identity.branch_name}")
    print(f"Directory:      {identity.worktree_dir}")
    print(f"Dev database:   {identity.dev_db_name}")
    print(f"Test database:  {identity.test_db_name}")
    print(f"Container:      {identity.container_name}")
    print(f"Phoenix port:   {ports.app_port}")
    print(f"Database port:  {ports.db_port} (container isolation only)")
    return 0


def main(args: List[str]) -> int:
    """Main entry point for resolve command."""
    parser = argparse.ArgumentParser(
        prog='phxtree resolve',
        description='Show derived names and ports for a feature'
    )
    parser.add_argument('feature', help='Feature name')
    parser.add_argument('port', nargs='?', type=int, help='Explicit Phoenix port')
    parser.add_argument('--project', help='Project name (default: read from mix.exs)')

    parsed_args = parser.parse_args(args)

    try:
        return show_resolution(parsed_args.feature, parsed_args.port, project_name=parsed_args.project)
    except PhxTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
