"""
Command for managing phxtree configuration.
"""

import argparse
import sys
from typing import List, Optional, Dict, Any

from phxtree.core import PhxTreeRepo, PhxTreeError, DEFAULT_OPTIONS


def manage_config(
    repo: PhxTreeRepo,
    get_key: Optional[str] = None,
    set_value: Optional[List[str]] = None,
    list_config: bool = False,
    verbose: bool = False
) -> int:
    """Manage configuration options."""
    if verbose:
        print(f"Using configuration file {repo.config_file}")

    config = repo.load_config()
    options = config.get('options', {})

    if get_key:
        if get_key in options:
            print(f"{get_key} = {options[get_key]}")
            return 0
        if get_key in DEFAULT_OPTIONS:
            print(f"{get_key} = {DEFAULT_OPTIONS[get_key]} (default)")
            return 0
        print(f"Configuration key '{get_key}' not found")
        return 1

    elif set_value:
        if len(set_value) != 2:
            print("Error: --set requires KEY and VALUE")
            return 1

        key, value = set_value
        if key not in DEFAULT_OPTIONS:
            print(f"Unknown configuration key '{key}'")
            print("Use 'phxtree config --list' for available keys")
            return 1

        converted_value = _convert_config_value(value)
        repo.set_option(key, converted_value)
        print(f"Set {key} = {converted_value}")
        return 0

    elif list_config:
        print("phxtree configuration:")
        print("-" * 40)

        if options:
            print("\n[options]")
            for key, value in options.items():
                print(f"{key} = {value}")
        else:
            print("  No configuration found")

        print("\nAvailable configuration keys:")
        for key, desc in _get_config_descriptions().items():
            current_value = options.get(key, DEFAULT_OPTIONS[key])
            print(f"  {key} ({desc}) = {current_value}")
        return 0

    print("phxtree configuration summary:")
    print("-" * 40)
    print(f"  Configuration options: {len(options)}")
    for key, value in options.items():
        print(f"  • {key} = {value}")
    return 0


def _convert_config_value(value: str) -> Any:
    """Convert a string value to the appropriate type."""
    if value.lower() in ['true', 'false', 'yes', 'no']:
        return value.lower() in ['true', 'yes']

    try:
        return int(value)
    except ValueError:
        pass

    return value


def _get_config_descriptions() -> Dict[str, str]:
    """Get descriptions for available configuration keys."""
    return {
        'container_isolation': 'Start a PostgreSQL container per feature (true/false)',
        'postgres_image': 'Docker image for feature databases',
        'postgres_user': 'Database user for feature containers',
        'postgres_password': 'Database password for feature containers',
        'run_setup': 'Run mix deps and database setup after creating a worktree (true/false)',
        'check_port': 'Warn when the derived port is already in use (true/false)',
    }


def main(args: List[str]) -> int:
    """Main entry point for config command."""
    parser = argparse.ArgumentParser(
        prog='phxtree config',
        description='Manage configuration'
    )
    parser.add_argument('--get', help='Get configuration value')
    parser.add_argument('--set', nargs=2, metavar=('KEY', 'VALUE'), help='Set configuration value')
    parser.add_argument('--list', action='store_true', help='List all configuration')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show detailed output')

    parsed_args = parser.parse_args(args)

    try:
        repo = PhxTreeRepo()
        return manage_config(
            repo,
            parsed_args.get,
            parsed_args.set,
            parsed_args.list,
            parsed_args.verbose
        )
    except PhxTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
