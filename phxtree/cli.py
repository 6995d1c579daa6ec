"""
CLI interface for phxtree.
"""

import sys
import argparse
import logging
from typing import Optional, List

from . import __version__
from .core import PhxTreeRepo, PhxTreeError
from .commands.cleanup import cleanup_feature_worktree
from .commands.config import manage_config
from .commands.dev import run_dev_command
from .commands.new import create_feature_worktree
from .commands.resolve import show_resolution
from .commands.status import show_status

logger = logging.getLogger('phxtree')

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def setup_logging(level: str = 'WARNING') -> None:
    """Attach a stderr handler to the phxtree logger."""
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='phxtree',
        description='Run several features of a Phoenix app side by side in git worktrees'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--log-level',
        choices=LOG_LEVELS,
        default='WARNING',
        help='Set logging level (default: WARNING)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be done without actually doing it'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    new_parser = subparsers.add_parser('new', help='Create a feature worktree')
    new_parser.add_argument('feature', help='Feature name, e.g. user-management')
    new_parser.add_argument('port', nargs='?', type=int, help='Phoenix port (default: derived from the name)')
    new_parser.add_argument('--container', action='store_true', default=None,
                            help='Start a dedicated PostgreSQL container')
    new_parser.add_argument('--no-setup', dest='setup', action='store_false', default=None,
                            help='Skip mix deps/database setup')
    new_parser.add_argument('--base', help='Commit-ish to branch from')
    new_parser.add_argument('--dry-run', dest='command_dry_run', action='store_true',
                            help='Print the plan without creating anything')

    cleanup_parser = subparsers.add_parser('cleanup', help='Remove a feature worktree')
    cleanup_parser.add_argument('feature', help='Feature name used with `phxtree new`')
    cleanup_parser.add_argument('--yes', '-y', action='store_true', help='Do not ask for confirmation')
    cleanup_parser.add_argument('--dry-run', dest='command_dry_run', action='store_true',
                                help='Show what would be removed')

    dev_parser = subparsers.add_parser('dev', help='Run development tasks')
    dev_parser.add_argument('task', nargs='?', default='server', help='Task to run (default: server)')

    subparsers.add_parser('status', help='Show environment status')

    resolve_parser = subparsers.add_parser('resolve', help='Show derived names and ports')
    resolve_parser.add_argument('feature', help='Feature name')
    resolve_parser.add_argument('port', nargs='?', type=int, help='Explicit Phoenix port')
    resolve_parser.add_argument('--project', help='Project name (default: read from mix.exs)')

    config_parser = subparsers.add_parser('config', help='Manage configuration')
    config_parser.add_argument('--get', help='Get configuration value')
    config_parser.add_argument('--set', nargs=2, metavar=('KEY', 'VALUE'), help='Set configuration value')
    config_parser.add_argument('--list', action='store_true', help='List all configuration')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if args is None:
        args = sys.argv[1:]

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging('DEBUG' if parsed_args.verbose else parsed_args.log_level)

    if not parsed_args.command:
        parser.print_help()
        return 1

    try:
        return dispatch(parsed_args)
    except PhxTreeError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def dispatch(args) -> int:
    """Dispatch to the command handler."""
    # --dry-run is accepted before or after the subcommand
    dry_run = args.dry_run or getattr(args, 'command_dry_run', False)

    if args.command == 'dev':
        return run_dev_command(args.task, verbose=args.verbose)
    elif args.command == 'status':
        return show_status(verbose=args.verbose)
    elif args.command == 'resolve':
        return show_resolution(args.feature, args.port, project_name=args.project)

    repo = PhxTreeRepo()
    logger.debug(f"Repository: {repo.repo_path}")

    if args.command == 'new':
        return create_feature_worktree(
            repo,
            args.feature,
            args.port,
            args.container,
            args.setup,
            args.base,
            dry_run,
            args.verbose
        )
    elif args.command == 'cleanup':
        return cleanup_feature_worktree(repo, args.feature, args.yes, dry_run)
    elif args.command == 'config':
        return manage_config(repo, args.get, args.set, args.list, args.verbose)
    raise PhxTreeError(f"Unknown command '{args.command}'")


if __name__ == '__main__':
    sys.exit(main())
