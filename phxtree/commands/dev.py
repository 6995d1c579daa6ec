"""
Development server helper - runs common mix tasks in the current checkout.
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from phxtree.core import PhxTreeError
from phxtree.resolver import detect_environment
from phxtree.utils.mix import run_mix
from phxtree.commands.status import describe_environment, show_status

# name -> (aliases, banner, [(program, args), ...])
TASKS: Dict[str, Tuple[Tuple[str, ...], str, List[Tuple[str, List[str]]]]] = {
    'server': (('s',), "🚀 Starting Phoenix server...", [('mix', ['phx.server'])]),
    'iex': (('i',), "🚀 Starting Phoenix server with IEx...", [('iex', ['-S', 'mix', 'phx.server'])]),
    'test': (('t',), "🧪 Running tests...", [('mix', ['test'])]),
    'format': (('f',), "📝 Formatting code...", [('mix', ['format'])]),
    'setup': ((), "📦 Setting up project...", [('mix', ['setup'])]),
    'migrate': (('m',), "🗄️  Running migrations...", [
        ('mix', ['ash.migrate']),
        ('mix', ['ash.migrate', '--tenants']),
    ]),
}

HELP_LINES = [
    ("server, s", "Start Phoenix server (default)"),
    ("iex, i", "Start Phoenix server with IEx"),
    ("test, t", "Run tests"),
    ("format, f", "Format code"),
    ("setup", "Setup project (deps, db, assets)"),
    ("migrate, m", "Run database migrations"),
    ("status", "Show project status"),
    ("help, h", "Show this help"),
]


def resolve_task(command: str) -> Optional[str]:
    """Map a command or its alias to a task name."""
    if command in TASKS or command in ('status', 'help'):
        return command
    if command == 'h':
        return 'help'
    for name, (aliases, _, _) in TASKS.items():
        if command in aliases:
            return name
    return None


def print_help() -> None:
    print("Usage: phxtree dev [command]")
    print()
    print("Commands:")
    for names, desc in HELP_LINES:
        print(f"  {names:<12} {desc}")


def run_dev_command(command: str = 'server', cwd: Optional[Path] = None, verbose: bool = False) -> int:
    """Run a development task in cwd after reporting the detected environment."""
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    task = resolve_task(command)

    if task is None:
        print(f"❌ Unknown command: {command}")
        print("Use 'phxtree dev help' for available commands")
        return 1
    if task == 'help':
        print_help()
        return 0

    print(describe_environment(detect_environment(cwd)))

    if task == 'status':
        return show_status(cwd, verbose)

    _, banner, steps = TASKS[task]
    print(banner)
    for program, args in steps:
        run_mix(args, cwd, program=program)
    return 0


def main(args: List[str]) -> int:
    """Main entry point for dev command."""
    parser = argparse.ArgumentParser(
        prog='phxtree dev',
        description='Run development tasks in the current checkout'
    )
    parser.add_argument('command', nargs='?', default='server', help='Task to run (default: server)')

    parsed_args = parser.parse_args(args)

    try:
        return run_dev_command(parsed_args.command)
    except PhxTreeError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
