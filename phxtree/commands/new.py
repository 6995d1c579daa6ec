"""
Command for creating an isolated feature worktree.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from phxtree.core import PhxTreeRepo, PhxTreeError, CollisionError
from phxtree.resolver import (
    FeatureIdentity,
    PortAssignment,
    OVERRIDE_CONFIG,
    TEST_OVERRIDE_CONFIG,
    derive_identity,
    derive_ports,
)
from phxtree.utils.docker import (
    docker_available,
    container_exists,
    run_postgres_container,
    wait_for_postgres,
)
from phxtree.utils.mix import read_project_name, run_mix
from phxtree.utils.ports import is_port_in_use
from phxtree.utils.templates import (
    render_dev_local,
    render_test_local,
    ensure_gitignored,
    ensure_import_config,
)

logger = logging.getLogger('phxtree')

DATABASE_SETUP_STEPS = [
    (['ecto.create'], None),
    (['ecto.create'], 'test'),
    (['ash.setup'], None),
    (['ash.setup'], 'test'),
]


def create_feature_worktree(
    repo: PhxTreeRepo,
    feature: str,
    port: Optional[int] = None,
    container: Optional[bool] = None,
    setup: Optional[bool] = None,
    base: Optional[str] = None,
    dry_run: bool = False,
    verbose: bool = False
) -> int:
    """Create branch, worktree, config overrides and databases for a feature."""
    if container is None:
        container = repo.get_flag('container_isolation')
    if setup is None:
        setup = repo.get_flag('run_setup')

    project_name = read_project_name(repo.repo_path)
    identity = derive_identity(feature, project_name)
    ports = derive_ports(identity, port)
    worktree_path = identity.worktree_path(repo.repo_path)

    _print_plan(identity, ports, container)
    if verbose:
        print(f"Worktree path: {worktree_path}")

    if dry_run:
        print("Dry run - no changes made")
        return 0

    _check_collisions(repo, identity, worktree_path, container)

    if repo.get_flag('check_port') and is_port_in_use(ports.app_port):
        logger.warning(f"Port {ports.app_port} is already in use; "
                       f"pass an explicit port to avoid the clash")

    print("📁 Creating worktree and branch...")
    repo.create_worktree(str(identity.worktree_dir), identity.branch_name, base)

    user = repo.get_option('postgres_user')
    password = repo.get_option('postgres_password')

    if container:
        print(f"🐳 Starting PostgreSQL container {identity.container_name}...")
        run_postgres_container(
            identity.container_name,
            ports.db_port,
            repo.get_option('postgres_image'),
            user,
            password
        )

    print("⚙️  Creating custom configuration...")
    write_local_configs(worktree_path, identity, ports, container, user, password)

    if setup:
        if container and not wait_for_postgres(identity.container_name, user):
            raise PhxTreeError(f"PostgreSQL in {identity.container_name} did not become ready")
        _run_setup(worktree_path)
    else:
        logger.info("Skipping mix setup steps")

    _print_next_steps(identity, ports)
    return 0


def write_local_configs(
    worktree_path: Path,
    identity: FeatureIdentity,
    ports: PortAssignment,
    container: bool = False,
    user: str = 'postgres',
    password: str = 'postgres'
) -> None:
    """Write the gitignored dev/test overrides and wire them into the config."""
    dev_local = worktree_path / OVERRIDE_CONFIG
    test_local = worktree_path / TEST_OVERRIDE_CONFIG
    dev_local.parent.mkdir(parents=True, exist_ok=True)

    dev_local.write_text(render_dev_local(identity, ports, container, user, password))
    test_local.write_text(render_test_local(identity, ports, container, user, password))

    for local_file in (OVERRIDE_CONFIG, TEST_OVERRIDE_CONFIG):
        if ensure_gitignored(worktree_path, local_file.as_posix()):
            logger.debug(f"Added {local_file.as_posix()} to .gitignore")

    for env in ('dev', 'test'):
        config_file = worktree_path / 'config' / f'{env}.exs'
        if ensure_import_config(config_file, f'{env}.local.exs'):
            logger.debug(f"Added import of {env}.local.exs to {config_file}")


def _check_collisions(repo: PhxTreeRepo, identity: FeatureIdentity,
                      worktree_path: Path, container: bool) -> None:
    if worktree_path.exists():
        raise CollisionError(f"Worktree directory {identity.worktree_dir} already exists")

    if repo.branch_exists(identity.branch_name):
        raise CollisionError(
            f"Branch {identity.branch_name} already exists locally\n"
            f"   Use: git branch -D {identity.branch_name} (to delete)\n"
            f"   Or:  git worktree add {identity.worktree_dir} {identity.branch_name} (to use existing)"
        )

    if container:
        if not docker_available():
            raise PhxTreeError("docker is required for container isolation but was not found")
        if container_exists(identity.container_name):
            raise CollisionError(f"Container {identity.container_name} already exists")


def _run_setup(worktree_path: Path) -> None:
    print("📦 Setting up project dependencies...")
    run_mix(['deps.get'], worktree_path)

    print("🔧 Setting up databases...")
    for args, mix_env in DATABASE_SETUP_STEPS:
        run_mix(args, worktree_path, mix_env)


def _print_plan(identity: FeatureIdentity, ports: PortAssignment, container: bool) -> None:
    print("🚀 Setting up new feature worktree:")
    print(f"  Project: {identity.project_name}")
    print(f"  Feature: {identity.raw_name}")
    print(f"  Branch: {identity.branch_name}")
    print(f"  Directory: {identity.worktree_dir}")
    print(f"  Dev Database: {identity.dev_db_name}")
    print(f"  Test Database: {identity.test_db_name}")
    print(f"  Phoenix port: {ports.app_port}")
    if container:
        print(f"  Container: {identity.container_name}")
        print(f"  Database port: {ports.db_port}")
    print()


def _print_next_steps(identity: FeatureIdentity, ports: PortAssignment) -> None:
    print()
    print("✅ Worktree setup complete!")
    print()
    print("🔥 To start working:")
    print(f"   cd {identity.worktree_dir}")
    print("   mix phx.server")
    print()
    print(f"🌐 Your app will be available at: http://localhost:{ports.app_port}")
    print()
    print("🧹 To clean up later:")
    print(f"   phxtree cleanup {identity.safe_name}")
    print()
    print("💡 Tips:")
    print("   - Use 'git worktree list' to see all active worktrees")
    print(f"   - Dev database: {identity.dev_db_name}")
    print(f"   - Test database: {identity.test_db_name}")


def main(args: List[str]) -> int:
    """Main entry point for new command."""
    parser = argparse.ArgumentParser(
        prog='phxtree new',
        description='Create a feature worktree with its own port and databases'
    )
    parser.add_argument('feature', help='Feature name, e.g. user-management')
    parser.add_argument('port', nargs='?', type=int, help='Phoenix port (default: derived from the name)')
    parser.add_argument('--container', action='store_true', default=None,
                        help='Start a dedicated PostgreSQL container')
    parser.add_argument('--no-setup', dest='setup', action='store_false', default=None,
                        help='Skip mix deps/database setup')
    parser.add_argument('--base', help='Commit-ish to branch from')
    parser.add_argument('--dry-run', action='store_true', help='Show what would be done')

    parsed_args = parser.parse_args(args)

    try:
        repo = PhxTreeRepo()
        return create_feature_worktree(
            repo,
            parsed_args.feature,
            parsed_args.port,
            parsed_args.container,
            parsed_args.setup,
            parsed_args.base,
            parsed_args.dry_run
        )
    except PhxTreeError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
