"""
Command for removing a feature worktree and everything created with it.
"""

import argparse
import sys
from typing import Callable, List

from phxtree.core import PhxTreeRepo, PhxTreeError
from phxtree.resolver import FeatureIdentity, derive_identity
from phxtree.utils.docker import docker_available, container_exists, remove_container
from phxtree.utils.mix import read_project_name


def cleanup_feature_worktree(
    repo: PhxTreeRepo,
    feature: str,
    assume_yes: bool = False,
    dry_run: bool = False,
    confirm: Callable[[str], str] = input
) -> int:
    """Remove container, worktree and branch of a feature.

    Pieces that no longer exist are reported and skipped.
    """
    project_name = read_project_name(repo.repo_path)
    identity = derive_identity(feature, project_name)
    worktree_path = identity.worktree_path(repo.repo_path)

    _print_targets(identity)

    if dry_run:
        print("Dry run - no changes made")
        return 0

    if not assume_yes:
        try:
            reply = confirm("Are you sure you want to delete everything? (y/N): ")
        except EOFError:
            # stdin closed: same as answering N
            print()
            reply = ''
        if reply.strip().lower() not in ('y', 'yes'):
            print("❌ Cleanup cancelled")
            return 1

    if docker_available() and container_exists(identity.container_name):
        print("🐳 Stopping and removing Docker container...")
        remove_container(identity.container_name)
    else:
        print(f"ℹ️  Docker container {identity.container_name} not found")

    if worktree_path.is_dir():
        print("📁 Removing worktree...")
        repo.remove_worktree(str(identity.worktree_dir), force=True)
    else:
        print(f"ℹ️  Worktree directory {identity.worktree_dir} not found")

    if repo.branch_exists(identity.branch_name):
        print("🌿 Deleting branch...")
        repo.delete_branch(identity.branch_name)
    else:
        print(f"ℹ️  Branch {identity.branch_name} not found")

    repo.prune_worktrees()

    print()
    print("✅ Cleanup complete!")
    print()
    print("💡 Tip: Use 'git worktree list' to see remaining worktrees")
    return 0


def _print_targets(identity: FeatureIdentity) -> None:
    print("🧹 Cleaning up feature worktree:")
    print(f"  Project: {identity.project_name}")
    print(f"  Feature: {identity.raw_name}")
    print(f"  Branch: {identity.branch_name}")
    print(f"  Directory: {identity.worktree_dir}")
    print(f"  Container: {identity.container_name}")
    print()


def main(args: List[str]) -> int:
    """Main entry point for cleanup command."""
    parser = argparse.ArgumentParser(
        prog='phxtree cleanup',
        description='Remove a feature worktree, its branch and its container'
    )
    parser.add_argument('feature', help='Feature name used with `phxtree new`')
    parser.add_argument('--yes', '-y', action='store_true', help='Do not ask for confirmation')
    parser.add_argument('--dry-run', action='store_true', help='Show what would be removed')

    parsed_args = parser.parse_args(args)

    try:
        repo = PhxTreeRepo()
        return cleanup_feature_worktree(repo, parsed_args.feature, parsed_args.yes, parsed_args.dry_run)
    except PhxTreeError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
