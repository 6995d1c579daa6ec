"""
Tests for phxtree core functionality.
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

import git

from phxtree.core import (
    PhxTreeRepo,
    PhxTreeError,
    InvalidInputError,
    CollisionError,
    CommandError,
)


class TestPhxTreeRepo(unittest.TestCase):
    """Test PhxTreeRepo class."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

        # Create a real Git repository for testing
        git.Repo.init(self.temp_path)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_init_with_valid_repo(self):
        """Test initialization with valid repository."""
        repo = PhxTreeRepo(str(self.temp_path))
        self.assertEqual(repo.repo_path, self.temp_path)
        self.assertIsNotNone(repo.repo)

    def test_init_with_invalid_repo(self):
        """Test initialization with invalid repository."""
        non_git_dir = Path(tempfile.mkdtemp())
        with self.assertRaises(PhxTreeError):
            PhxTreeRepo(str(non_git_dir))

    def test_config_file_path(self):
        repo = PhxTreeRepo(str(self.temp_path))
        self.assertEqual(repo.config_file, self.temp_path / '.phxtree')

    def test_load_config_no_file(self):
        repo = PhxTreeRepo(str(self.temp_path))
        self.assertEqual(repo.load_config(), {'options': {}})

    def test_load_config_with_file(self):
        """Test loading config with existing file."""
        config_content = """
[options]
container_isolation = true
run_setup = false
postgres_image = "postgres:15"
"""
        (self.temp_path / '.phxtree').write_text(config_content)

        repo = PhxTreeRepo(str(self.temp_path))
        config = repo.load_config()

        self.assertEqual(config['options'], {
            'container_isolation': 'true',
            'run_setup': 'false',
            'postgres_image': 'postgres:15',
        })

    def test_load_config_invalid_toml(self):
        (self.temp_path / '.phxtree').write_text('[options\nbroken = ')
        repo = PhxTreeRepo(str(self.temp_path))
        with self.assertRaises(PhxTreeError):
            repo.load_config()

    def test_get_option_defaults(self):
        repo = PhxTreeRepo(str(self.temp_path))
        self.assertEqual(repo.get_option('postgres_image'), 'postgres:16')
        self.assertEqual(repo.get_option('postgres_user'), 'postgres')
        self.assertIsNone(repo.get_option('nonexistent'))
        self.assertEqual(repo.get_option('nonexistent', 'default'), 'default')

    def test_get_flag(self):
        repo = PhxTreeRepo(str(self.temp_path))
        self.assertFalse(repo.get_flag('container_isolation'))
        self.assertTrue(repo.get_flag('run_setup'))

        repo.set_option('container_isolation', True)
        self.assertTrue(repo.get_flag('container_isolation'))

    def test_set_option_round_trip(self):
        repo = PhxTreeRepo(str(self.temp_path))
        repo.set_option('run_setup', False)
        repo.set_option('postgres_image', 'postgres:15-alpine')
        repo.set_option('some_number', 3)

        config = repo.load_config()
        self.assertEqual(config['options']['run_setup'], 'false')
        self.assertEqual(config['options']['postgres_image'], 'postgres:15-alpine')
        self.assertEqual(config['options']['some_number'], 3)

    def test_set_option_quotes_and_backslashes(self):
        repo = PhxTreeRepo(str(self.temp_path))
        password = 'p"w\\x'
        repo.set_option('postgres_password', password)
        repo.set_option('postgres_image', 'postgres:16')

        config = repo.load_config()
        self.assertEqual(config['options']['postgres_password'], password)
        self.assertEqual(repo.get_option('postgres_password'), password)
        self.assertEqual(repo.get_option('postgres_image'), 'postgres:16')

    def test_set_option_control_characters(self):
        repo = PhxTreeRepo(str(self.temp_path))
        repo.set_option('postgres_password', 'line\nbreak\ttab')
        self.assertEqual(repo.get_option('postgres_password'), 'line\nbreak\ttab')

    def test_branch_exists_empty_repo(self):
        repo = PhxTreeRepo(str(self.temp_path))
        self.assertFalse(repo.branch_exists('feature/billing'))

    def test_branch_exists(self):
        repo = PhxTreeRepo(str(self.temp_path))
        head = Mock()
        head.name = 'feature/billing'
        repo.repo = Mock()
        repo.repo.heads = [head]

        self.assertTrue(repo.branch_exists('feature/billing'))
        self.assertFalse(repo.branch_exists('feature/other'))

    def test_delete_branch(self):
        repo = PhxTreeRepo(str(self.temp_path))
        repo.repo = Mock()
        repo.delete_branch('feature/billing')
        repo.repo.delete_head.assert_called_once_with('feature/billing', force=True)

    def test_delete_branch_failure(self):
        repo = PhxTreeRepo(str(self.temp_path))
        repo.repo = Mock()
        repo.repo.delete_head.side_effect = git.exc.GitCommandError('branch', 1, b'error: not found')
        with self.assertRaises(CommandError):
            repo.delete_branch('feature/billing')

    @patch('subprocess.run')
    def test_create_worktree_success(self, mock_run):
        """Test successful worktree creation."""
        mock_run.return_value.returncode = 0

        repo = PhxTreeRepo(str(self.temp_path))
        repo.create_worktree('../myapp_billing', 'feature/billing')

        mock_run.assert_called_once_with(
            ['git', 'worktree', 'add', '-b', 'feature/billing', '../myapp_billing'],
            cwd=self.temp_path,
            capture_output=True,
            text=True
        )

    @patch('subprocess.run')
    def test_create_worktree_with_base(self, mock_run):
        mock_run.return_value.returncode = 0

        repo = PhxTreeRepo(str(self.temp_path))
        repo.create_worktree('../myapp_billing', 'feature/billing', 'main')

        args = mock_run.call_args[0][0]
        self.assertEqual(args[-1], 'main')

    @patch('subprocess.run')
    def test_create_worktree_failure(self, mock_run):
        """Test failed worktree creation."""
        mock_run.return_value.returncode = 1
        mock_run.return_value.stderr = 'fatal: a branch named feature/billing already exists'

        repo = PhxTreeRepo(str(self.temp_path))

        with self.assertRaises(CommandError) as context:
            repo.create_worktree('../myapp_billing', 'feature/billing')

        self.assertIn('Failed to create worktree', str(context.exception))
        self.assertIn('already exists', context.exception.stderr)

    @patch('subprocess.run')
    def test_remove_worktree(self, mock_run):
        """Test worktree removal."""
        mock_run.return_value.returncode = 0

        repo = PhxTreeRepo(str(self.temp_path))
        repo.remove_worktree('../myapp_billing', force=True)

        mock_run.assert_called_once_with(
            ['git', 'worktree', 'remove', '--force', '../myapp_billing'],
            cwd=self.temp_path,
            capture_output=True,
            text=True
        )

    @patch('subprocess.run')
    def test_remove_worktree_failure(self, mock_run):
        mock_run.return_value.returncode = 128
        mock_run.return_value.stderr = 'fatal: not a working tree'

        repo = PhxTreeRepo(str(self.temp_path))
        with self.assertRaises(CommandError):
            repo.remove_worktree('../missing')

    def test_prune_worktrees(self):
        repo = PhxTreeRepo(str(self.temp_path))
        repo.repo = Mock()
        repo.prune_worktrees()
        repo.repo.git.worktree.assert_called_once_with('prune')

    def test_prune_worktrees_failure(self):
        repo = PhxTreeRepo(str(self.temp_path))
        repo.repo = Mock()
        repo.repo.git.worktree.side_effect = git.exc.GitCommandError(
            ['git', 'worktree', 'prune'], 128, b'fatal: unable to prune'
        )
        with self.assertRaises(CommandError) as context:
            repo.prune_worktrees()
        self.assertEqual(context.exception.command, ['git', 'worktree', 'prune'])


class TestErrors(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_exception_creation(self):
        error = PhxTreeError("Test error message")
        self.assertEqual(str(error), "Test error message")
        self.assertIsInstance(error, Exception)

    def test_subclasses(self):
        for cls in (InvalidInputError, CollisionError, CommandError):
            self.assertTrue(issubclass(cls, PhxTreeError))

    def test_core_reexports_errors(self):
        from phxtree import errors
        self.assertIs(PhxTreeError, errors.PhxTreeError)
        self.assertIs(InvalidInputError, errors.InvalidInputError)
        self.assertIs(CollisionError, errors.CollisionError)
        self.assertIs(CommandError, errors.CommandError)

    def test_command_error_details(self):
        error = CommandError('failed', ['git', 'status'], 'boom')
        self.assertEqual(error.command, ['git', 'status'])
        self.assertEqual(error.stderr, 'boom')


if __name__ == '__main__':
    unittest.main()
