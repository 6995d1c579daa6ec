"""
phxtree - A Python CLI tool for parallel Phoenix feature development.

phxtree gives every feature its own git worktree, branch, HTTP port and
databases so several features of one application can run side by side.
"""

__version__ = "0.1.0"
__author__ = "phxtree"
