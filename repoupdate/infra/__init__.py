"""
Infrastructure layer for repoupdate.

Contains abstractions for external systems:
- GitClient: git command execution
- CommandResult: exit status plus captured output lines

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, CommandResult, UNAVAILABLE

__all__ = [
    'GitClient',
    'CommandResult',
    'UNAVAILABLE',
]
