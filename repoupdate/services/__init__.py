"""
Service layer for repoupdate.

Contains the logic that orchestrates domain rules and infrastructure:
- RepositoryState: git queries and mutations on one working copy
- VersionService: version strings and minor release branches
- UpdateService: the update, minor-update, switch and check flows

Services are the primary API for commands to use.
"""

from .repository_state import RepositoryState, GitCommandError
from .version_service import VersionService
from .update_service import UpdateService

__all__ = [
    'RepositoryState',
    'GitCommandError',
    'VersionService',
    'UpdateService',
]
