"""
Domain layer for repoupdate.

Contains pure objects and rules with no I/O:
- UpdateResult / OperationStatus: outcome of an update flow
- Branch name helpers: release-branch and tag-like name rules
"""

from .operation import OperationStatus, UpdateResult
from .branch import (
    release_major,
    parse_minor_branch,
    is_tag_like,
    strip_remote_prefix,
)

__all__ = [
    'OperationStatus',
    'UpdateResult',
    'release_major',
    'parse_minor_branch',
    'is_tag_like',
    'strip_remote_prefix',
]
