"""
Branch name rules for repoupdate.

Release branches look like ``release-3`` or ``release-3.2``. Anything else
is an arbitrary branch or tag name; tag-like names start with a digit
(optionally behind a leading ``v``).
"""

import re
from typing import Optional, Tuple

RELEASE_BRANCH_RE = re.compile(r'^release-(\d+)')
MINOR_BRANCH_RE = re.compile(r'^release-(\d+)\.(\d+)')
TAG_LIKE_RE = re.compile(r'^v?\d')

REMOTE_PREFIX = "remotes/{remote}/"


def release_major(branch: str) -> Optional[str]:
    """Return the major number of a release branch, or None."""
    match = RELEASE_BRANCH_RE.match(branch)
    return match.group(1) if match else None


def parse_minor_branch(branch: str) -> Optional[Tuple[str, str]]:
    """Return (major, minor) for ``release-<major>.<minor>`` names, or None."""
    match = MINOR_BRANCH_RE.match(branch)
    if not match:
        return None
    return match.group(1), match.group(2)


def is_tag_like(name: str) -> bool:
    """True if git would treat ``name`` as a tag rather than a branch."""
    return bool(TAG_LIKE_RE.match(name))


def strip_remote_prefix(name: str, remote: str = "origin") -> str:
    """Drop the ``remotes/<remote>/`` prefix of a remote-tracking branch."""
    prefix = REMOTE_PREFIX.format(remote=remote)
    if name.startswith(prefix):
        return name[len(prefix):]
    return name
