"""
Version resolution for repoupdate.

Derives the display version of the installed working copy and finds
minor-version release branches. Read only: nothing here mutates the
repository.
"""

import logging
from typing import List, Optional

from ..domain.branch import parse_minor_branch, release_major
from .repository_state import RepositoryState

logger = logging.getLogger(__name__)

# rev-parse --abbrev-ref prints this when HEAD is detached
DETACHED_HEAD = "HEAD"


class VersionService:
    """
    Resolve version strings and release branches from repository state.

    Example:
        service = VersionService(RepositoryState(GitClient(), "/opt/myapp"))
        print(service.resolve_version())  # "release-1.2-1.2.0-3-gabc1234"
    """

    def __init__(self, repo: RepositoryState):
        self.repo = repo

    def resolve_version(self) -> str:
        """
        Return ``<branch>-<description>`` on a named branch, else ``v<tag>``.

        A detached HEAD (or an unresolvable one) uses the latest tag.
        """
        branch = self.repo.current_branch()
        if branch not in (DETACHED_HEAD, ""):
            return f"{branch}-{self.repo.description()}"
        return f"v{self.repo.latest_tag()}"

    def current_release_major(self) -> Optional[str]:
        return release_major(self.repo.current_branch())

    def minor_branches(self, major: str) -> List[str]:
        """All ``release-<major>.<minor>`` branches, sorted lexicographically."""
        matches = []
        for branch in self.repo.all_branches():
            parsed = parse_minor_branch(branch)
            if parsed and parsed[0] == major:
                matches.append(branch)
        return sorted(matches)

    def find_latest_minor_branch(self, major: str) -> Optional[str]:
        """
        Pick the latest minor release branch for ``major``.

        Ordering is lexicographic, so ``release-1.3`` sorts after
        ``release-1.10``. This is only numerically right when minor numbers
        have the same width.
        """
        matches = self.minor_branches(major)
        if not matches:
            return None
        latest = matches[-1]
        logger.debug(f"Minor branches for release-{major}: {matches}, latest {latest}")
        return latest
