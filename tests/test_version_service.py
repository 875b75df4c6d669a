"""
Tests for VersionService: version strings and minor release branches.
"""

from unittest.mock import MagicMock

import pytest

from repoupdate.services.repository_state import RepositoryState
from repoupdate.services.version_service import VersionService


@pytest.fixture
def repo():
    """A RepositoryState double with neutral answers."""
    repo = MagicMock(spec=RepositoryState)
    repo.current_branch.return_value = "main"
    repo.description.return_value = "1.2.0-3-gabc1234"
    repo.latest_tag.return_value = "1.2.0"
    repo.all_branches.return_value = []
    return repo


class TestResolveVersion:
    """Tests for the display version string."""

    def test_named_branch(self, repo):
        assert VersionService(repo).resolve_version() == "main-1.2.0-3-gabc1234"
        repo.latest_tag.assert_not_called()

    def test_empty_branch_uses_tag(self, repo):
        repo.current_branch.return_value = ""
        assert VersionService(repo).resolve_version() == "v1.2.0"
        repo.description.assert_not_called()

    def test_detached_head_uses_tag(self, repo):
        repo.current_branch.return_value = "HEAD"
        assert VersionService(repo).resolve_version() == "v1.2.0"

    def test_no_tag(self, repo):
        repo.current_branch.return_value = "HEAD"
        repo.latest_tag.return_value = ""
        assert VersionService(repo).resolve_version() == "v"


class TestMinorBranches:
    """Tests for minor release branch discovery."""

    def test_current_release_major(self, repo):
        repo.current_branch.return_value = "release-2.4"
        assert VersionService(repo).current_release_major() == "2"

    def test_current_release_major_plain(self, repo):
        repo.current_branch.return_value = "release-12"
        assert VersionService(repo).current_release_major() == "12"

    def test_not_a_release_branch(self, repo):
        repo.current_branch.return_value = "master"
        assert VersionService(repo).current_release_major() is None

    def test_lexicographic_selection(self, repo):
        repo.all_branches.return_value = ["release-1.2", "release-1.10", "release-1.3"]
        # lexicographic order puts release-1.3 after release-1.10
        assert VersionService(repo).find_latest_minor_branch("1") == "release-1.3"

    def test_filters_other_majors(self, repo):
        repo.all_branches.return_value = [
            "release-1.4", "release-2.0", "release-10.9", "release-1", "main"
        ]
        service = VersionService(repo)

        assert service.minor_branches("1") == ["release-1.4"]
        assert service.find_latest_minor_branch("2") == "release-2.0"
        assert service.find_latest_minor_branch("10") == "release-10.9"

    def test_none_found(self, repo):
        repo.all_branches.return_value = ["main", "release-1", "release-2.1"]
        assert VersionService(repo).find_latest_minor_branch("1") is None

    def test_local_and_remote_copies(self, repo):
        repo.all_branches.return_value = ["release-1.1", "release-1.2", "release-1.1"]
        assert VersionService(repo).find_latest_minor_branch("1") == "release-1.2"
