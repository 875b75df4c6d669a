"""
Tests for UpdateService flows.

The git client is scripted; the working copy is a pytest tmp_path so the
write-permission check sees a real directory.
"""

from unittest.mock import patch

import pytest

from repoupdate.config import UpdateConfig
from repoupdate.domain.operation import OperationStatus
from repoupdate.infra.git_client import CommandResult
from repoupdate.services.update_service import UpdateService


MUTATING = {"fetch", "merge", "switch", "remote"}


def ok(*lines):
    return CommandResult(returncode=0, stdout=list(lines))


def fail(code=1):
    return CommandResult(returncode=code, stderr=["fatal: something went wrong"])


FULL_CLONE = {"rev-parse --is-shallow-repository": ok("false")}


@pytest.fixture
def config(tmp_path):
    return UpdateConfig(base_dir=str(tmp_path))


def service_with(config, git):
    return UpdateService(config=config, git_client=git)


class TestUpdateToLatest:
    """Tests for the update-current-branch flow."""

    def test_up_to_date_does_not_merge(self, config, make_git, calls):
        git = make_git({**FULL_CLONE, "diff --quiet @{upstream}": CommandResult(0)})

        result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.UP_TO_DATE
        assert result.success is True
        assert ["merge", "--ff-only", "--progress"] not in calls(git)

    def test_fast_forwards(self, config, make_git, calls):
        git = make_git({
            **FULL_CLONE,
            "diff --quiet @{upstream}": CommandResult(1),
            "rev-parse --abbrev-ref HEAD": ok("main"),
        })

        result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.SUCCESS
        assert result.action == "merged"
        assert result.branch == "main"
        assert ["merge", "--ff-only", "--progress"] in calls(git)

    def test_merge_failure(self, config, make_git, caplog):
        git = make_git({
            **FULL_CLONE,
            "diff --quiet @{upstream}": CommandResult(1),
            "merge --ff-only --progress": fail(128),
        })

        result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.FAILED
        assert result.action == "merge_failed"
        assert "manually" in result.error
        assert config.base_dir in caplog.text

    def test_fetch_failure_stops_flow(self, config, make_git, calls):
        git = make_git({**FULL_CLONE, "fetch --all": fail(128)})

        result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.FAILED
        assert result.action == "fetch_failed"
        assert calls(git)[-1] == ["fetch", "--all"]

    def test_diff_error(self, config, make_git, calls):
        git = make_git({**FULL_CLONE, "diff --quiet @{upstream}": fail(128)})

        result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.FAILED
        assert result.action == "diff_failed"
        assert ["merge", "--ff-only", "--progress"] not in calls(git)

    def test_not_writable(self, config, make_git, caplog):
        git = make_git()

        with patch('repoupdate.services.update_service.os.access', return_value=False):
            result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.SKIPPED
        assert result.action == "not_writable"
        git.run.assert_not_called()
        assert "cannot write to" in caplog.text

    def test_unavailable_git(self, config, make_git):
        git = make_git(default=CommandResult(1, [""], []))

        result = service_with(config, git).update_to_latest()

        assert result.status == OperationStatus.FAILED
        assert result.success is False


class TestUpdateToLatestMinor:
    """Tests for the minor release branch flow."""

    def test_switches_to_latest_minor(self, config, make_git, calls):
        git = make_git({
            **FULL_CLONE,
            "rev-parse --abbrev-ref HEAD": ok("release-1"),
            "branch --all": ok(
                "* release-1",
                "  remotes/origin/release-1.1",
                "  remotes/origin/release-1.2",
                "  remotes/origin/release-2.0",
            ),
        })

        result = service_with(config, git).update_to_latest_minor()

        assert result.status == OperationStatus.SUCCESS
        assert result.branch == "release-1.2"
        assert calls(git)[-1] == ["switch", "release-1.2"]

    def test_custom_remote(self, tmp_path, make_git, calls):
        config = UpdateConfig(base_dir=str(tmp_path), remote="upstream")
        git = make_git({
            **FULL_CLONE,
            "rev-parse --abbrev-ref HEAD": ok("release-1"),
            "branch --all": ok("* release-1", "  remotes/upstream/release-1.2"),
        })

        result = service_with(config, git).update_to_latest_minor()

        assert result.status == OperationStatus.SUCCESS
        assert calls(git)[-1] == ["switch", "release-1.2"]

    def test_lexicographic_last(self, config, make_git, calls):
        git = make_git({
            **FULL_CLONE,
            "rev-parse --abbrev-ref HEAD": ok("release-1.2"),
            "branch --all": ok("release-1.2", "release-1.10", "release-1.3"),
        })

        result = service_with(config, git).update_to_latest_minor()

        assert result.branch == "release-1.3"

    def test_not_on_release_branch(self, config, make_git, calls):
        git = make_git({**FULL_CLONE, "rev-parse --abbrev-ref HEAD": ok("master")})

        result = service_with(config, git).update_to_latest_minor()

        assert result.status == OperationStatus.SKIPPED
        assert result.action == "not_release_branch"
        assert not any(c[0] == "switch" for c in calls(git))

    def test_no_minor_branch(self, config, make_git, calls):
        git = make_git({
            **FULL_CLONE,
            "rev-parse --abbrev-ref HEAD": ok("release-3"),
            "branch --all": ok("* release-3", "  remotes/origin/release-2.9"),
        })

        result = service_with(config, git).update_to_latest_minor()

        assert result.status == OperationStatus.SKIPPED
        assert result.action == "no_minor_version"
        assert not any(c[0] == "switch" for c in calls(git))

    def test_fetch_failure(self, config, make_git, calls):
        git = make_git({"rev-parse --is-shallow-repository": ok("true"), "fetch --unshallow": fail()})

        result = service_with(config, git).update_to_latest_minor()

        assert result.status == OperationStatus.FAILED
        assert not any(c[0] == "switch" for c in calls(git))

    def test_switch_failure(self, config, make_git):
        git = make_git({
            **FULL_CLONE,
            "rev-parse --abbrev-ref HEAD": ok("release-1"),
            "branch --all": ok("release-1.1"),
            "switch release-1.1": fail(),
        })

        result = service_with(config, git).update_to_latest_minor()

        assert result.status == OperationStatus.FAILED
        assert result.action == "switch_failed"


class TestSwitchBranch:
    """Tests for switching to an explicit branch or tag."""

    def test_switch(self, config, make_git, calls):
        git = make_git(FULL_CLONE)

        result = service_with(config, git).switch_branch("feature-x")

        assert result.status == OperationStatus.SUCCESS
        assert calls(git)[-1] == ["switch", "feature-x"]

    def test_switch_tag(self, config, make_git, calls):
        git = make_git(FULL_CLONE)

        service_with(config, git).switch_branch("v2.0")

        assert calls(git)[-1] == ["switch", "v2.0", "--detach"]

    def test_deepens_first(self, config, make_git, calls):
        git = make_git({"rev-parse --is-shallow-repository": ok("true")})

        service_with(config, git).switch_branch("1.0.0")

        assert calls(git) == [
            ["rev-parse", "--is-shallow-repository"],
            ["fetch", "--unshallow"],
            ["remote", "set-branches", "origin", "*"],
            ["switch", "1.0.0", "--detach"],
        ]

    def test_fetch_failure_skips_switch(self, config, make_git, calls):
        git = make_git({**FULL_CLONE, "fetch --all": fail()})

        result = service_with(config, git).switch_branch("feature-x")

        assert result.status == OperationStatus.FAILED
        assert not any(c[0] == "switch" for c in calls(git))

    def test_switch_failure(self, config, make_git, caplog):
        git = make_git({**FULL_CLONE, "switch nope": fail(128)})

        result = service_with(config, git).switch_branch("nope")

        assert result.status == OperationStatus.FAILED
        assert "Unable to switch branches" in caplog.text


class TestCheckForUpdates:
    """Tests for the check-only flow."""

    def test_updates_available(self, config, make_git, calls):
        git = make_git({
            **FULL_CLONE,
            "diff --quiet @{upstream}": CommandResult(1),
            "rev-parse --abbrev-ref @{upstream}": ok("origin/main"),
        })

        result = service_with(config, git).check_for_updates()

        assert result.status == OperationStatus.SUCCESS
        assert result.action == "updates_available"
        assert result.to_dict()['upstream'] == "origin/main"
        assert not any(c[0] == "merge" for c in calls(git))

    def test_up_to_date(self, config, make_git):
        git = make_git({**FULL_CLONE, "diff --quiet @{upstream}": CommandResult(0)})

        result = service_with(config, git).check_for_updates()

        assert result.status == OperationStatus.UP_TO_DATE


class TestFailureIsFinal:
    """A failing mutating step is never followed by another one."""

    @pytest.mark.parametrize("failing", ["fetch --all", "merge --ff-only --progress"])
    def test_update(self, config, make_git, calls, failing):
        git = make_git({
            **FULL_CLONE,
            "diff --quiet @{upstream}": CommandResult(1),
            failing: fail(),
        })

        service_with(config, git).update_to_latest()

        issued = calls(git)
        failed_at = issued.index(failing.split())
        assert not any(c[0] in MUTATING for c in issued[failed_at + 1:])


class TestVersion:

    def test_version(self, config, make_git):
        git = make_git({
            "rev-parse --abbrev-ref HEAD": ok("main"),
            "describe --dirty --always": ok("abc1234"),
        })

        assert service_with(config, git).version() == "main-abc1234"
