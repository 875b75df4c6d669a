"""
Update orchestration for repoupdate.

Runs the self-update flows against one working copy: update the current
branch, move to the latest minor release branch, switch to an explicit
branch, or just check whether upstream has moved. Every step
short-circuits on failure and nothing is retried or rolled back.
"""

import logging
import os
from typing import Optional

from ..config import load_config, UpdateConfig
from ..infra.git_client import GitClient
from ..domain.operation import OperationStatus, UpdateResult
from .repository_state import RepositoryState, GitCommandError
from .version_service import VersionService

logger = logging.getLogger(__name__)


class UpdateService:
    """
    Service for updating an installed working copy from git.

    Example:
        service = UpdateService(UpdateConfig(base_dir="/opt/myapp"))
        result = service.update_to_latest()
        if not result.success:
            print(result.error)
    """

    def __init__(
        self,
        config: Optional[UpdateConfig] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize UpdateService.

        Args:
            config: Update settings (loads default config if None)
            git_client: GitClient instance (creates one from config if None)
        """
        self.config = config or UpdateConfig.from_config(load_config())
        self.git = git_client or GitClient(
            base_dir=self.config.base_dir,
            executable=self.config.git_executable,
            timeout=self.config.timeout,
        )
        self.repo = RepositoryState(self.git, self.config.base_dir, remote=self.config.remote)
        self.versions = VersionService(self.repo)

    @property
    def base_dir(self) -> str:
        return self.config.base_dir

    def _result(self, operation: str, status: OperationStatus, action: str, **kwargs) -> UpdateResult:
        return UpdateResult(
            operation=operation,
            repo_path=self.base_dir,
            status=status,
            action=action,
            **kwargs
        )

    def _check_writable(self, operation: str) -> Optional[UpdateResult]:
        """Return a SKIPPED result when the working copy is not writable."""
        if os.access(self.base_dir, os.W_OK):
            return None
        message = f"Update aborted! cannot write to {self.base_dir}"
        logger.warning(message)
        return self._result(operation, OperationStatus.SKIPPED, "not_writable", error=message)

    def _deepen(self, operation: str) -> Optional[UpdateResult]:
        """Return a FAILED result when the remote history cannot be fetched."""
        if self.repo.deepen():
            return None
        return self._result(
            operation, OperationStatus.FAILED, "fetch_failed",
            error=f"Unable to fetch remote history in {self.base_dir}"
        )

    def update_to_latest(self) -> UpdateResult:
        """Fast-forward the current branch to its upstream."""
        operation = "update"
        logger.info("Checking for updates")

        aborted = self._check_writable(operation) or self._deepen(operation)
        if aborted:
            return aborted

        try:
            changed = self.repo.has_upstream_changes()
        except GitCommandError as e:
            logger.error(str(e))
            return self._result(operation, OperationStatus.FAILED, "diff_failed", error=str(e))

        if not changed:
            logger.info("Already up-to-date")
            return self._result(
                operation, OperationStatus.UP_TO_DATE, "none",
                message="Already up-to-date"
            )

        if not self.repo.fast_forward_merge():
            message = f"Update failed! Please pull the changes manually in {self.base_dir}"
            logger.error(message)
            return self._result(operation, OperationStatus.FAILED, "merge_failed", error=message)

        logger.info("Update complete")
        return self._result(
            operation, OperationStatus.SUCCESS, "merged",
            message="Update complete",
            branch=self.repo.current_branch() or None
        )

    def update_to_latest_minor(self) -> UpdateResult:
        """Switch from a release branch to its newest minor release branch."""
        operation = "update_minor"
        logger.info("Checking for minor version updates")

        aborted = self._check_writable(operation) or self._deepen(operation)
        if aborted:
            return aborted

        current = self.repo.current_branch()
        major = self.versions.current_release_major()
        if major is None:
            message = "You are not on a release branch, switching to a minor version is not possible"
            logger.warning(message)
            return self._result(
                operation, OperationStatus.SKIPPED, "not_release_branch",
                error=message, branch=current or None
            )

        latest = self.versions.find_latest_minor_branch(major)
        if latest is None:
            message = "No minor version found for current release"
            logger.warning(message)
            return self._result(
                operation, OperationStatus.SKIPPED, "no_minor_version",
                error=message, branch=current
            )

        return self._switch(operation, latest)

    def switch_branch(self, branch: str) -> UpdateResult:
        """Switch the working copy to ``branch`` (or tag)."""
        operation = "switch"

        aborted = self._check_writable(operation) or self._deepen(operation)
        if aborted:
            return aborted

        return self._switch(operation, branch)

    def _switch(self, operation: str, branch: str) -> UpdateResult:
        logger.info(f"Switching to {branch}")
        if not self.repo.switch_branch(branch):
            message = "Unable to switch branches! Check the log for further information"
            logger.error(message)
            return self._result(
                operation, OperationStatus.FAILED, "switch_failed",
                error=message, branch=branch
            )
        return self._result(
            operation, OperationStatus.SUCCESS, "switched",
            message=f"Switched to {branch}", branch=branch
        )

    def check_for_updates(self) -> UpdateResult:
        """Fetch and report whether upstream has changes, without merging."""
        operation = "check"
        logger.info("Checking for updates")

        aborted = self._check_writable(operation) or self._deepen(operation)
        if aborted:
            return aborted

        try:
            changed = self.repo.has_upstream_changes()
        except GitCommandError as e:
            logger.error(str(e))
            return self._result(operation, OperationStatus.FAILED, "diff_failed", error=str(e))

        upstream = self.repo.remote_tracking_ref()
        metadata = {'upstream': upstream} if upstream else {}
        if not changed:
            return self._result(
                operation, OperationStatus.UP_TO_DATE, "none",
                message="Already up-to-date", metadata=metadata
            )
        return self._result(
            operation, OperationStatus.SUCCESS, "updates_available",
            message=f"Updates available from {upstream or 'upstream'}",
            metadata=metadata
        )

    def version(self) -> str:
        return self.versions.resolve_version()
