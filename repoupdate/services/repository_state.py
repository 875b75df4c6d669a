"""
Repository state queries and mutations for repoupdate.

Every git invocation the update flows need lives here, together with the
rules for reading git's text output. Services above this layer only see
booleans, strings and lists.
"""

import logging
from typing import List

from ..infra.git_client import GitClient, CommandResult
from ..domain.branch import is_tag_like, strip_remote_prefix

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git query failed in a way the caller cannot interpret."""

    def __init__(self, args: List[str], result: CommandResult):
        self.git_args = list(args)
        self.result = result
        payload = "\n".join(result.stderr) or f"exit status {result.returncode}"
        super().__init__(f"git {' '.join(args)} failed: {payload}")


class RepositoryState:
    """
    Query and mutate the working copy at ``base_dir`` through git.

    Example:
        repo = RepositoryState(GitClient(), "/opt/myapp")
        if repo.deepen() and repo.has_upstream_changes():
            repo.fast_forward_merge()
    """

    def __init__(self, git_client: GitClient, base_dir: str, remote: str = "origin"):
        self.git = git_client
        self.base_dir = base_dir
        self.remote = remote

    def _run(self, args: List[str]) -> CommandResult:
        return self.git.run(args, cwd=self.base_dir)

    def is_shallow(self) -> bool:
        """
        Check whether the working copy is a shallow clone.

        Raises:
            GitCommandError: if git cannot answer the query
        """
        args = ["rev-parse", "--is-shallow-repository"]
        result = self._run(args)
        if not result.ok:
            raise GitCommandError(args, result)
        return len(result.stdout) == 1 and result.first_line == "true"

    def deepen(self) -> bool:
        """
        Make the full remote history reachable.

        Shallow clones are unshallowed and widened to track every remote
        branch; full clones fetch all remotes. ``fetch --unshallow`` fails
        on a complete clone, so the two modes are exclusive.

        Returns:
            True on success, False after logging the failure
        """
        try:
            shallow = self.is_shallow()
        except GitCommandError as e:
            logger.error(str(e))
            return False

        fetch_mode = "--unshallow" if shallow else "--all"
        result = self._run(["fetch", fetch_mode])
        if not result.ok:
            logger.error(
                f"Git fetch {fetch_mode} failed! "
                f"Please pull the changes manually in {self.base_dir}"
            )
            return False

        if shallow:
            result = self._run(["remote", "set-branches", self.remote, "*"])
            if not result.ok:
                logger.error(
                    f"Git remote set-branches after fetch {fetch_mode} failed! "
                    f"Please pull the changes manually in {self.base_dir}"
                )
                return False

        return True

    def has_upstream_changes(self) -> bool:
        """
        Compare the working copy with its upstream tracking ref.

        ``git diff --quiet`` exits 0 when clean and 1 when the trees differ;
        anything else is a real error.

        Raises:
            GitCommandError: on exit status other than 0 or 1
        """
        args = ["diff", "--quiet", "@{upstream}"]
        result = self._run(args)
        if result.returncode == 0:
            return False
        if result.returncode == 1:
            return True
        raise GitCommandError(args, result)

    def fast_forward_merge(self) -> bool:
        result = self._run(["merge", "--ff-only", "--progress"])
        return result.ok

    def switch_branch(self, name: str) -> bool:
        """Switch to ``name``, detaching HEAD when it names a tag."""
        args = ["switch", name]
        if is_tag_like(name):
            # switching to a tag without --detach is an error
            args.append("--detach")
        result = self._run(args)
        return result.ok

    def current_branch(self) -> str:
        """Abbreviated name of HEAD, or an empty string."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        if not result.ok:
            return ""
        return result.first_line

    def latest_tag(self) -> str:
        result = self._run(["describe", "--tags", "--abbrev=0"])
        if not result.ok:
            return ""
        return result.first_line

    def description(self) -> str:
        """Describe the checked-out commit, falling back to the branch name."""
        result = self._run(["describe", "--dirty", "--always"])
        description = result.first_line if result.ok else ""
        return description or self.current_branch()

    def remote_tracking_ref(self) -> str:
        result = self._run(["rev-parse", "--abbrev-ref", "@{upstream}"])
        if not result.ok:
            return ""
        return result.first_line

    def all_branches(self) -> List[str]:
        """
        List local and remote branches.

        Remote-tracking names lose their ``remotes/<remote>/`` prefix so that a
        local branch and its remote copy compare equal.
        """
        result = self._run(["branch", "--all"])

        branches = []
        for line in result.stdout:
            branch = line.lstrip()
            if branch.startswith("* "):
                branch = branch[2:]
            if not branch:
                continue
            branches.append(strip_remote_prefix(branch, self.remote))
        return branches
