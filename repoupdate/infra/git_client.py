"""
Git client infrastructure for repoupdate.

Provides a narrow abstraction over git command execution.
All git invocations go through this client, making them:
- Easy to replace with a fake for testing
- Consistent in how exit status and output are captured
- Isolated from the parsing done by the repository layer
"""

import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of a single git invocation."""
    returncode: int
    stdout: List[str] = field(default_factory=list)
    stderr: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def first_line(self) -> str:
        """First stdout line, stripped, or an empty string."""
        if not self.stdout:
            return ""
        return self.stdout[0].strip()


# Returned when git itself cannot be started
UNAVAILABLE = CommandResult(returncode=1, stdout=[""], stderr=[])


class GitClient:
    """
    Runs git with an argument list in a working directory.

    Non-zero exit codes are returned, never raised, so callers can
    branch on them.

    Example:
        client = GitClient(base_dir="/opt/myapp")
        result = client.run(["rev-parse", "--abbrev-ref", "HEAD"])
        if result.ok:
            print(result.first_line)
    """

    def __init__(
        self,
        base_dir: Optional[str] = None,
        executable: str = "git",
        timeout: Optional[float] = None
    ):
        """
        Initialize GitClient.

        Args:
            base_dir: Default working directory for commands
            executable: Git executable name or path (default: "git")
            timeout: Command timeout in seconds (default: None, wait forever)
        """
        self.base_dir = base_dir
        self.executable = executable
        self.timeout = timeout

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory (defaults to base_dir)

        Returns:
            CommandResult with exit status and output lines
        """
        cmd = [self.executable] + list(args)
        cwd = cwd or self.base_dir

        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                # ref names and descriptions are not guaranteed to be UTF-8
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return CommandResult(
                returncode=-1,
                stdout=[],
                stderr=[f"timed out after {self.timeout}s"]
            )
        except OSError as e:
            logger.warning(f"Unable to run {self.executable}: {e}")
            return CommandResult(
                returncode=UNAVAILABLE.returncode,
                stdout=list(UNAVAILABLE.stdout),
                stderr=list(UNAVAILABLE.stderr)
            )

        result = CommandResult(
            returncode=proc.returncode,
            stdout=proc.stdout.splitlines() if proc.stdout else [],
            stderr=proc.stderr.splitlines() if proc.stderr else []
        )

        if result.stderr:
            logger.debug(result.stderr)
        if result.stdout:
            logger.debug(result.stdout)

        return result
