"""
repoupdate - Self-update an installed application from its git history.

repoupdate drives the git executable to keep a working copy current:
it unshallows clones when needed, fast-forwards to upstream, moves to the
newest minor release branch and reports a human-readable version.

Quick Start:
    from repoupdate import UpdateService, UpdateConfig

    service = UpdateService(UpdateConfig(base_dir="/opt/myapp"))

    # Fetch and fast-forward the current branch
    result = service.update_to_latest()
    print(result.status.value, result.message or result.error)

    # Move release-2.3 to the newest release-2.x branch
    service.update_to_latest_minor()

    # Switch to a tag (checked out detached)
    service.switch_branch("2.4.0")

    # Version string, e.g. "release-2.4-2.4.0-5-gabc1234"
    print(service.version())

Layers:
    infra    - GitClient / CommandResult (process execution)
    services - RepositoryState, VersionService, UpdateService
    domain   - UpdateResult, OperationStatus, branch name rules
"""

__version__ = "0.1.0"

from .config import load_config, save_config, UpdateConfig
from .domain import OperationStatus, UpdateResult
from .infra import GitClient, CommandResult
from .services import (
    RepositoryState,
    GitCommandError,
    VersionService,
    UpdateService,
)

__all__ = [
    "__version__",
    # Configuration
    "load_config",
    "save_config",
    "UpdateConfig",
    # Domain objects
    "OperationStatus",
    "UpdateResult",
    # Infrastructure
    "GitClient",
    "CommandResult",
    # Services
    "RepositoryState",
    "GitCommandError",
    "VersionService",
    "UpdateService",
]
