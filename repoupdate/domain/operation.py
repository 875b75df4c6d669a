"""
Operation result domain objects for repoupdate.

Provides the result type returned by every update flow, so the command
layer can decide on output and exit codes without parsing log messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional


class OperationStatus(Enum):
    """Outcome of an update flow."""
    SUCCESS = "success"
    UP_TO_DATE = "up_to_date"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class UpdateResult:
    """
    Outcome of a single flow run against the working copy.

    ``action`` names the step that decided the outcome, e.g. "merged",
    "switched", "not_writable", "fetch_failed".
    """
    operation: str  # e.g., "update", "update_minor", "switch", "check"
    repo_path: str
    status: OperationStatus
    action: str
    message: Optional[str] = None
    error: Optional[str] = None
    branch: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True unless the flow failed or was skipped."""
        return self.status in (OperationStatus.SUCCESS, OperationStatus.UP_TO_DATE)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'operation': self.operation,
            'path': self.repo_path,
            'status': self.status.value,
            'action': self.action,
        }
        if self.branch:
            result['branch'] = self.branch
        if self.message:
            result['message'] = self.message
        if self.error:
            result['error'] = self.error
        if self.metadata:
            result.update(self.metadata)
        return result
