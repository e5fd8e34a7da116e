"""Error types and categorization for ref reconciliation."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class ErrorCategory(Enum):
    """Categories of git failures for appropriate handling."""
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    REPOSITORY_ACCESS = "repository_access"
    CONFIGURATION = "configuration"
    METADATA = "metadata"
    UNKNOWN = "unknown"


class RecoveryAction(Enum):
    """Types of recovery actions that can be taken."""
    RETRY = "retry"
    SKIP_REMOTE = "skip_remote"
    PLACEHOLDER = "placeholder"
    ABORT = "abort"


@dataclass
class ErrorResolution:
    """Information about how to resolve a specific error."""
    category: ErrorCategory
    action: RecoveryAction
    user_message: str
    resolution_steps: List[str]
    max_retries: int = 0


class RefScoutError(Exception):
    """Base class for reconciliation errors."""
    error_code = "REFSCOUT_ERROR"
    fatal = True


class NotAVersionControlRepository(RefScoutError):
    """The given path is not inside a git working tree."""
    error_code = "NOT_A_REPOSITORY"

    def __init__(self, path: str, detail: Optional[str] = None):
        self.path = path
        self.detail = detail
        message = f"Not a git repository: {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class NoRemoteConfigured(RefScoutError):
    """None of the candidate remotes exist in the repository."""
    error_code = "NO_REMOTE_CONFIGURED"

    def __init__(self, candidates):
        self.candidates = list(candidates)
        names = ", ".join(f"'{name}'" for name in self.candidates) or "(none)"
        super().__init__(f"None of the candidate remotes were found: {names}")


class RemoteUnreachable(RefScoutError):
    """A remote could not be listed after the configured retries."""
    error_code = "REMOTE_UNREACHABLE"
    fatal = False

    def __init__(
        self,
        remote_name: str,
        attempts: int,
        reason: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN
    ):
        self.remote_name = remote_name
        self.attempts = attempts
        self.reason = reason
        self.category = category
        super().__init__(
            f"Remote '{remote_name}' unreachable after {attempts} attempt(s): {reason}"
        )


class MalformedRefMetadata(RefScoutError):
    """Ref metadata could not be parsed."""
    error_code = "MALFORMED_REF_METADATA"
    fatal = False

    def __init__(self, ref_name: str, detail: str):
        self.ref_name = ref_name
        self.detail = detail
        super().__init__(f"Malformed metadata for {ref_name}: {detail}")
