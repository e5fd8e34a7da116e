"""Utility classes and functions for git operations."""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass
class GitOperationResult:
    """Result of a (possibly retried) git operation."""
    success: bool
    message: str
    operation: str
    attempts: int = 1
    error_code: Optional[str] = None
    output: str = ""
    stderr: str = ""


def create_git_operation_result(
    success: bool,
    message: str,
    operation: str,
    attempts: int = 1,
    error_code: Optional[str] = None,
    output: str = "",
    stderr: str = ""
) -> GitOperationResult:
    """
    Helper function to create GitOperationResult instances.

    Args:
        success: Whether the operation was successful
        message: Descriptive message about the operation result
        operation: Name of the operation that was performed
        attempts: Number of attempts made (default: 1)
        error_code: Optional error code for failed operations
        output: Standard output of the final successful attempt
        stderr: Error output of the final failed attempt

    Returns:
        GitOperationResult instance with all fields populated
    """
    return GitOperationResult(
        success=success,
        message=message,
        operation=operation,
        attempts=attempts,
        error_code=error_code,
        output=output,
        stderr=stderr
    )


def strip_ref_prefix(ref_path: str, prefix: str) -> Optional[str]:
    """Return `ref_path` without `prefix`, or None when it does not start with it."""
    if not ref_path.startswith(prefix):
        return None
    return ref_path[len(prefix):]


def mentions_ref(text: str, ref_name: str) -> bool:
    """True when `ref_name` appears in `text` as a whole token."""
    if not ref_name:
        return False
    # Ref names may contain '/', '.' and '-', so \b is not enough
    pattern = r"(?<![\w./-])" + re.escape(ref_name) + r"(?![\w/-]|\.\w)"
    return re.search(pattern, text) is not None
