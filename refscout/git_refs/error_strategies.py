"""Error recovery strategies for remote listing and ref parsing failures."""

import logging
from typing import Dict, Optional

from .error_types import ErrorCategory, ErrorResolution, RecoveryAction


def build_error_strategies() -> Dict[ErrorCategory, ErrorResolution]:
    """Build recovery strategies for each error category."""
    return {
        ErrorCategory.NETWORK: ErrorResolution(
            category=ErrorCategory.NETWORK,
            action=RecoveryAction.RETRY,
            user_message="Network connection issue detected",
            resolution_steps=[
                "Check your internet connection",
                "Verify the remote URL is reachable",
                "Re-run with --mode heuristic to work offline"
            ],
            max_retries=3
        ),

        ErrorCategory.AUTHENTICATION: ErrorResolution(
            category=ErrorCategory.AUTHENTICATION,
            action=RecoveryAction.SKIP_REMOTE,
            user_message="Authentication failed - please check your credentials",
            resolution_steps=[
                "Verify your git credentials are configured correctly",
                "Check that you have read access to the remote",
                "Try 'git ls-remote <remote>' manually"
            ]
        ),

        ErrorCategory.REPOSITORY_ACCESS: ErrorResolution(
            category=ErrorCategory.REPOSITORY_ACCESS,
            action=RecoveryAction.SKIP_REMOTE,
            user_message="Remote repository not accessible - please verify the URL",
            resolution_steps=[
                "Check the URL with 'git remote -v'",
                "Make sure the repository still exists"
            ],
            max_retries=1
        ),

        ErrorCategory.CONFIGURATION: ErrorResolution(
            category=ErrorCategory.CONFIGURATION,
            action=RecoveryAction.ABORT,
            user_message="Repository configuration does not allow reconciliation",
            resolution_steps=[
                "Run inside a git working tree",
                "Add an 'origin' or 'upstream' remote with 'git remote add'"
            ]
        ),

        ErrorCategory.METADATA: ErrorResolution(
            category=ErrorCategory.METADATA,
            action=RecoveryAction.PLACEHOLDER,
            user_message="Ref metadata could not be parsed - using a placeholder",
            resolution_steps=[
                "Inspect the ref manually with 'git show'"
            ]
        )
    }


def build_error_patterns() -> Dict[str, ErrorCategory]:
    """Build mapping of git stderr patterns to categories."""
    return {
        # Network errors
        "connection refused": ErrorCategory.NETWORK,
        "network is unreachable": ErrorCategory.NETWORK,
        "timed out": ErrorCategory.NETWORK,
        "timeout": ErrorCategory.NETWORK,
        "no route to host": ErrorCategory.NETWORK,
        "could not resolve host": ErrorCategory.NETWORK,
        "temporary failure in name resolution": ErrorCategory.NETWORK,

        # Authentication errors
        "authentication failed": ErrorCategory.AUTHENTICATION,
        "permission denied": ErrorCategory.AUTHENTICATION,
        "invalid credentials": ErrorCategory.AUTHENTICATION,
        "returned error: 403": ErrorCategory.AUTHENTICATION,
        "returned error: 401": ErrorCategory.AUTHENTICATION,

        # Repository access errors
        "repository not found": ErrorCategory.REPOSITORY_ACCESS,
        "does not appear to be a git repository": ErrorCategory.REPOSITORY_ACCESS,
        "could not read from remote repository": ErrorCategory.REPOSITORY_ACCESS,
        "not a git repository": ErrorCategory.REPOSITORY_ACCESS,
    }


_ERROR_PATTERNS = build_error_patterns()
_ERROR_STRATEGIES = build_error_strategies()


def categorize_error(error_message: Optional[str]) -> ErrorCategory:
    """
    Categorize a git failure based on its stderr text.

    Args:
        error_message: The error message to categorize

    Returns:
        ErrorCategory enum value
    """
    logger = logging.getLogger('refscout.git_refs.errors')

    if not error_message:
        return ErrorCategory.UNKNOWN

    error_lower = error_message.lower()
    for pattern, category in _ERROR_PATTERNS.items():
        if pattern in error_lower:
            logger.debug(f"Categorized error as {category}: pattern '{pattern}' found")
            return category

    logger.debug(f"Could not categorize error: {error_message}")
    return ErrorCategory.UNKNOWN


def get_resolution(category: ErrorCategory) -> Optional[ErrorResolution]:
    """Return the recovery strategy for a category, if one is defined."""
    return _ERROR_STRATEGIES.get(category)
