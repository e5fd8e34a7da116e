"""Git command execution with retry logic using GitPython."""

import logging
import time
from typing import Callable

from git import GitCommandError

from ..config import Config
from .utils import GitOperationResult, create_git_operation_result


def execute_git_operation_with_retry(
    operation_func: Callable[[], str],
    operation: str,
    config: Config
) -> GitOperationResult:
    """
    Execute a GitPython operation with retry logic and exponential backoff.

    Only git command failures are retried; anything else propagates to the
    caller since it points at a local problem rather than a flaky remote.

    Args:
        operation_func: Function that executes the GitPython operation and returns its output
        operation: Description of the operation for logging
        config: Run configuration holding the retry settings

    Returns:
        GitOperationResult indicating success or failure
    """
    logger = logging.getLogger('refscout.git_refs')

    max_attempts = config.git_retry_attempts
    base_delay = config.git_retry_delay

    for attempt in range(1, max_attempts + 1):
        try:
            logger.debug(f"Executing Git operation (attempt {attempt}/{max_attempts}): {operation}")

            output = operation_func()

            logger.debug(f"Git operation succeeded on attempt {attempt}")
            return create_git_operation_result(
                success=True,
                message=f"{operation} completed successfully",
                operation=operation,
                attempts=attempt,
                output=output or ""
            )

        except GitCommandError as e:
            stderr = str(e.stderr).strip() if e.stderr else str(e)
            error_msg = f"{operation} failed (attempt {attempt}/{max_attempts}): {stderr}"

            if attempt == max_attempts:
                logger.error(error_msg)
                return create_git_operation_result(
                    success=False,
                    message=error_msg,
                    operation=operation,
                    attempts=attempt,
                    error_code="GIT_COMMAND_FAILED",
                    stderr=stderr
                )

            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(f"{error_msg}, retrying in {delay:.1f}s")
            time.sleep(delay)

    # Unreachable while git_retry_attempts >= 1, which Config enforces
    return create_git_operation_result(
        success=False,
        message=f"{operation} failed after {max_attempts} attempts",
        operation=operation,
        attempts=max_attempts,
        error_code="GIT_COMMAND_MAX_RETRIES_EXCEEDED"
    )
