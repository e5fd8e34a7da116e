"""Error handling framework for the refscout MCP tool surface."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from .git_refs.error_strategies import get_resolution
from .git_refs.error_types import (
    ErrorCategory as GitErrorCategory,
    NoRemoteConfigured,
    NotAVersionControlRepository,
    RemoteUnreachable,
)


class ErrorCategory(Enum):
    """Categories of errors for structured error handling."""
    RECONCILIATION = "reconciliation"
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    SYSTEM = "system"


@dataclass
class ErrorResponse:
    """Standardized error response format for tool calls."""
    error: str
    error_code: str
    message: str
    timestamp: str
    category: str
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error response to dictionary format."""
        result = {
            "error": self.error,
            "error_code": self.error_code,
            "message": self.message,
            "timestamp": self.timestamp,
            "category": self.category
        }
        if self.context:
            result["context"] = self.context
        return result


class ErrorHandler:
    """Turns reconciliation failures into structured responses."""

    def __init__(self):
        self.logger = logging.getLogger('refscout.error_handler')

    def handle_reconcile_error(self, error: Exception, context: Dict[str, Any] = None) -> ErrorResponse:
        """Handle errors raised while reconciling a repository."""
        context = dict(context or {})

        if isinstance(error, NotAVersionControlRepository):
            error_code = error.error_code
            category = ErrorCategory.CONFIGURATION
            message = str(error)
        elif isinstance(error, NoRemoteConfigured):
            error_code = error.error_code
            category = ErrorCategory.CONFIGURATION
            message = str(error)
        elif isinstance(error, RemoteUnreachable):
            error_code = error.error_code
            category = ErrorCategory.RECONCILIATION
            message = str(error)
            resolution = get_resolution(error.category)
            if resolution:
                context["resolution_steps"] = resolution.resolution_steps
        elif isinstance(error, OSError):
            error_code = "SYSTEM_IO_ERROR"
            category = ErrorCategory.SYSTEM
            message = f"System error: {error}"
        else:
            error_code = "RECONCILE_GENERAL_ERROR"
            category = ErrorCategory.RECONCILIATION
            message = f"Reconciliation failed: {error}"

        if category is ErrorCategory.CONFIGURATION:
            resolution = get_resolution(GitErrorCategory.CONFIGURATION)
            context["resolution_steps"] = resolution.resolution_steps

        error_response = ErrorResponse(
            error="Reconciliation failed",
            error_code=error_code,
            message=message,
            timestamp=datetime.now().isoformat(),
            category=category.value,
            context=context
        )

        self.logger.error(
            f"Reconciliation error: {message}",
            extra={
                'operation': 'reconcile_error',
                'error_code': error_code,
                'repository_path': context.get('repository_path')
            }
        )

        return error_response

    def handle_validation_error(self, error: Exception, context: Dict[str, Any] = None) -> ErrorResponse:
        """Handle invalid tool arguments."""
        context = context or {}
        text = str(error).lower()

        if "category" in text:
            error_code = "VALIDATION_INVALID_CATEGORY"
        elif "mode" in text:
            error_code = "VALIDATION_INVALID_MODE"
        elif "limit" in text:
            error_code = "VALIDATION_INVALID_LIMIT"
        else:
            error_code = "VALIDATION_GENERAL_ERROR"
        message = f"Input validation failed: {error}"

        error_response = ErrorResponse(
            error="Validation error",
            error_code=error_code,
            message=message,
            timestamp=datetime.now().isoformat(),
            category=ErrorCategory.VALIDATION.value,
            context=context
        )

        self.logger.warning(
            f"Validation error: {message}",
            extra={
                'operation': 'validation_error',
                'error_code': error_code
            }
        )

        return error_response

    def create_success_response(self, operation: str, data: Dict[str, Any], context: Dict[str, Any] = None) -> Dict[str, Any]:
        """Create a standardized success response."""
        response = {
            "success": True,
            "operation": operation,
            "timestamp": datetime.now().isoformat(),
            "data": data
        }

        if context:
            response["context"] = context

        return response


# Initialize global error handler
error_handler = ErrorHandler()
