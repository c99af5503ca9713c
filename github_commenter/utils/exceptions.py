"""
Custom exception classes for github-commenter.

Provides specific exception types for different error scenarios
with appropriate error codes and messages.
"""

from typing import Optional, Dict, Any


class CommenterError(Exception):
    """
    Base exception for github-commenter.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ValidationError(CommenterError):
    """
    Raised when command-line or environment input is missing or invalid.

    This includes missing required flags for the chosen comment type,
    unparseable numbers and unknown comment types.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None
    ):
        """Initialize validation error."""
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = config_value

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class RegexCompileError(CommenterError):
    """Raised when a delete or edit pattern is not a valid regular expression."""

    def __init__(self, message: str, option: Optional[str] = None, pattern: Optional[str] = None):
        details = {}
        if option:
            details["option"] = option
        if pattern is not None:
            details["pattern"] = pattern

        super().__init__(
            message=message,
            error_code="REGEX_COMPILE_ERROR",
            details=details
        )


class TemplateError(CommenterError):
    """
    Raised when the comment template cannot be loaded, parsed or rendered.
    """

    def __init__(self, message: str, template_name: Optional[str] = None):
        details = {}
        if template_name:
            details["template_name"] = template_name

        super().__init__(
            message=message,
            error_code="TEMPLATE_ERROR",
            details=details
        )


class GitHubAPIError(CommenterError):
    """
    Raised when there's an error with the GitHub API.

    This includes authentication errors, permission issues,
    resource not found, transport failures, etc.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[Any] = None,
        endpoint: Optional[str] = None
    ):
        """Initialize GitHub API error."""
        details = {}
        if status_code:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body
        if endpoint:
            details["endpoint"] = endpoint

        super().__init__(
            message=message,
            error_code="GITHUB_API_ERROR",
            details=details
        )
        self.status_code = status_code


class CommentOperationError(CommenterError):
    """
    Raised when a list, create, edit or delete call on a comment surface fails.

    Subclasses identify the operation so the reconciler can decide which
    failures are tolerated. The status code and endpoint of the underlying
    API error are kept in ``details``.
    """

    error_code_value = "COMMENT_OPERATION_ERROR"

    def __init__(
        self,
        message: str,
        surface: Optional[str] = None,
        comment_id: Optional[int] = None,
        cause: Optional[CommenterError] = None
    ):
        details = {}
        if surface:
            details["surface"] = surface
        if comment_id is not None:
            details["comment_id"] = comment_id
        if cause is not None:
            for key in ("status_code", "endpoint"):
                if key in cause.details:
                    details[key] = cause.details[key]

        super().__init__(
            message=message,
            error_code=self.error_code_value,
            details=details
        )
        self.comment_id = comment_id


class ListError(CommentOperationError):
    """Raised when existing comments cannot be listed."""
    error_code_value = "LIST_ERROR"


class DeleteError(CommentOperationError):
    """Raised when a matched comment cannot be deleted."""
    error_code_value = "DELETE_ERROR"


class EditError(CommentOperationError):
    """Raised when a matched comment cannot be edited."""
    error_code_value = "EDIT_ERROR"


class CreateError(CommentOperationError):
    """Raised when the new comment cannot be created."""
    error_code_value = "CREATE_ERROR"


class PullRequestResolutionError(CommenterError):
    """
    Raised when no pull request can be found for a commit SHA.
    """

    def __init__(self, message: str, sha: Optional[str] = None):
        details = {}
        if sha:
            details["sha"] = sha

        super().__init__(
            message=message,
            error_code="PR_RESOLUTION_ERROR",
            details=details
        )
