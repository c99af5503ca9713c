"""
Utilities module for github-commenter.
"""

from .logger import setup_logging, get_logger, set_log_context
from .exceptions import (
    CommenterError,
    ValidationError,
    RegexCompileError,
    TemplateError,
    GitHubAPIError,
    CommentOperationError,
    ListError,
    DeleteError,
    EditError,
    CreateError,
    PullRequestResolutionError
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_context",
    "CommenterError",
    "ValidationError",
    "RegexCompileError",
    "TemplateError",
    "GitHubAPIError",
    "CommentOperationError",
    "ListError",
    "DeleteError",
    "EditError",
    "CreateError",
    "PullRequestResolutionError"
]
