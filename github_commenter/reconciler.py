"""
Comment reconciliation for github-commenter.

Decides whether to delete, edit or create comments on a target by
matching regular expressions against the bodies of its existing comments.
"""

import re
from typing import List, Optional, Pattern

from .models import Comment, ReconciliationOutcome
from .targets import CommentSurface
from .utils.exceptions import (
    CreateError,
    DeleteError,
    EditError,
    GitHubAPIError,
    ListError,
    RegexCompileError,
)
from .utils.logger import get_logger


def compile_pattern(pattern: Optional[str], option: str) -> Optional[Pattern]:
    """
    Compile a delete or edit pattern.

    Args:
        pattern: Regular expression text, or None/empty for "not set"
        option: Name of the option the pattern came from, for error messages

    Returns:
        Compiled pattern, or None when no pattern was given

    Raises:
        RegexCompileError: If the pattern is not a valid regular expression
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise RegexCompileError(
            f"Invalid -{option} regular expression {pattern!r}: {e}",
            option=option,
            pattern=pattern
        ) from e


class CommentReconciler:
    """
    Runs the delete, edit and create phases against one comment surface.

    Delete phase: every comment matching the delete pattern is deleted.
    Listing and deleting failures are logged and skipped.

    Edit phase: every comment matching the edit pattern gets the new body.
    A listing failure counts as "no matches"; an edit failure aborts the run.
    If anything matched, the run ends here.

    Create phase: a single comment with the new body is created. Failures
    abort the run.

    Each phase lists the comments afresh; matching always uses the body
    returned by the API.
    """

    def __init__(self, surface: CommentSurface):
        self.surface = surface
        self.logger = get_logger(__name__)

    def reconcile(
        self,
        new_body: str,
        delete_pattern: Optional[Pattern] = None,
        edit_pattern: Optional[Pattern] = None
    ) -> ReconciliationOutcome:
        """
        Reconcile the target's comments with the new body.

        Args:
            new_body: Fully formatted comment text
            delete_pattern: Comments whose body matches are deleted first
            edit_pattern: Comments whose body matches are edited in place

        Returns:
            The terminal outcome of the run

        Raises:
            EditError: If editing a matched comment fails
            CreateError: If creating the new comment fails
        """
        deleted_ids: List[int] = []

        if not self.surface.supports_reconciliation:
            if delete_pattern is not None or edit_pattern is not None:
                self.logger.warning(
                    f"Delete and edit patterns are not supported for {self.surface.label} comments, ignoring them"
                )
        else:
            if delete_pattern is not None:
                deleted_ids = self._delete_matching(delete_pattern)

            if edit_pattern is not None:
                edited_ids = self._edit_matching(edit_pattern, new_body)
                if edited_ids:
                    return ReconciliationOutcome.edited(tuple(edited_ids), tuple(deleted_ids))

        created = self._create(new_body)
        return ReconciliationOutcome.created(created.id, tuple(deleted_ids))

    def _list(self) -> List[Comment]:
        """Fetch the current comments; a failure yields an empty snapshot."""
        try:
            return self.surface.list_comments()
        except GitHubAPIError as e:
            error = ListError(
                f"Error listing {self.surface.label} comments: {e.message}",
                surface=self.surface.label,
                cause=e
            )
            self.logger.error(error.message, extra=error.details)
            return []

    def _delete_matching(self, pattern: Pattern) -> List[int]:
        deleted_ids: List[int] = []

        for comment in self._list():
            if not pattern.search(comment.body):
                continue
            try:
                self.surface.delete_comment(comment.id)
            except GitHubAPIError as e:
                error = DeleteError(
                    f"Error deleting {self.surface.label} comment: {e.message}",
                    surface=self.surface.label,
                    comment_id=comment.id,
                    cause=e
                )
                self.logger.error(error.message, extra=error.details)
                continue

            deleted_ids.append(comment.id)
            self.logger.info(
                f"Deleted {self.surface.label} comment: {comment.id}",
                extra={"comment_id": comment.id}
            )

        return deleted_ids

    def _edit_matching(self, pattern: Pattern, new_body: str) -> List[int]:
        edited_ids: List[int] = []

        for comment in self._list():
            if not pattern.search(comment.body):
                continue
            try:
                self.surface.edit_comment(comment.id, new_body)
            except GitHubAPIError as e:
                raise EditError(
                    f"Error updating {self.surface.label} comment: {e.message}",
                    surface=self.surface.label,
                    comment_id=comment.id,
                    cause=e
                ) from e

            edited_ids.append(comment.id)
            self.logger.info(
                f"Updated {self.surface.label} comment: {comment.id}",
                extra={"comment_id": comment.id}
            )

        return edited_ids

    def _create(self, new_body: str) -> Comment:
        try:
            created = self.surface.create_comment(new_body)
        except GitHubAPIError as e:
            raise CreateError(
                f"Error creating {self.surface.label} comment: {e.message}",
                surface=self.surface.label,
                cause=e
            ) from e

        self.logger.info(
            f"Created GitHub {self.surface.label} comment: {created.id}",
            extra={"comment_id": created.id}
        )
        return created
