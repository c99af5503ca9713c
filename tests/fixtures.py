"""
Test fixtures and utilities for the github-commenter tests
"""
from typing import Dict, List, Optional, Set
from unittest.mock import Mock

import requests

from github_commenter.models import Comment
from github_commenter.targets import CommentSurface
from github_commenter.utils.exceptions import GitHubAPIError


class FakeCommentStore:
    """
    In-memory stand-in for one GitHub comment surface.

    Listing reflects earlier deletes and edits. Failures can be injected
    per operation and per comment id. Every call is recorded in ``calls``.
    """

    def __init__(self, comments: Optional[List[Comment]] = None, next_id: int = 1000):
        self.comments: Dict[int, Comment] = {c.id: c for c in (comments or [])}
        self.next_id = next_id
        self.calls: List[tuple] = []
        self.fail_list = False
        self.fail_create = False
        self.fail_delete_ids: Set[int] = set()
        self.fail_edit_ids: Set[int] = set()

    def list_comments(self) -> List[Comment]:
        self.calls.append(("list",))
        if self.fail_list:
            raise GitHubAPIError("Failed to list comments: 500 Server Error", status_code=500)
        return list(self.comments.values())

    def create_comment(self, body: str) -> Comment:
        self.calls.append(("create", body))
        if self.fail_create:
            raise GitHubAPIError("Failed to create comment: 422 Unprocessable Entity", status_code=422)
        comment = Comment(id=self.next_id, body=body)
        self.comments[comment.id] = comment
        self.next_id += 1
        return comment

    def edit_comment(self, comment_id: int, body: str) -> Comment:
        self.calls.append(("edit", comment_id, body))
        if comment_id in self.fail_edit_ids:
            raise GitHubAPIError("Failed to update comment: 403 Forbidden", status_code=403)
        self.comments[comment_id] = Comment(id=comment_id, body=body)
        return self.comments[comment_id]

    def delete_comment(self, comment_id: int) -> None:
        self.calls.append(("delete", comment_id))
        if comment_id in self.fail_delete_ids:
            raise GitHubAPIError("Failed to delete comment: 404 Not Found", status_code=404)
        del self.comments[comment_id]

    def surface(self, label: str = "commit") -> CommentSurface:
        return CommentSurface(
            label=label,
            list_comments=self.list_comments,
            create_comment=self.create_comment,
            edit_comment=self.edit_comment,
            delete_comment=self.delete_comment,
        )

    def review_surface(self) -> CommentSurface:
        return CommentSurface(label="PR Review", create_comment=self.create_comment)

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


def mock_response(status_code: int = 200, json_data=None, text: str = ""):
    """Build a Mock shaped like a requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = text
    response.content = b"" if json_data is None and not text else b"{}"

    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} Error", response=response)
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response
