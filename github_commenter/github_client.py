"""
GitHub API client for github-commenter.

This module provides a small synchronous client for the GitHub REST API,
covering commit comments, issue/PR comments, PR file comments, PR reviews
and the commit-to-pull-request lookup.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from .models import Comment
from .utils.exceptions import GitHubAPIError
from .utils.logger import get_logger


DEFAULT_BASE_URL = "https://api.github.com/"
ACCEPT_HEADER = "application/vnd.github.v3+json"


def _ensure_suffix(url: str, suffix: str) -> str:
    """Normalize an enterprise URL so it ends with the given API path."""
    if not url.endswith("/"):
        url += "/"
    if not url.endswith(suffix):
        url += suffix
    return url


class GitHubClient:
    """
    Client for interacting with the GitHub API.

    Each method performs exactly one HTTP request. Failures are logged and
    raised as ``GitHubAPIError``; nothing is retried.
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        insecure: bool = False,
        timeout: int = 60,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the GitHub client.

        Args:
            token: GitHub access token
            base_url: GitHub Enterprise base URL (``api/v3/`` is appended if missing)
            insecure: Skip TLS certificate verification
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.logger = get_logger("github_client")

        if not token:
            raise GitHubAPIError("GitHub token is required")

        self.timeout = timeout
        self.api_url = _ensure_suffix(base_url, "api/v3/") if base_url else DEFAULT_BASE_URL

        self.headers = {
            "Authorization": f"token {token}",
            "Accept": ACCEPT_HEADER
        }

        self.session = session or requests.Session()
        self.session.headers.update(self.headers)
        self.session.verify = not insecure

        if insecure:
            self.logger.warning("TLS certificate verification is disabled")

        self.logger.debug(
            "GitHub client initialized",
            extra={
                "api_url": self.api_url,
                "timeout": timeout,
                "insecure": insecure
            }
        )

    @classmethod
    def from_settings(cls, settings) -> "GitHubClient":
        """Create a client from a Settings instance."""
        return cls(
            token=settings.token,
            base_url=settings.base_url,
            insecure=settings.insecure,
            timeout=settings.timeout_seconds
        )

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Perform a single API request.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            operation: Human-readable operation name used in logs and errors
            payload: Optional JSON body

        Returns:
            Decoded JSON response, or None for empty responses

        Raises:
            GitHubAPIError: If the request fails or returns an error status
        """
        url = urljoin(self.api_url, path)

        self.logger.debug(
            f"{method} {url}",
            extra={
                "operation": operation,
                "has_payload": payload is not None
            }
        )

        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            response_body = self._error_body(e.response)
            error_msg = f"Failed to {operation}: {str(e)}"
            self.logger.error(
                error_msg,
                extra={
                    "url": url,
                    "error_type": type(e).__name__,
                    "status_code": status_code,
                    "error_details": response_body
                }
            )
            raise GitHubAPIError(
                error_msg,
                status_code=status_code,
                response_body=response_body,
                endpoint=url
            ) from e
        except requests.exceptions.RequestException as e:
            error_msg = f"Failed to {operation}: {str(e)}"
            self.logger.error(
                error_msg,
                extra={
                    "url": url,
                    "error_type": type(e).__name__
                }
            )
            raise GitHubAPIError(error_msg, endpoint=url) from e

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                f"Failed to {operation}: response is not valid JSON",
                status_code=response.status_code,
                endpoint=url
            ) from e

    @staticmethod
    def _error_body(response: Optional[requests.Response]) -> Any:
        if response is None:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _list(self, path: str, operation: str) -> List[Comment]:
        data = self._request("GET", path, operation) or []
        try:
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return [Comment.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            url = urljoin(self.api_url, path)
            error_msg = f"Failed to {operation}: unexpected response shape: {e}"
            self.logger.error(error_msg, extra={"url": url, "error_type": type(e).__name__})
            raise GitHubAPIError(error_msg, response_body=data, endpoint=url) from e

    # ------------------------------------------------------------------
    # Commit comments
    # https://docs.github.com/en/rest/commits/comments
    # ------------------------------------------------------------------

    def list_commit_comments(self, owner: str, repo: str, sha: str) -> List[Comment]:
        """List comments on a commit (first page only)."""
        return self._list(f"repos/{owner}/{repo}/commits/{sha}/comments", "list commit comments")

    def create_commit_comment(self, owner: str, repo: str, sha: str, body: str) -> Comment:
        """Create a comment on a commit."""
        data = self._request(
            "POST",
            f"repos/{owner}/{repo}/commits/{sha}/comments",
            "create commit comment",
            payload={"body": body}
        )
        return Comment.from_api(data)

    def edit_commit_comment(self, owner: str, repo: str, comment_id: int, body: str) -> Comment:
        """Replace the body of a commit comment."""
        data = self._request(
            "PATCH",
            f"repos/{owner}/{repo}/comments/{comment_id}",
            "update commit comment",
            payload={"body": body}
        )
        return Comment.from_api(data)

    def delete_commit_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete a commit comment."""
        self._request("DELETE", f"repos/{owner}/{repo}/comments/{comment_id}", "delete commit comment")

    # ------------------------------------------------------------------
    # Issue and pull request conversation comments
    # https://docs.github.com/en/rest/issues/comments
    # ------------------------------------------------------------------

    def list_issue_comments(self, owner: str, repo: str, number: int) -> List[Comment]:
        """List comments on an issue or pull request conversation (first page only)."""
        return self._list(f"repos/{owner}/{repo}/issues/{number}/comments", "list Issue/PR comments")

    def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> Comment:
        """Create a comment on an issue or pull request conversation."""
        data = self._request(
            "POST",
            f"repos/{owner}/{repo}/issues/{number}/comments",
            "create Issue/PR comment",
            payload={"body": body}
        )
        return Comment.from_api(data)

    def edit_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> Comment:
        """Replace the body of an issue comment."""
        data = self._request(
            "PATCH",
            f"repos/{owner}/{repo}/issues/comments/{comment_id}",
            "update Issue/PR comment",
            payload={"body": body}
        )
        return Comment.from_api(data)

    def delete_issue_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete an issue comment."""
        self._request("DELETE", f"repos/{owner}/{repo}/issues/comments/{comment_id}", "delete Issue/PR comment")

    # ------------------------------------------------------------------
    # Pull request file (review) comments
    # https://docs.github.com/en/rest/pulls/comments
    # ------------------------------------------------------------------

    def list_pull_request_comments(self, owner: str, repo: str, number: int) -> List[Comment]:
        """List review comments on a pull request's diff (first page only)."""
        return self._list(f"repos/{owner}/{repo}/pulls/{number}/comments", "list PR file comments")

    def create_pull_request_comment(
        self,
        owner: str,
        repo: str,
        number: int,
        body: str,
        commit_id: str,
        path: str,
        position: int
    ) -> Comment:
        """Create a comment on a line of a pull request's diff."""
        data = self._request(
            "POST",
            f"repos/{owner}/{repo}/pulls/{number}/comments",
            "create PR file comment",
            payload={
                "body": body,
                "commit_id": commit_id,
                "path": path,
                "position": position
            }
        )
        return Comment.from_api(data)

    def edit_pull_request_comment(self, owner: str, repo: str, comment_id: int, body: str) -> Comment:
        """
        Replace the body of a pull request file comment.

        Only the body is sent; the API rejects edits that include path,
        position or commit_id.
        """
        data = self._request(
            "PATCH",
            f"repos/{owner}/{repo}/pulls/comments/{comment_id}",
            "update PR file comment",
            payload={"body": body}
        )
        return Comment.from_api(data)

    def delete_pull_request_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete a pull request file comment."""
        self._request("DELETE", f"repos/{owner}/{repo}/pulls/comments/{comment_id}", "delete PR file comment")

    # ------------------------------------------------------------------
    # Pull request reviews and lookups
    # ------------------------------------------------------------------

    def create_review(self, owner: str, repo: str, number: int, body: str) -> Comment:
        """Create a pull request review with the ``COMMENT`` event."""
        data = self._request(
            "POST",
            f"repos/{owner}/{repo}/pulls/{number}/reviews",
            "create PR review",
            payload={"body": body, "event": "COMMENT"}
        )
        return Comment.from_api(data)

    def list_pull_requests_with_commit(self, owner: str, repo: str, sha: str) -> List[Dict[str, Any]]:
        """
        List pull requests associated with a commit (first page only).

        The endpoint takes no state or base-branch filters; callers filter
        the returned pull request objects themselves.

        Returns:
            Pull request objects in the order returned by the API
        """
        path = f"repos/{owner}/{repo}/commits/{sha}/pulls"
        data = self._request("GET", path, "list pull requests with commit")
        if data is not None and not isinstance(data, list):
            raise GitHubAPIError(
                "Failed to list pull requests with commit: unexpected response shape",
                response_body=data,
                endpoint=urljoin(self.api_url, path)
            )
        return data or []
