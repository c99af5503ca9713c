"""
Comment targets for github-commenter.

Turns validated settings into a target descriptor and maps each target
variant onto the GitHub client operations that list, create, edit and
delete comments on that surface.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .config.settings import Settings
from .github_client import GitHubClient
from .models import (
    Comment,
    CommentType,
    CommitTarget,
    IssueOrPRTarget,
    PRFileTarget,
    PRReviewTarget,
    Target,
)
from .utils.exceptions import PullRequestResolutionError, ValidationError
from .utils.logger import get_logger


logger = get_logger(__name__)

# Optionally signed ASCII decimal integer
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class CommentSurface:
    """
    The collaborator operations available for one target.

    PR reviews only support ``create_comment``; the other operations are
    None for them.
    """
    label: str
    create_comment: Callable[[str], Comment]
    list_comments: Optional[Callable[[], List[Comment]]] = None
    edit_comment: Optional[Callable[[int, str], Comment]] = None
    delete_comment: Optional[Callable[[int], None]] = None

    @property
    def supports_reconciliation(self) -> bool:
        return self.list_comments is not None and self.edit_comment is not None and self.delete_comment is not None


def _parse_int(value: Optional[str], flag: str, env_var: str) -> int:
    if value is None or str(value).strip() == "":
        raise ValidationError(f"-{flag} or {env_var} required", config_key=flag)
    text = str(value).strip()
    if not INTEGER_PATTERN.fullmatch(text):
        raise ValidationError(
            f"-{flag} or {env_var} must be an integer",
            config_key=flag,
            config_value=str(value)
        )
    return int(text)


class TargetFactory:
    """
    Builds the target descriptor for the configured comment type.

    ``validate`` checks every type-specific field without touching the
    network, so it can run before the comment body is read. ``build``
    may call the API to resolve a pull request number from a commit SHA.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.comment_type = CommentType(settings.comment_type)
        self._number: Optional[int] = None
        self._position: Optional[int] = None
        self._validated = False

    @property
    def resolves_pr_from_sha(self) -> bool:
        return self.settings.use_sha_for_pr and self.comment_type in (CommentType.PR_REVIEW, CommentType.PR_FILE)

    def validate(self) -> None:
        """
        Check the fields required by the comment type.

        Raises:
            ValidationError: If a required field is missing or malformed
        """
        s = self.settings
        kind = self.comment_type

        if kind == CommentType.COMMIT:
            self._require_sha()

        elif kind in (CommentType.ISSUE, CommentType.PR):
            self._number = _parse_int(s.number, "number", "GITHUB_PR_ISSUE_NUMBER")

        elif kind == CommentType.PR_REVIEW:
            if self.resolves_pr_from_sha:
                self._require_pr_lookup_fields()
            else:
                self._number = _parse_int(s.number, "number", "GITHUB_PR_ISSUE_NUMBER")

        elif kind == CommentType.PR_FILE:
            if self.resolves_pr_from_sha:
                self._require_pr_lookup_fields()
            else:
                self._number = _parse_int(s.number, "number", "GITHUB_PR_ISSUE_NUMBER")
            self._require_sha()
            if not s.file:
                raise ValidationError("-file or GITHUB_PR_FILE required", config_key="file")
            self._position = _parse_int(s.position, "position", "GITHUB_PR_FILE_POSITION")

        self._validated = True

    def _require_sha(self) -> None:
        if not self.settings.sha:
            raise ValidationError("-sha or GITHUB_COMMIT_SHA required", config_key="sha")

    def _require_pr_lookup_fields(self) -> None:
        s = self.settings
        if not s.base_branch or not s.pr_state:
            raise ValidationError(
                "( -pr-state or GITHUB_PR_STATE ) and ( -base-branch or GITHUB_PR_BASE_BRANCH ) "
                "must be provided when using flag -use-sha-for-pr",
                config_key="use_sha_for_pr"
            )
        self._require_sha()

    def build(self, client: GitHubClient) -> Target:
        """
        Build the target descriptor, resolving the PR number if configured.

        Args:
            client: GitHub client used for the commit-to-PR lookup

        Returns:
            Target descriptor for the configured comment type
        """
        if not self._validated:
            self.validate()

        s = self.settings
        kind = self.comment_type

        if kind == CommentType.COMMIT:
            return CommitTarget(owner=s.owner, repo=s.repo, sha=s.sha)

        if kind in (CommentType.ISSUE, CommentType.PR):
            return IssueOrPRTarget(owner=s.owner, repo=s.repo, number=self._number)

        number = self._number
        if self.resolves_pr_from_sha:
            number = resolve_pull_request_number(client, s.owner, s.repo, s.sha, s.pr_state, s.base_branch)

        if kind == CommentType.PR_REVIEW:
            return PRReviewTarget(owner=s.owner, repo=s.repo, pr_number=number)

        return PRFileTarget(
            owner=s.owner,
            repo=s.repo,
            pr_number=number,
            sha=s.sha,
            file_path=s.file,
            position=self._position
        )


def resolve_pull_request_number(
    client: GitHubClient,
    owner: str,
    repo: str,
    sha: str,
    state: str,
    base: str
) -> int:
    """
    Find the pull request containing a commit.

    The pull requests returned for the commit are filtered by state (``all``
    matches any state) and base branch; the first match in the order the API
    returns them is taken.

    Raises:
        PullRequestResolutionError: If no pull request matches
    """
    candidates = client.list_pull_requests_with_commit(owner, repo, sha)
    pull_requests = [pr for pr in candidates if _pull_request_matches(pr, state, base)]
    if not pull_requests:
        raise PullRequestResolutionError(
            f"No {state} pull request against '{base}' contains commit {sha}",
            sha=sha
        )

    number = int(pull_requests[0]["number"])
    logger.info(
        "Resolved pull request from commit",
        extra={
            "sha": sha,
            "pr_number": number,
            "candidates": len(candidates),
            "matches": len(pull_requests)
        }
    )
    return number


def _pull_request_matches(pull_request: Dict[str, Any], state: str, base: str) -> bool:
    if state.lower() != "all" and str(pull_request.get("state", "")).lower() != state.lower():
        return False
    return (pull_request.get("base") or {}).get("ref") == base


def _commit_surface(client: GitHubClient, target: CommitTarget) -> CommentSurface:
    return CommentSurface(
        label="commit",
        list_comments=lambda: client.list_commit_comments(target.owner, target.repo, target.sha),
        create_comment=lambda body: client.create_commit_comment(target.owner, target.repo, target.sha, body),
        edit_comment=lambda comment_id, body: client.edit_commit_comment(target.owner, target.repo, comment_id, body),
        delete_comment=lambda comment_id: client.delete_commit_comment(target.owner, target.repo, comment_id),
    )


def _issue_surface(client: GitHubClient, target: IssueOrPRTarget) -> CommentSurface:
    return CommentSurface(
        label="Issue/PR",
        list_comments=lambda: client.list_issue_comments(target.owner, target.repo, target.number),
        create_comment=lambda body: client.create_issue_comment(target.owner, target.repo, target.number, body),
        edit_comment=lambda comment_id, body: client.edit_issue_comment(target.owner, target.repo, comment_id, body),
        delete_comment=lambda comment_id: client.delete_issue_comment(target.owner, target.repo, comment_id),
    )


def _pr_review_surface(client: GitHubClient, target: PRReviewTarget) -> CommentSurface:
    return CommentSurface(
        label="PR Review",
        create_comment=lambda body: client.create_review(target.owner, target.repo, target.pr_number, body),
    )


def _pr_file_surface(client: GitHubClient, target: PRFileTarget) -> CommentSurface:
    return CommentSurface(
        label="PR file",
        list_comments=lambda: client.list_pull_request_comments(target.owner, target.repo, target.pr_number),
        create_comment=lambda body: client.create_pull_request_comment(
            target.owner,
            target.repo,
            target.pr_number,
            body,
            commit_id=target.sha,
            path=target.file_path,
            position=target.position
        ),
        edit_comment=lambda comment_id, body: client.edit_pull_request_comment(target.owner, target.repo, comment_id, body),
        delete_comment=lambda comment_id: client.delete_pull_request_comment(target.owner, target.repo, comment_id),
    )


SURFACE_BUILDERS: Dict[type, Callable[[GitHubClient, Target], CommentSurface]] = {
    CommitTarget: _commit_surface,
    IssueOrPRTarget: _issue_surface,
    PRReviewTarget: _pr_review_surface,
    PRFileTarget: _pr_file_surface,
}


def build_surface(client: GitHubClient, target: Target) -> CommentSurface:
    """Map a target descriptor to its comment surface."""
    try:
        builder = SURFACE_BUILDERS[type(target)]
    except KeyError:
        raise TypeError(f"Unsupported target type: {type(target).__name__}")
    return builder(client, target)
