"""
Data models for github-commenter.

Defines the comment snapshot returned by the GitHub API, the target
descriptors that address a comment surface, and the outcome of a
reconciliation run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class CommentType(Enum):
    """Comment surfaces selectable with ``--type``."""
    COMMIT = "commit"
    PR = "pr"
    ISSUE = "issue"
    PR_REVIEW = "pr-review"
    PR_FILE = "pr-file"


@dataclass(frozen=True)
class Comment:
    """An existing comment as returned by a list or create call."""
    id: int
    body: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Comment":
        """Build a Comment from a GitHub API payload, reading only id and body."""
        return cls(id=int(data["id"]), body=data.get("body") or "")


@dataclass(frozen=True)
class CommitTarget:
    owner: str
    repo: str
    sha: str


@dataclass(frozen=True)
class IssueOrPRTarget:
    """Issues and pull requests share the issue-comment surface."""
    owner: str
    repo: str
    number: int


@dataclass(frozen=True)
class PRReviewTarget:
    owner: str
    repo: str
    pr_number: int


@dataclass(frozen=True)
class PRFileTarget:
    """A line in a pull request's diff, addressed by file path and diff position."""
    owner: str
    repo: str
    pr_number: int
    sha: str
    file_path: str
    position: int


Target = Union[CommitTarget, IssueOrPRTarget, PRReviewTarget, PRFileTarget]


class OutcomeKind(Enum):
    """Terminal states of a reconciliation run."""
    CREATED = "created"
    EDITED = "edited"
    DELETED_THEN_CREATED = "deleted_then_created"


@dataclass(frozen=True)
class ReconciliationOutcome:
    """
    Result of one reconciliation run.

    ``comment_ids`` holds the created comment's id, or the ids of the
    edited comments. ``deleted_ids`` lists comments removed by the delete
    phase, which can be non-empty for an ``EDITED`` outcome too.
    """
    kind: OutcomeKind
    comment_ids: Tuple[int, ...]
    deleted_ids: Tuple[int, ...] = field(default_factory=tuple)

    @classmethod
    def created(cls, new_id: int, deleted_ids: Tuple[int, ...] = ()) -> "ReconciliationOutcome":
        kind = OutcomeKind.DELETED_THEN_CREATED if deleted_ids else OutcomeKind.CREATED
        return cls(kind=kind, comment_ids=(new_id,), deleted_ids=tuple(deleted_ids))

    @classmethod
    def edited(cls, edited_ids: Tuple[int, ...], deleted_ids: Tuple[int, ...] = ()) -> "ReconciliationOutcome":
        return cls(kind=OutcomeKind.EDITED, comment_ids=tuple(edited_ids), deleted_ids=tuple(deleted_ids))

    @property
    def new_id(self) -> Optional[int]:
        """Id of the created comment, or None when existing comments were edited."""
        if self.kind == OutcomeKind.EDITED:
            return None
        return self.comment_ids[0]
