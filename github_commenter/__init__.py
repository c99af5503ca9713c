"""
github-commenter: create, edit or delete GitHub comments from CI pipelines.
"""

from .formatter import CommentFormatter
from .models import Comment, OutcomeKind, ReconciliationOutcome
from .reconciler import CommentReconciler, compile_pattern

__version__ = "1.0.0"

__all__ = [
    "Comment",
    "CommentFormatter",
    "CommentReconciler",
    "OutcomeKind",
    "ReconciliationOutcome",
    "compile_pattern",
]
