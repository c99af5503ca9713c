"""
github-commenter main entry point.

Orchestrates one invocation: settings, body formatting, pattern
compilation, target resolution and comment reconciliation. All errors
propagate here and are mapped to log output and an exit code.
"""

import sys
from typing import List, Optional

from .cli_handler import CLIHandler
from .formatter import CommentFormatter
from .github_client import GitHubClient
from .models import ReconciliationOutcome
from .reconciler import CommentReconciler, compile_pattern
from .targets import TargetFactory, build_surface
from .utils.exceptions import CommenterError, RegexCompileError, ValidationError
from .utils.logger import get_logger, set_log_context, setup_logging


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class CommenterApp:
    """
    Main application class that ties the components together:

    - CLI Handler for argument parsing and settings
    - Comment Formatter for templating
    - Target Factory and GitHub client for addressing the comment surface
    - Comment Reconciler for the delete/edit/create decision
    """

    def __init__(self, cli_handler: Optional[CLIHandler] = None, client_factory=GitHubClient.from_settings):
        self.cli_handler = cli_handler or CLIHandler()
        self.client_factory = client_factory
        self.logger = get_logger("github_commenter")

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Run one invocation.

        Args:
            argv: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        args = self.cli_handler.parse_args(argv)

        try:
            settings = self.cli_handler.build_settings(args)
        except ValidationError as e:
            setup_logging()
            return self._usage_error(e)

        self.cli_handler.setup_logging(settings)
        set_log_context(owner=settings.owner, repo=settings.repo, comment_type=settings.comment_type)

        try:
            outcome = self.execute(settings)
        except KeyboardInterrupt:
            self.logger.info("Interrupted by user")
            return EXIT_INTERRUPTED
        except (ValidationError, RegexCompileError) as e:
            return self._usage_error(e)
        except CommenterError as e:
            self.logger.error(e.message, extra={"error_code": e.error_code, "details": e.details})
            return EXIT_FAILURE
        except Exception as e:
            self.logger.error(f"Unexpected error: {e}", exc_info=True)
            return EXIT_FAILURE

        self.logger.info(
            f"Reconciliation finished: {outcome.kind.value}",
            extra={
                "outcome": outcome.kind.value,
                "comment_ids": list(outcome.comment_ids),
                "deleted_ids": list(outcome.deleted_ids)
            }
        )
        return EXIT_SUCCESS

    def execute(self, settings) -> ReconciliationOutcome:
        """
        Perform the invocation described by settings.

        Every check that does not need the network runs before the first
        API call, so validation and template failures have no remote side
        effects.
        """
        factory = TargetFactory(settings)
        factory.validate()

        comment = self.cli_handler.read_comment(settings)
        formatted = CommentFormatter.from_settings(settings).format(comment)

        delete_pattern = compile_pattern(settings.delete_comment_regex, "delete-comment-regex")
        edit_pattern = compile_pattern(settings.edit_comment_regex, "edit-comment-regex")

        client = self.client_factory(settings)
        target = factory.build(client)
        surface = build_surface(client, target)

        return CommentReconciler(surface).reconcile(formatted, delete_pattern, edit_pattern)

    def _usage_error(self, error: CommenterError) -> int:
        self.cli_handler.print_usage()
        self.logger.error(error.message, extra={"error_code": error.error_code})
        return EXIT_USAGE


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    return CommenterApp().run(argv)


if __name__ == "__main__":
    sys.exit(main())
