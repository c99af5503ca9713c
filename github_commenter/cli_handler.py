"""
CLI Handler for github-commenter.

This module handles command-line argument parsing, resolves settings
from flags and environment variables, and reads the comment body.
"""

import argparse
import sys
from typing import Any, Dict, Optional, List, TextIO

from .config.settings import Settings
from .utils.exceptions import ValidationError
from .utils.logger import get_logger, setup_logging


class CLIHandler:
    """
    Handles command-line interface for the commenter.

    This class is responsible for:
    - Parsing command-line arguments (each flag falls back to an env var)
    - Building the immutable Settings for the run
    - Setting up logging configuration
    - Reading the comment body from the flag or standard input
    """

    def __init__(self, stdin: Optional[TextIO] = None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.parser = self.create_parser()
        self.logger = None

    def create_parser(self) -> argparse.ArgumentParser:
        """
        Create and configure the argument parser.

        Options accept both ``-name`` and ``--name``. Unset options default
        to None so the environment variable fallback can apply.
        """
        parser = argparse.ArgumentParser(
            prog="github-commenter",
            description="Create, edit or delete GitHub comments on commits, issues, pull requests, PR reviews and PR files",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Comment on a commit
  github-commenter -owner acme -repo widgets -type commit -sha $SHA -comment "Build passed"

  # Update the previous report on a PR, or create it on the first run
  terraform plan | github-commenter -type pr -number 42 \\
      -template_file report.md.j2 -edit-comment-regex "^### Terraform plan"

  # Replace earlier lint annotations on a PR file line
  github-commenter -type pr-file -number 42 -sha $SHA -file src/app.py -position 7 \\
      -delete-comment-regex "lint:" -comment "lint: unused import"
            """
        )

        def add(*names: str, **kwargs: Any) -> None:
            kwargs.setdefault("default", None)
            parser.add_argument(*names, **kwargs)

        add("--token", "-token", help="Github access token (GITHUB_TOKEN)")
        add("--owner", "-owner", help="Github repository owner (GITHUB_OWNER)")
        add("--repo", "-repo", help="Github repository name (GITHUB_REPO)")
        add(
            "--type", "-type",
            dest="comment_type",
            help="Comment type: 'commit', 'pr', 'issue', 'pr-review' or 'pr-file' (GITHUB_COMMENT_TYPE)"
        )
        add("--sha", "-sha", help="Commit SHA (GITHUB_COMMIT_SHA)")
        add("--number", "-number", help="Pull Request or Issue number (GITHUB_PR_ISSUE_NUMBER)")
        add("--file", "-file", help="Pull Request File Name (GITHUB_PR_FILE)")
        add("--position", "-position", help="Position in Pull Request File (GITHUB_PR_FILE_POSITION)")

        add(
            "--template", "-template",
            help="Template to format comment: 'My comment:<br/>{{.}}'. "
                 "Use either template or template_file (GITHUB_COMMENT_TEMPLATE)"
        )
        add(
            "--template_file", "-template_file",
            dest="template_file",
            help="The path to a template file to format comment (GITHUB_COMMENT_TEMPLATE_FILE)"
        )
        add("--format", "-format", dest="format", help="Alias of template (GITHUB_COMMENT_FORMAT)")
        add(
            "--format_file", "-format_file",
            dest="format_file",
            help="Alias of template_file (GITHUB_COMMENT_FORMAT_FILE)"
        )
        add("--comment", "-comment", help="Comment text; read from stdin when unset (GITHUB_COMMENT)")

        add(
            "--delete-comment-regex", "-delete-comment-regex",
            dest="delete_comment_regex",
            help="Regex to find previous comments to delete before creating the new comment. "
                 "Supported for comment types commit, pr-file, issue and pr (GITHUB_DELETE_COMMENT_REGEX)"
        )
        add(
            "--edit-comment-regex", "-edit-comment-regex",
            dest="edit_comment_regex",
            help="Regex to find previous comments to replace with new content, or create new comment if none found. "
                 "Supported for comment types commit, pr-file, issue and pr (GITHUB_EDIT_COMMENT_REGEX)"
        )

        add("--baseURL", "-baseURL", dest="base_url", help="Base URL of github enterprise (GITHUB_BASE_URL)")
        add("--uploadURL", "-uploadURL", dest="upload_url", help="Upload URL of github enterprise (GITHUB_UPLOAD_URL)")
        add("--insecure", "-insecure", action="store_true", help="Ignore SSL certificate check (GITHUB_INSECURE)")
        add("--timeout", "-timeout", dest="timeout_seconds", help="Request timeout in seconds (GITHUB_TIMEOUT)")

        add(
            "--use-sha-for-pr", "-use-sha-for-pr",
            dest="use_sha_for_pr",
            action="store_true",
            help="Use commit sha to find PR number (GITHUB_USE_SHA_FOR_PR)"
        )
        add(
            "--pr-state", "-pr-state",
            dest="pr_state",
            help="State of the PR e.g closed,open (GITHUB_PR_STATE)"
        )
        add(
            "--base-branch", "-base-branch",
            dest="base_branch",
            help="Base branch of pull request (GITHUB_PR_BASE_BRANCH)"
        )

        # Logging options
        add(
            "--log-level", "-log-level",
            dest="log_level",
            type=str.upper,
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Logging level (LOG_LEVEL)"
        )
        add(
            "--log-format", "-log-format",
            dest="log_format",
            choices=["text", "json"],
            help="Log format (LOG_FORMAT)"
        )
        add("--log-file", "-log-file", dest="log_file", help="Also log JSON records to this file (LOG_FILE)")

        return parser

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Args:
            argv: List of command-line arguments (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(argv)

    def overrides_from_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        """
        Collect the values given on the command line.

        ``template`` wins over its ``format`` alias, and ``template_file``
        over ``format_file``.
        """
        overrides = {key: value for key, value in vars(args).items() if key not in ("format", "format_file")}
        overrides["template"] = args.template or args.format
        overrides["template_file"] = args.template_file or args.format_file
        return overrides

    def build_settings(self, args: argparse.Namespace) -> Settings:
        """
        Resolve Settings from parsed arguments and the environment.

        Raises:
            ValidationError: If a required value is missing or malformed
        """
        return Settings.from_sources(self.overrides_from_args(args))

    def setup_logging(self, settings: Settings) -> None:
        """Configure logging from settings."""
        setup_logging(
            level=settings.log_level,
            format_type=settings.log_format,
            log_file=settings.log_file
        )
        self.logger = get_logger("cli")

    def read_comment(self, settings: Settings) -> str:
        """
        Return the comment text from settings, or all of standard input.

        Raises:
            ValidationError: If standard input cannot be read
        """
        if settings.comment:
            return settings.comment

        try:
            return self.stdin.read()
        except (OSError, ValueError) as e:
            raise ValidationError(
                f"Comment must be provided either as command-line argument, ENV variable, or from 'stdin': {e}",
                config_key="comment"
            ) from e

    def print_usage(self, file: Optional[TextIO] = None) -> None:
        """Print usage to stderr, as done for every validation failure."""
        self.parser.print_usage(file or sys.stderr)
