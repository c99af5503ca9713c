"""
Configuration management for github-commenter.

Settings are resolved once at startup from command-line flags, falling
back to environment variables (optionally loaded from a ``.env`` file),
and are immutable afterwards.
"""

import os
from typing import Optional, Dict, Mapping, Any
from dataclasses import dataclass, field

from dotenv import load_dotenv

from ..utils.exceptions import ValidationError


COMMENT_TYPES = ("commit", "pr", "issue", "pr-review", "pr-file")

TRUE_VALUES = ("true", "1", "yes", "on")

# Settings field -> environment variables, in order of precedence
ENV_MAPPING: Dict[str, tuple] = {
    "token": ("GITHUB_TOKEN",),
    "owner": ("GITHUB_OWNER",),
    "repo": ("GITHUB_REPO",),
    "comment_type": ("GITHUB_COMMENT_TYPE",),
    "sha": ("GITHUB_COMMIT_SHA",),
    "number": ("GITHUB_PR_ISSUE_NUMBER",),
    "file": ("GITHUB_PR_FILE",),
    "position": ("GITHUB_PR_FILE_POSITION",),
    "template": ("GITHUB_COMMENT_TEMPLATE", "GITHUB_COMMENT_FORMAT"),
    "template_file": ("GITHUB_COMMENT_TEMPLATE_FILE", "GITHUB_COMMENT_FORMAT_FILE"),
    "comment": ("GITHUB_COMMENT",),
    "delete_comment_regex": ("GITHUB_DELETE_COMMENT_REGEX",),
    "edit_comment_regex": ("GITHUB_EDIT_COMMENT_REGEX",),
    "base_url": ("GITHUB_BASE_URL",),
    "upload_url": ("GITHUB_UPLOAD_URL",),
    "insecure": ("GITHUB_INSECURE",),
    "use_sha_for_pr": ("GITHUB_USE_SHA_FOR_PR",),
    "pr_state": ("GITHUB_PR_STATE",),
    "base_branch": ("GITHUB_PR_BASE_BRANCH",),
    "timeout_seconds": ("GITHUB_TIMEOUT",),
    "log_level": ("LOG_LEVEL",),
    "log_format": ("LOG_FORMAT",),
    "log_file": ("LOG_FILE",),
}

BOOLEAN_FIELDS = ("insecure", "use_sha_for_pr")


def parse_bool(value: Any) -> bool:
    """Interpret a flag or environment value as a boolean."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings for a single invocation.

    General fields are validated on instantiation; fields that only matter
    for one comment type are validated by ``TargetFactory``.
    """

    # GitHub access
    token: str = ""
    owner: str = ""
    repo: str = ""
    base_url: Optional[str] = None
    upload_url: Optional[str] = None
    insecure: bool = False
    timeout_seconds: int = 60

    # Comment target
    comment_type: str = ""
    sha: Optional[str] = None
    number: Optional[str] = None
    file: Optional[str] = None
    position: Optional[str] = None
    use_sha_for_pr: bool = False
    pr_state: Optional[str] = None
    base_branch: Optional[str] = None

    # Comment body
    comment: Optional[str] = None
    template: Optional[str] = None
    template_file: Optional[str] = None

    # Reconciliation patterns
    delete_comment_regex: Optional[str] = None
    edit_comment_regex: Optional[str] = None

    # Logging Configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")
    log_file: Optional[str] = field(default=None)

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.token:
            raise ValidationError("-token or GITHUB_TOKEN required", config_key="token")
        if not self.owner:
            raise ValidationError("-owner or GITHUB_OWNER required", config_key="owner")
        if not self.repo:
            raise ValidationError("-repo or GITHUB_REPO required", config_key="repo")
        if not self.comment_type:
            raise ValidationError("-type or GITHUB_COMMENT_TYPE required", config_key="comment_type")
        if self.comment_type not in COMMENT_TYPES:
            raise ValidationError(
                "-type or GITHUB_COMMENT_TYPE must be one of 'commit', 'pr', 'issue', 'pr-review' or 'pr-file'",
                config_key="comment_type",
                config_value=self.comment_type
            )

        if self.base_url or self.upload_url:
            if not self.base_url:
                raise ValidationError(
                    "-baseURL or GITHUB_BASE_URL required when using -uploadURL or GITHUB_UPLOAD_URL",
                    config_key="base_url"
                )
            if not self.upload_url:
                raise ValidationError(
                    "-uploadURL or GITHUB_UPLOAD_URL required when using -baseURL or GITHUB_BASE_URL",
                    config_key="upload_url"
                )

        if self.log_level.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValidationError(
                "log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL",
                config_key="log_level",
                config_value=self.log_level
            )
        if self.log_format.lower() not in ["text", "json"]:
            raise ValidationError(
                "log_format must be one of: text, json",
                config_key="log_format",
                config_value=self.log_format
            )
        if self.timeout_seconds <= 0:
            raise ValidationError("timeout must be a positive number of seconds", config_key="timeout_seconds")

    @classmethod
    def from_sources(
        cls,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """
        Create Settings from explicit values, falling back to environment variables.

        Args:
            overrides: Values from the command line; ``None`` means "not given"
            environ: Environment to read (defaults to ``os.environ`` after
                loading ``.env``)

        Returns:
            Validated Settings instance

        Raises:
            ValidationError: If a value is missing or malformed
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        overrides = overrides or {}

        values: Dict[str, Any] = {}
        for field_name, env_vars in ENV_MAPPING.items():
            value = overrides.get(field_name)
            if value is None or value == "":
                value = next((environ[name] for name in env_vars if environ.get(name)), None)
            if value is not None:
                values[field_name] = value

        for key in BOOLEAN_FIELDS:
            if key in values:
                values[key] = parse_bool(values[key])

        if "timeout_seconds" in values:
            try:
                values["timeout_seconds"] = int(values["timeout_seconds"])
            except (TypeError, ValueError):
                raise ValidationError(
                    "-timeout or GITHUB_TIMEOUT must be an integer",
                    config_key="timeout_seconds",
                    config_value=str(values["timeout_seconds"])
                )

        return cls(**values)
