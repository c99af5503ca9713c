"""
Configuration module for github-commenter.
"""

from .settings import Settings, COMMENT_TYPES, ENV_MAPPING

__all__ = ["Settings", "COMMENT_TYPES", "ENV_MAPPING"]
