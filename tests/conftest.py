"""
Configuration for pytest test suite
"""
import logging
import sys
from pathlib import Path

import pytest

# Make the package importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from github_commenter.config.settings import ENV_MAPPING  # noqa: E402
from github_commenter.utils.logger import set_log_context  # noqa: E402


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove every variable the commenter reads so tests are deterministic."""
    for env_vars in ENV_MAPPING.values():
        for name in env_vars:
            monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env file out of the tests
    monkeypatch.setattr("github_commenter.config.settings.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo setup_logging() changes to the root logger after each test."""
    root = logging.getLogger()
    handlers, filters, level = list(root.handlers), list(root.filters), root.level
    yield
    root.handlers[:] = handlers
    root.filters[:] = filters
    root.setLevel(level)
    set_log_context()


@pytest.fixture
def base_env():
    """Minimal environment for a valid invocation."""
    return {
        "GITHUB_TOKEN": "test_token",
        "GITHUB_OWNER": "acme",
        "GITHUB_REPO": "widgets",
    }
