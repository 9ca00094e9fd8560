"""
Pytest plugin for gitcode1s testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["gitcode1s.testing.conftest"]

Or import the fixtures directly:

    from gitcode1s.testing.fixtures import mock_data_source, mock_http
"""

# Re-export all fixtures for pytest auto-discovery
from gitcode1s.testing.fixtures import (
    mock_data_source,
    mock_data_source_with_repo,
    mock_http,
    recorded_requests,
    sample_code_review,
    sample_commit,
)

__all__ = [
    "mock_data_source",
    "mock_data_source_with_repo",
    "mock_http",
    "recorded_requests",
    "sample_commit",
    "sample_code_review",
]
