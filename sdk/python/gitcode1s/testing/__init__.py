"""gitcode1s testing utilities.

Provides an in-memory data source and fixtures for testing code built on gitcode1s.
"""

from gitcode1s.testing.fixtures import (
    api_payload_branch,
    api_payload_pull,
    create_mock_branch,
    create_mock_code_review,
    create_mock_commit,
)
from gitcode1s.testing.mock import MockCall, MockDataSource, MockRepository

__all__ = [
    # Mock data source
    "MockDataSource",
    "MockRepository",
    "MockCall",
    # Helper functions
    "create_mock_branch",
    "create_mock_commit",
    "create_mock_code_review",
    "api_payload_branch",
    "api_payload_pull",
]
