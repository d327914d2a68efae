"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import MagicMock, patch

from jira_cli.config import ENV_VAR_NAMES


@pytest.fixture
def sample_env():
    """Sample environment variables."""
    return {
        "JIRA_API_KEY": "test-token-12345",
        "JIRA_ENDPOINT": "acme.atlassian.net",
        "JIRA_USER_EMAIL": "test@example.com",
    }


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove Jira variables and run from an empty directory (no .env)."""
    for name in ENV_VAR_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_myself_response():
    """Mock Jira /myself response."""
    return {
        "accountId": "user-123",
        "displayName": "Test User",
        "emailAddress": "test@example.com"
    }


@pytest.fixture
def make_worklog_json():
    """Factory for Jira worklog JSON objects."""
    def _make(started="2024-07-12T10:00:00.000+0000", time_spent="6h", seconds=21600,
              author="Test User", text="I did some work here", worklog_id="10001"):
        return {
            "id": worklog_id,
            "author": {"accountId": "user-123", "displayName": author},
            "comment": {
                "type": "doc",
                "version": 1,
                "content": [
                    {"type": "paragraph", "content": [{"type": "text", "text": text}]}
                ],
            },
            "started": started,
            "timeSpent": time_spent,
            "timeSpentSeconds": seconds,
        }
    return _make


@pytest.fixture
def make_issue_json():
    """Factory for Jira issue JSON objects."""
    def _make(key="PROJ-123", summary="Test Issue Summary",
              updated="2024-07-15T09:30:00.000+0000", issue_id="10100"):
        return {
            "id": issue_id,
            "key": key,
            "fields": {"summary": summary, "updated": updated},
        }
    return _make


@pytest.fixture
def mock_requests_session():
    """Mock requests session for API testing."""
    with patch("requests.Session") as mock_session:
        mock_instance = MagicMock()
        mock_instance.headers = {}
        mock_session.return_value = mock_instance
        yield mock_instance


def make_response(status_code=200, json_data=None, text=""):
    """Build a mock requests response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def response_factory():
    """Expose make_response to tests."""
    return make_response
