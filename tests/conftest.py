"""Pytest configuration.

Makes `postmark_client` importable from a plain checkout (without an
editable install) by adding the repository root to `sys.path` during test
collection, and provides shared fixtures.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

REPO_ROOT = Path(__file__).resolve().parents[1]

# NOTE: Insert at the front so the checkout wins over an installed copy.
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def _build_response(status_code: int = 200, text: str = "") -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def make_response():
    """Factory for stand-ins of requests.Response with a fixed status and body."""
    return _build_response


@pytest.fixture
def mock_session() -> MagicMock:
    """A requests.Session double whose post() returns an empty 200 by default."""
    session = MagicMock(spec=requests.Session)
    session.post.return_value = _build_response(200, "{}")
    return session
