"""Pytest configuration - loads .env for integration tests and provides a fake transport."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from tests.fakes import FakeOpener

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@pytest.fixture
def opener() -> FakeOpener:
    return FakeOpener()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove OPENAI_* variables so tests see only explicit configuration."""
    for name in ("OPENAI_API_KEY", "OPENAI_ORGANIZATION", "OPENAI_REQUEST_TIMEOUT", "OPENAI_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
