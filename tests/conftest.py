"""Shared fixtures for smoke tests requiring a real API key."""

from __future__ import annotations

import os

import pytest
from dotenv import load_dotenv

# Load API keys from .env.local (project root)
load_dotenv(".env.local")


def _has_key(env_var: str) -> bool:
    """Return True if the environment variable is set and non-placeholder."""
    val = os.environ.get(env_var, "")
    return bool(val) and val != "your-key-here"


@pytest.fixture(scope="session")
def requires_venice_key() -> None:
    """Skip the test if VENICE_API_KEY is missing or placeholder."""
    if not _has_key("VENICE_API_KEY"):
        pytest.skip("VENICE_API_KEY not set, skipping smoke test")


@pytest.fixture()
def venice_adapter(requires_venice_key):  # noqa: ARG001
    """Return a VeniceAdapter configured from environment variables."""
    from venice_llm.adapters.venice_adapter import VeniceAdapter
    from venice_llm.config import AdapterConfig

    return VeniceAdapter(AdapterConfig.from_env())
