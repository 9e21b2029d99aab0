"""Pytest configuration and shared fixtures."""

import pytest


@pytest.fixture(scope="module")
def anyio_backend():
    """Run async tests on asyncio, the loop the endpoints are written for."""
    return "asyncio"
