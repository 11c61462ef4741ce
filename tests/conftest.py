import pytest

from streaming_mcp_client.llm_core import SessionRegistry


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()
