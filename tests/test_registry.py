import asyncio
import logging

import pytest

from streaming_mcp_client.llm_core import (
    ProviderConnectionError,
    SessionCloseError,
    SessionRegistry,
    ToolDescriptor,
    ToolRegistrationError,
)
from fakes import FakeProvider, FakeSession


@pytest.mark.asyncio
async def test_disjoint_tools_resolve_to_their_session(registry: SessionRegistry) -> None:
    first = FakeSession(["read", "write"])
    second = FakeSession(["search"])

    await registry.register(FakeProvider(first, "fs"))
    await registry.register(FakeProvider(second, "web"))

    assert registry.resolve("read") is first
    assert registry.resolve("write") is first
    assert registry.resolve("search") is second
    assert registry.resolve("missing") is None
    assert [d.name for d in registry.catalog()] == ["read", "write", "search"]
    assert "search" in registry
    assert len(registry) == 3


@pytest.mark.asyncio
async def test_collision_last_registration_wins(registry: SessionRegistry, caplog: pytest.LogCaptureFixture) -> None:
    first = FakeSession(["shared", "only_first"])
    second = FakeSession(["shared"])

    await registry.register(FakeProvider(first, "a"))
    with caplog.at_level(logging.WARNING):
        await registry.register(FakeProvider(second, "b"))

    assert registry.resolve("shared") is second
    assert registry.resolve("only_first") is first
    assert [d.name for d in registry.catalog()] == ["only_first", "shared"]
    assert "already registered" in caplog.text


@pytest.mark.asyncio
async def test_reject_duplicates_is_atomic() -> None:
    registry = SessionRegistry(reject_duplicates=True)
    first = FakeSession(["shared"])
    second = FakeSession(["fresh", "shared"])

    await registry.register(FakeProvider(first, "a"))
    with pytest.raises(ToolRegistrationError):
        await registry.register(FakeProvider(second, "b"))

    assert registry.resolve("shared") is first
    assert registry.resolve("fresh") is None
    assert second.close_count == 1


@pytest.mark.asyncio
async def test_connect_failure_raises_connection_error(registry: SessionRegistry) -> None:
    provider = FakeProvider(FakeSession(["x"]), "broken", connect_error=OSError("spawn failed"))

    with pytest.raises(ProviderConnectionError) as excinfo:
        await registry.register(provider)

    assert isinstance(excinfo.value, ConnectionError)
    assert "broken" in str(excinfo.value)
    assert registry.catalog() == []


@pytest.mark.asyncio
async def test_list_failure_publishes_nothing_and_closes_session(registry: SessionRegistry) -> None:
    session = FakeSession(["x"])
    session.list_error = RuntimeError("no tools for you")

    with pytest.raises(ProviderConnectionError):
        await registry.register(FakeProvider(session, "flaky"))

    assert registry.resolve("x") is None
    assert session.close_count == 1


@pytest.mark.asyncio
async def test_register_many_runs_concurrently(registry: SessionRegistry) -> None:
    sessions = [FakeSession([f"tool_{i}"]) for i in range(5)]

    descriptors = await registry.register_many(FakeProvider(s, f"p{i}") for i, s in enumerate(sessions))

    assert sorted(d.name for d in descriptors) == [f"tool_{i}" for i in range(5)]
    for i, session in enumerate(sessions):
        assert registry.resolve(f"tool_{i}") is session


@pytest.mark.asyncio
async def test_register_many_surfaces_failure_after_others_complete(registry: SessionRegistry) -> None:
    good = FakeSession(["ok"])
    bad = FakeProvider(FakeSession(["nope"]), "bad", connect_error=OSError("down"))

    with pytest.raises(ProviderConnectionError):
        await registry.register_many([FakeProvider(good, "good"), bad])

    assert registry.resolve("ok") is good


@pytest.mark.asyncio
async def test_close_all_closes_each_session_once(registry: SessionRegistry) -> None:
    shared = FakeSession(["a", "b", "c"])
    other = FakeSession(["d"])
    await registry.register(FakeProvider(shared))
    await registry.register(FakeProvider(other))

    await registry.close_all()

    assert shared.close_count == 1
    assert other.close_count == 1
    assert registry.catalog() == []
    assert registry.resolve("a") is None


@pytest.mark.asyncio
async def test_close_all_attempts_every_session_and_collects_errors(registry: SessionRegistry) -> None:
    failing_1 = FakeSession(["a"], close_error=RuntimeError("first"))
    healthy = FakeSession(["b"])
    failing_2 = FakeSession(["c"], close_error=RuntimeError("second"))
    for session in (failing_1, healthy, failing_2):
        await registry.register(FakeProvider(session))

    with pytest.raises(SessionCloseError) as excinfo:
        await registry.close_all()

    assert healthy.close_count == 1
    assert failing_1.close_count == 1
    assert failing_2.close_count == 1
    assert sorted(str(e) for e in excinfo.value.errors) == ["first", "second"]


@pytest.mark.asyncio
async def test_parameter_schemas_are_prepared(registry: SessionRegistry) -> None:
    session = FakeSession([])
    session.descriptors = [
        ToolDescriptor(
            name="create",
            description="create an item",
            parameters={
                "$schema": "http://json-schema.org/draft-07/schema#",
                "title": "CreateArgs",
                "type": "object",
                "properties": {"item": {"$ref": "#/$defs/Item"}, "title": {"type": "string"}},
                "$defs": {"Item": {"type": "object", "title": "Item", "properties": {"id": {"type": "integer"}}}},
            },
        )
    ]

    await registry.register(FakeProvider(session))

    parameters = registry.catalog()[0].parameters
    assert "$schema" not in parameters
    assert "$defs" not in parameters
    assert parameters["properties"]["item"] == {"type": "object", "properties": {"id": {"type": "integer"}}}
    assert parameters["properties"]["title"] == {"type": "string"}


@pytest.mark.asyncio
async def test_tool_object_and_describe(registry: SessionRegistry) -> None:
    await registry.register(FakeProvider(FakeSession(["echo"])))

    assert registry.tool_object == [
        {
            "type": "function",
            "function": {
                "name": "echo",
                "description": "echo tool",
                "parameters": {"type": "object", "properties": {}},
            },
        }
    ]
    assert "Tool: echo" in registry.describe()


@pytest.mark.asyncio
async def test_concurrent_inserts_are_linearized(registry: SessionRegistry) -> None:
    """Every concurrent registration of the same name leaves a consistent route and catalog entry."""
    sessions = [FakeSession(["same"]) for _ in range(10)]

    await asyncio.gather(*(registry.add_session(s, s.descriptors) for s in sessions))

    assert len(registry.catalog()) == 1
    assert registry.resolve("same") in sessions
