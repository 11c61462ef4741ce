import asyncio
import io

from streaming_mcp_client.cli import ANSI, InterruptController, render_event
from streaming_mcp_client.llm_core import StreamFragment, ToolMessage, ToolResult
from fakes import heartbeat_chunk, make_chunk, tool_fragment


def test_interrupt_cancels_running_turn() -> None:
    interrupts = InterruptController()
    cancel_event = interrupts.begin_turn()

    interrupts.on_interrupt()

    assert cancel_event.is_set()
    assert not interrupts.quit_event.is_set()
    assert interrupts.in_turn


def test_interrupt_when_idle_quits() -> None:
    interrupts = InterruptController()
    interrupts.begin_turn()
    interrupts.end_turn()

    interrupts.on_interrupt()

    assert not interrupts.in_turn
    assert interrupts.quit_event.is_set()


def test_each_turn_gets_a_fresh_signal() -> None:
    interrupts = InterruptController()
    first = interrupts.begin_turn()
    interrupts.on_interrupt()
    interrupts.end_turn()

    second = interrupts.begin_turn()

    assert first.is_set()
    assert isinstance(second, asyncio.Event)
    assert not second.is_set()


def test_render_text_and_tool_fragments() -> None:
    out = io.StringIO()

    render_event(StreamFragment(make_chunk(content="Hello")), out)
    render_event(StreamFragment(make_chunk(tool_calls=[tool_fragment(0, "call_1", "search", '{"q"')])), out)
    render_event(StreamFragment(heartbeat_chunk()), out)

    text = out.getvalue()
    assert text.startswith("Hello")
    assert f"{ANSI['GRAY']}<Tool call_1>{ANSI['RESET']}" in text
    assert '{"q"' in text


def test_render_tool_result() -> None:
    out = io.StringIO()

    render_event(ToolResult(ToolMessage(tool_call_id="call_1", name="search", content="42 results")), out)

    assert "Tool[search] call_1" in out.getvalue()
    assert "42 results" in out.getvalue()
