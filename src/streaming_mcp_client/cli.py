"""Interactive command line chat with MCP tools."""

import asyncio
import signal
import sys
import threading
from typing import Optional, TextIO

from .agent import Agent
from .config import ClientSettings
from .llm_core import (
    SessionCloseError,
    StreamFragment,
    StreamingMcpError,
    ToolResult,
    TurnCanceledError,
    TurnEvent,
    get_logger,
    setup_logging,
)
from .llm_impl.openai_api import McpClient

logger = get_logger(__name__)

# Utility ANSI codes for colorful output
ANSI = {
    "BLUE": "\x1b[34m",
    "GREEN": "\x1b[32m",
    "GRAY": "\x1b[90m",
    "RESET": "\x1b[0m",
}


class InterruptController:
    """Maps interrupts to actions: cancel the running turn, or quit when idle."""

    def __init__(self) -> None:
        self.turn_cancel_event: Optional[asyncio.Event] = None
        self.quit_event = asyncio.Event()

    def begin_turn(self) -> asyncio.Event:
        self.turn_cancel_event = asyncio.Event()
        return self.turn_cancel_event

    def end_turn(self) -> None:
        self.turn_cancel_event = None

    @property
    def in_turn(self) -> bool:
        return self.turn_cancel_event is not None

    def on_interrupt(self) -> None:
        if self.turn_cancel_event is not None:
            if not self.turn_cancel_event.is_set():
                logger.info("Interrupt received, canceling the current turn.")
                self.turn_cancel_event.set()
            return
        self.quit_event.set()


def render_event(event: TurnEvent, out: TextIO = sys.stdout) -> None:
    """Write one turn event to the terminal."""
    if isinstance(event, StreamFragment):
        choices = event.chunk.choices
        delta = choices[0].delta if choices else None
        if delta is not None and delta.content:
            out.write(delta.content)
        if delta is not None and delta.tool_calls:
            for call in delta.tool_calls:
                if call.function and call.function.name:
                    out.write(f"{ANSI['GRAY']}<Tool {call.id or call.index}>{ANSI['RESET']}")
                if call.function and call.function.arguments:
                    out.write(f"{ANSI['GRAY']}{call.function.arguments}{ANSI['RESET']}")
    elif isinstance(event, ToolResult):
        out.write(f"\n\n{ANSI['GREEN']}Tool[{event.message.name}] {event.message.tool_call_id}\n")
        out.write(f"{event.message.content}{ANSI['RESET']}\n\n")
    out.flush()


async def read_line(prompt: str, quit_event: asyncio.Event) -> Optional[str]:
    """Read a line without blocking the loop; None when the user quits or input ends."""
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[Optional[str]]" = loop.create_future()

    def reader() -> None:
        try:
            line: Optional[str] = input(prompt)
        except EOFError:
            line = None
        loop.call_soon_threadsafe(lambda: future.done() or future.set_result(line))

    # Daemon thread: a pending input() must not keep the process alive on exit
    threading.Thread(target=reader, daemon=True).start()
    quit_waiter = asyncio.ensure_future(quit_event.wait())
    try:
        await asyncio.wait({future, quit_waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        quit_waiter.cancel()
    if quit_event.is_set() or not future.done():
        return None
    return future.result()


async def chat(settings: ClientSettings) -> None:
    """Run the interactive loop until ``exit``, end of input, or an idle interrupt."""
    interrupts = InterruptController()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, interrupts.on_interrupt)
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers unavailable; interrupts will terminate the process.")

    client = McpClient.from_credentials(
        model_name=settings.model_id,
        api_key=settings.api_key,
        base_url=settings.base_url,
        max_retries=settings.max_retries,
        tool_timeout=settings.tool_timeout,
        parallel_tool_calls=settings.parallel_tool_calls,
    )
    try:
        await client.add_mcp_servers(server.to_provider() for server in settings.servers)

        tools = client.registry.catalog()
        sys.stdout.write(ANSI["BLUE"])
        sys.stdout.write(f"Agent loaded with {len(tools)} tools:\n")
        sys.stdout.write("\n".join(f"- {t.name}" for t in tools))
        sys.stdout.write(ANSI["RESET"] + "\n")
        sys.stdout.write(ANSI["BLUE"] + "Welcome to the LLM CLI! Type 'exit' to quit." + ANSI["RESET"] + "\n")

        agent = Agent(client, max_turns=settings.max_turns)
        while True:
            line = await read_line("> ", interrupts.quit_event)
            if line is None or line.strip().lower() == "exit":
                print(ANSI["GREEN"] + "Goodbye!" + ANSI["RESET"])
                break
            if not line.strip():
                continue

            cancel_event = interrupts.begin_turn()
            try:
                async for event in agent.run(line, cancel_event=cancel_event):
                    render_event(event)
                print()
            except TurnCanceledError:
                print(f"\n{ANSI['GRAY']}Turn canceled.{ANSI['RESET']}")
            except StreamingMcpError as e:
                logger.error("Turn failed: %s", e)
                print(f"\nError: {e}")
            finally:
                interrupts.end_turn()
    finally:
        try:
            await client.cleanup()
        except SessionCloseError as e:
            logger.error("Some MCP sessions did not close cleanly: %s", e)


def main() -> None:
    # Settings first, so LOG_LEVEL from .env is visible to the logging setup
    try:
        settings = ClientSettings.from_env()
        setup_logging()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    asyncio.run(chat(settings))


if __name__ == "__main__":
    main()
