import asyncio
import os
from typing import List

from dotenv import load_dotenv

from streaming_mcp_client import McpClient, MCPServerProvider, StreamFragment, ToolResult, UserMessage
from streaming_mcp_client.llm_core import BaseMessage, TurnCanceledError

# Load environment variables
load_dotenv()


async def main() -> None:
    """
    Chat with a model that can use the tools of a filesystem MCP server.
    """
    print("Welcome to the CLI Chat (MCP)!")

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        print("Error: OPENAI_API_KEY not found in environment variables.")
        return

    async with McpClient.from_credentials(model_name="gpt-4o-mini", api_key=api_key) as client:
        await client.add_mcp_server(
            MCPServerProvider("npx", ["-y", "@modelcontextprotocol/server-filesystem", os.getcwd()], name="filesystem")
        )
        client.log_available_tools()

        history: List[BaseMessage] = []

        print("\nStart chatting! Type 'exit' or 'quit' to stop.")
        while True:
            user_input = input("\nYou: ").strip()
            if user_input.lower() in ["exit", "quit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            history.append(UserMessage(content=user_input))
            cancel_event = asyncio.Event()
            try:
                # One turn: the streamed answer, then the results of the tools it called
                async for event in client.process_single_turn_with_tools(history, cancel_event=cancel_event):
                    if isinstance(event, StreamFragment) and event.chunk.choices:
                        print(event.chunk.choices[0].delta.content or "", end="", flush=True)
                    elif isinstance(event, ToolResult):
                        print(f"\n[{event.message.name}] {event.message.content}")
            except TurnCanceledError:
                print("\nTurn canceled.")
            print()


if __name__ == "__main__":
    asyncio.run(main())
