"""A minimal agent loop that chains turns until the model is done."""

import asyncio
from typing import AsyncIterator, List, Optional

from .llm_core import (
    BaseMessage,
    SystemMessage,
    ToolDescriptor,
    ToolMessage,
    TurnEvent,
    UserMessage,
    get_logger,
)
from .llm_impl.openai_api import McpClient

logger = get_logger(__name__)

TASK_COMPLETE_TOOL = ToolDescriptor(
    name="task_complete",
    description="Call this tool when the task given by the user is complete",
    parameters={"type": "object", "properties": {}},
)

ASK_QUESTION_TOOL = ToolDescriptor(
    name="ask_question",
    description="Ask a question to the user to get more info required to solve or clarify their problem.",
    parameters={"type": "object", "properties": {}},
)

EXIT_LOOP_TOOLS = [TASK_COMPLETE_TOOL, ASK_QUESTION_TOOL]


class Agent:
    """
    Keeps a transcript and runs turns for each user request.

    The loop ends when the model calls an exit-loop tool, when a turn that was
    expected to call tools answers with text instead, or after ``max_turns`` turns.
    """

    def __init__(self, client: McpClient, system_prompt: Optional[str] = None, max_turns: int = 10):
        self.client = client
        self.max_turns = max_turns
        self.messages: List[BaseMessage] = []
        if system_prompt:
            self.messages.append(SystemMessage(content=system_prompt))

    async def run(self, user_input: str, cancel_event: Optional[asyncio.Event] = None) -> AsyncIterator[TurnEvent]:
        """Answer one user request, yielding every event of every turn."""
        self.messages.append(UserMessage(content=user_input))
        exit_names = {tool.name for tool in EXIT_LOOP_TOOLS}

        num_turns = 0
        next_turn_should_call_tools = True
        while num_turns < self.max_turns:
            async for event in self.client.process_single_turn_with_tools(
                self.messages,
                exit_loop_tools=EXIT_LOOP_TOOLS,
                exit_if_first_chunk_no_tool=num_turns > 0 and next_turn_should_call_tools,
                cancel_event=cancel_event,
            ):
                yield event
            num_turns += 1

            last = self.messages[-1]
            if isinstance(last, ToolMessage):
                if last.name in exit_names:
                    logger.debug("Exit-loop tool '%s' ended the loop.", last.name)
                    return
                next_turn_should_call_tools = False
            else:
                if next_turn_should_call_tools:
                    return
                next_turn_should_call_tools = True

        logger.warning("Max turns (%d) reached. Stopping the agent loop.", self.max_turns)
