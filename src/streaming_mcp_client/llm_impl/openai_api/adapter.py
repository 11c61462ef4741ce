from typing import Any, Dict, List, Sequence

from streaming_mcp_client.llm_core.messages import (
    BaseMessage,
    AssistantMessage,
    ToolMessage,
)


class OpenAIMessageAdapter:
    """Converts the provider-agnostic transcript into OpenAI chat-completions messages."""

    @staticmethod
    def to_openai_message(msg: BaseMessage) -> Dict[str, Any]:
        """Convert one message.

        Args:
            msg: A transcript message.

        Returns:
            The OpenAI message dictionary.
        """
        if isinstance(msg, AssistantMessage):
            openai_msg: Dict[str, Any] = {"role": "assistant", "content": msg.content}
            if msg.tool_calls:
                openai_msg["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments or "{}"},
                    }
                    for call in msg.tool_calls
                ]
            return openai_msg
        if isinstance(msg, ToolMessage):
            return {"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id, "name": msg.name}
        return {"role": msg.role, "content": msg.content}

    @classmethod
    def to_openai_messages(cls, history: Sequence[BaseMessage]) -> List[Dict[str, Any]]:
        """Convert a whole transcript, preserving order."""
        return [cls.to_openai_message(msg) for msg in history]
