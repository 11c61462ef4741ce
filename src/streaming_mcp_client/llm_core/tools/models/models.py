from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, Field


class ToolDescriptor(BaseModel):
    """
    Describes a tool advertised by a tool provider.

    Descriptors are immutable once registered; the registry routes calls by ``name``.

    Attributes:
        name: The unique name of the tool within a running agent.
        description: A human-readable description of what the tool does.
        parameters: The provider-defined JSON schema of the tool's input.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_openai_tool(self) -> Dict[str, Any]:
        """Render the descriptor in the OpenAI chat-completions ``tools`` format.

        Returns:
            A ``{"type": "function", "function": {...}}`` dictionary.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters or {"type": "object", "properties": {}},
            },
        }
