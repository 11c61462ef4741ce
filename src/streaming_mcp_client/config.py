"""Settings for the client and the CLI, loaded from the environment and ``.env``."""

import json
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .llm_core import MAX_RETRIES
from .mcp_wrapper import MCPServerProvider


class ServerConfig(BaseModel):
    """Launch parameters of one MCP server."""

    name: Optional[str] = None
    command: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)

    def to_provider(self) -> MCPServerProvider:
        return MCPServerProvider(command=self.command, args=self.args, env=self.env, name=self.name)


def default_servers() -> List[ServerConfig]:
    """The filesystem server on ``~/Desktop`` and the Playwright server."""
    return [
        ServerConfig(
            name="filesystem",
            command="npx",
            args=["-y", "@modelcontextprotocol/server-filesystem", str(Path.home() / "Desktop")],
        ),
        ServerConfig(name="playwright", command="npx", args=["@playwright/mcp@latest"]),
    ]


class ClientSettings(BaseModel):
    """
    Configuration of the model endpoint, the turn engine and the MCP servers.

    Attributes:
        model_id: Model identifier sent to the endpoint.
        base_url: OpenAI-compatible endpoint URL; None for api.openai.com.
        api_key: Credential for the endpoint.
        max_retries: Attempts per turn when tool-call arguments arrive truncated.
        tool_timeout: Seconds before a tool call is reported as failed.
        parallel_tool_calls: Execute independent tool calls of a turn concurrently.
        max_turns: Upper bound on turns per user request in the agent loop.
        servers: MCP servers to connect at startup.
    """

    model_id: str
    base_url: Optional[str] = None
    api_key: str
    max_retries: int = Field(default=MAX_RETRIES, ge=1)
    tool_timeout: float = Field(default=180.0, gt=0)
    parallel_tool_calls: bool = True
    max_turns: int = Field(default=10, ge=1)
    servers: List[ServerConfig] = Field(default_factory=default_servers)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        """Build settings from environment variables, after loading ``.env``.

        Args:
            env_file: Explicit dotenv file; the nearest ``.env`` is used otherwise.
            environ: Mapping to read instead of ``os.environ`` (dotenv is skipped).

        Returns:
            The settings.

        Raises:
            ValueError: If no API key or model is configured, or the servers file is malformed.
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        api_key = environ.get("HF_TOKEN") or environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("HF_TOKEN or OPENAI_API_KEY environment variable is not set.")

        model_id = environ.get("MODEL_ID")
        if not model_id:
            raise ValueError("MODEL_ID environment variable is not set.")

        values: Dict[str, object] = {
            "model_id": model_id,
            "api_key": api_key,
            "base_url": environ.get("BASE_URL") or None,
        }
        if environ.get("MAX_RETRIES"):
            values["max_retries"] = int(environ["MAX_RETRIES"])
        if environ.get("TOOL_TIMEOUT"):
            values["tool_timeout"] = float(environ["TOOL_TIMEOUT"])
        if environ.get("MAX_TURNS"):
            values["max_turns"] = int(environ["MAX_TURNS"])
        if environ.get("MCP_SERVERS_FILE"):
            values["servers"] = load_servers_file(environ["MCP_SERVERS_FILE"])

        return cls.model_validate(values)


def load_servers_file(path: str | Path) -> List[ServerConfig]:
    """Read servers from a JSON file shaped like ``{"mcpServers": {name: {command, args, env}}}``.

    Raises:
        ValueError: If the file has no ``mcpServers`` object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    servers = data.get("mcpServers") if isinstance(data, dict) else None
    if not isinstance(servers, dict):
        raise ValueError(f"{path}: expected an object with an 'mcpServers' mapping.")
    return [ServerConfig.model_validate({"name": name, **spec}) for name, spec in servers.items()]
