import io
import logging
from typing import Iterator

import pytest

from streaming_mcp_client.llm_core import get_logger, setup_logging
from streaming_mcp_client.llm_core.logger import NOISY_LOGGERS, resolve_level


@pytest.fixture
def clean_library_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("streaming_mcp_client")
    handlers, level = list(logger.handlers), logger.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    logger.handlers = [h for h in handlers if isinstance(h, logging.NullHandler)]
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)


def test_get_logger_names() -> None:
    assert get_logger().name == "streaming_mcp_client"
    assert get_logger("streaming_mcp_client.cli").name == "streaming_mcp_client.cli"
    assert get_logger("agent").name == "streaming_mcp_client.agent"
    assert get_logger("streaming_mcp_client_extra").name == "streaming_mcp_client.streaming_mcp_client_extra"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("15", 15), (logging.ERROR, logging.ERROR)],
)
def test_resolve_level(value: object, expected: int) -> None:
    assert resolve_level(value) == expected  # type: ignore[arg-type]


def test_resolve_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert resolve_level() == logging.ERROR

    monkeypatch.delenv("LOG_LEVEL")
    assert resolve_level() == logging.INFO


def test_resolve_level_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_setup_logging_is_idempotent_and_quiets_transports(clean_library_logger: logging.Logger) -> None:
    out = io.StringIO()

    setup_logging("INFO", stream=out)
    setup_logging("DEBUG", stream=io.StringIO())
    get_logger("registry").info("Connected to server '%s'", "fs")

    handlers = [h for h in clean_library_logger.handlers if not isinstance(h, logging.NullHandler)]
    assert len(handlers) == 1
    assert clean_library_logger.level == logging.INFO
    assert "Connected to server 'fs'" in out.getvalue()
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_logging_defaults_to_stderr(clean_library_logger: logging.Logger, capsys: pytest.CaptureFixture) -> None:
    setup_logging(logging.INFO)
    get_logger("cli").warning("interrupted")

    captured = capsys.readouterr()
    assert "interrupted" in captured.err
    assert "interrupted" not in captured.out
