import logging

import pytest

from mcp_starter import config
from mcp_starter.config import DEFAULT_PORT, configure_logging, load_settings

ENV_VARS = ["MCP_HTTP_HOST", "MCP_HTTP_PORT", "MCP_LOG_LEVEL", "MCP_LONG_TASK_STEP_SECONDS"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_to_stdio():
    settings = load_settings([])
    assert settings.use_http is False
    assert settings.port == DEFAULT_PORT == 3000
    assert settings.host == "localhost"
    assert settings.log_level == "INFO"
    assert settings.long_task_step_seconds == 1.0


def test_http_flag_and_port():
    settings = load_settings(["--http", "--port", "8080"])
    assert settings.use_http is True
    assert settings.port == 8080


def test_environment_values(monkeypatch):
    monkeypatch.setenv("MCP_HTTP_PORT", "9000")
    monkeypatch.setenv("MCP_HTTP_HOST", "0.0.0.0")
    monkeypatch.setenv("MCP_LOG_LEVEL", "debug")
    monkeypatch.setenv("MCP_LONG_TASK_STEP_SECONDS", "0.5")
    settings = load_settings(["--http"])
    assert settings.port == 9000
    assert settings.host == "0.0.0.0"
    assert settings.log_level == "DEBUG"
    assert settings.long_task_step_seconds == 0.5


def test_command_line_port_wins(monkeypatch):
    monkeypatch.setenv("MCP_HTTP_PORT", "9000")
    assert load_settings(["--http", "--port", "8081"]).port == 8081


def test_invalid_step_seconds(monkeypatch):
    monkeypatch.setenv("MCP_LONG_TASK_STEP_SECONDS", "soon")
    with pytest.raises(ValueError):
        load_settings([])


def test_invalid_port_flag_exits():
    with pytest.raises(SystemExit):
        load_settings(["--port", "abc"])


def test_configure_logging_writes_to_stderr(capsys):
    root = logging.getLogger()
    saved, level = root.handlers[:], root.level
    root.handlers = []
    try:
        configure_logging("WARNING")
        logging.getLogger("mcp_starter.test").warning("to stderr")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "WARNING | mcp_starter.test | to stderr" in captured.err
    finally:
        root.handlers = saved
        root.setLevel(level)
