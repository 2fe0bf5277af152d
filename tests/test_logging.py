import logging

import pytest

from cafe_finder.core.config import Settings
from cafe_finder.logging import build_processors, configure_logging, resolve_log_format, resolve_log_level


@pytest.mark.parametrize(
    "env, log_format, expected",
    [
        ("development", None, "console"),
        ("production", None, "json"),
        ("Development", None, "console"),
        ("development", "json", "json"),
        ("production", "console", "console"),
    ],
)
def test_log_format_follows_env_unless_set(env, log_format, expected) -> None:
    assert resolve_log_format(Settings(ENV=env, LOG_FORMAT=log_format)) == expected


def test_unknown_log_level_falls_back_to_info() -> None:
    assert resolve_log_level(Settings(LOG_LEVEL="debug")) == logging.DEBUG
    assert resolve_log_level(Settings(LOG_LEVEL="chatty")) == logging.INFO


def test_json_format_ends_with_json_renderer() -> None:
    processors = build_processors("json")
    assert type(processors[-1]).__name__ == "JSONRenderer"
    assert type(build_processors("console")[-1]).__name__ == "ConsoleRenderer"


def test_configure_logging_quiets_http_client_and_reroutes_uvicorn() -> None:
    configure_logging(Settings(LOG_LEVEL="DEBUG", LOG_FORMAT="json"))
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").handlers == []
    assert logging.getLogger("uvicorn.access").propagate is True
