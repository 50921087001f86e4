"""Root test configuration."""

import logging

import pytest
import structlog
from graphstack.config.settings import get_settings


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    """Isolate tests from GRAPHSTACK_* variables in the developer's shell."""
    for key in (
        "GRAPHSTACK_NODE_LOWERER_LOOKUP",
        "GRAPHSTACK_DEPLOY_TIMEOUT_SECONDS",
        "GRAPHSTACK_AWS_REGION",
        "GRAPHSTACK_LOG_LEVEL",
        "GRAPHSTACK_LOG_JSON",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
