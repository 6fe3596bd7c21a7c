"""Logging and observability configuration using Pydantic Logfire.

Modules log through the standard library (``logging.getLogger(__name__)``);
Logfire picks those records up once configured. Service operations are
wrapped in spans::

    with span("task_service.create_task"):
        ...
"""

import logging

import logfire
from fastapi import FastAPI

from config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and Logfire from settings.

    Logfire only ships data when ``LOGFIRE_TOKEN`` is set.
    """
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level)

    logfire.configure(
        token=settings.logfire_token,
        service_name="task-api",
        service_version="1.0.0",
        send_to_logfire="if-token-present",
        console=False,
    )
    logging.getLogger(__name__).info("Logging configured at level %s", settings.log_level)


def instrument_fastapi(app: FastAPI, settings: Settings) -> None:
    """Add Logfire request tracing to the app when Logfire is enabled."""
    if not settings.logfire_token:
        return
    logfire.instrument_fastapi(app)
    logging.getLogger(__name__).info("FastAPI instrumentation configured")


def span(name: str, **attributes: object) -> logfire.LogfireSpan:
    """Create a span around a unit of service work."""
    return logfire.span(name, **attributes)
