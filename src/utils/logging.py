"""Application logger shared by the API, the store and the completion client."""

import logging
import os
import sys

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.instrumentation.logging import LoggingInstrumentor

from constants import LOGGING_LEVEL

LOGGER_NAME = "relaychat"
LOG_FORMAT = "%(asctime)s - PID:%(process)d - Thread:%(thread)d - %(name)s - %(levelname)s - %(message)s"


def _stdout_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _export_to_azure_monitor(connection_string: str, level: int) -> None:
    """Ship records to Application Insights in addition to stdout."""
    configure_azure_monitor(connection_string=connection_string)
    # The exporter logs through "azure"; instrumenting it would loop
    LoggingInstrumentor().instrument(level=level, excluded_loggers=["azure"])


def build_logger(name: str = LOGGER_NAME, level: int = LOGGING_LEVEL) -> logging.Logger:
    """Configure the named logger once; repeated calls return it unchanged."""
    app_logger = logging.getLogger(name)
    if app_logger.handlers:
        return app_logger

    app_logger.setLevel(level)
    app_logger.addHandler(_stdout_handler())
    app_logger.propagate = False

    connection_string = os.environ.get("APPLICATIONINSIGHTS_CONNECTION_STRING")
    if connection_string:
        _export_to_azure_monitor(connection_string, level)

    # Request lines from the completion transport stay at warning unless debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return app_logger


logger = build_logger()
