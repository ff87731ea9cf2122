"""Logging utilities for the application."""

import logging
import os
import sys

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.instrumentation.logging import LoggingInstrumentor

# Application logger shared by the filter engine, presets and the API
logger = logging.getLogger("inventory")

logging_level = getattr(logging, os.environ.get("LOGGING_LEVEL", "INFO").upper(), logging.INFO)

logger.setLevel(logging_level)

formatter = logging.Formatter("%(asctime)s - PID:%(process)d - Thread:%(thread)d - %(name)s - %(levelname)s - %(message)s")

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(formatter)

logger.addHandler(console_handler)

# Export to Azure Monitor only when a connection string is configured
appinsights_connection_string = os.environ.get("APPLICATIONINSIGHTS_CONNECTION_STRING")
if appinsights_connection_string:
    configure_azure_monitor(
        connection_string=appinsights_connection_string,
    )

    LoggingInstrumentor().instrument(level=logging_level, excluded_loggers=["azure"])  # Avoid recursive logging

# Prevent propagation to root logger to avoid duplicate logs
logger.propagate = False
