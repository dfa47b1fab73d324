"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from gateway.shared.telemetry.logging import get_logger, setup_logging
from gateway.shared.telemetry.telemetry import GatewayTelemetry
from gateway.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "setup_logging",
    "get_logger",
    "GatewayTelemetry",
    "traced",
    "add_span_attributes",
]
