"""OpenTelemetry tracing for the gateway.

create_app() builds a GatewayTelemetry and instruments the FastAPI app;
the lifespan installs the tracer provider on startup and flushes it on
shutdown. Outbound calls get spans from gateway.shared.telemetry.tracing.
"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

logger = logging.getLogger(__name__)

# Health probes would otherwise dominate the trace volume.
EXCLUDED_URLS = "/health"


class GatewayTelemetry:
    """Tracer provider lifecycle: instrument, start, shutdown."""

    def __init__(self, service_name: str, service_version: str, environment: str) -> None:
        self.resource = Resource(
            attributes={
                SERVICE_NAME: service_name,
                SERVICE_VERSION: service_version,
                "deployment.environment": environment,
            }
        )
        self.tracer_provider: TracerProvider | None = None

    def instrument_app(self, app: FastAPI) -> None:
        """Add request spans. Must run before the app starts serving."""
        FastAPIInstrumentor.instrument_app(app, excluded_urls=EXCLUDED_URLS)

    def start(
        self,
        exporter: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> None:
        """Install the tracer provider and stamp trace ids on log records.

        exporter is "console", "otlp" (needs otlp_endpoint) or "none".
        Failures are logged; the gateway keeps serving without traces.
        """
        try:
            provider = TracerProvider(
                resource=self.resource, sampler=TraceIdRatioBased(sample_rate)
            )
            span_exporter = self._build_exporter(exporter, otlp_endpoint)
            if span_exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(span_exporter))
            trace.set_tracer_provider(provider)
            LoggingInstrumentor().instrument(tracer_provider=provider)
        except Exception:
            logger.exception("Telemetry setup failed; continuing without traces")
            return
        self.tracer_provider = provider
        logger.info("Telemetry started (exporter=%s)", exporter)

    @staticmethod
    def _build_exporter(exporter: str, otlp_endpoint: str | None) -> SpanExporter | None:
        if exporter == "none":
            return None
        if exporter == "otlp" and otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        if exporter != "console":
            logger.warning("Unknown exporter %r, using console", exporter)
        return ConsoleSpanExporter()

    def shutdown(self) -> None:
        """Flush pending spans."""
        provider, self.tracer_provider = self.tracer_provider, None
        if provider is None:
            return
        try:
            provider.shutdown()
        except Exception:
            logger.exception("Telemetry shutdown failed")
