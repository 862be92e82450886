"""OpenTelemetry tracing setup with OTLP/HTTP export."""

from opentelemetry import trace

from emailbot.config import OTLP_ENDPOINT, SERVICE_NAME, TRACING_ENABLED
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.tracing")
_initialized = False
_tracer_provider = None


def _build_provider():
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    endpoint = OTLP_ENDPOINT.rstrip("/")
    if not endpoint.endswith("/v1/traces"):
        endpoint = f"{endpoint}/v1/traces"
    provider = TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME, "service.version": "0.1.0"}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    return provider


def init_tracing() -> None:
    """Install the OTLP tracer provider once. No-op unless TRACING_ENABLED."""
    global _initialized, _tracer_provider
    if _initialized or not TRACING_ENABLED:
        return
    _tracer_provider = _build_provider()
    trace.set_tracer_provider(_tracer_provider)
    _initialized = True
    logger.info("tracing.initialized", endpoint=OTLP_ENDPOINT)


def get_tracer():
    """Return the emailbot tracer. Before init_tracing this is the no-op tracer."""
    return trace.get_tracer("emailbot", "0.1.0")


def shutdown_tracing() -> None:
    """Flush and shut down so spans are exported before process exit."""
    global _initialized, _tracer_provider
    if _tracer_provider is None:
        return
    _tracer_provider.force_flush(timeout_millis=5000)
    _tracer_provider.shutdown()
    _tracer_provider = None
    _initialized = False
