import logging

from opentelemetry import trace, propagate
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor

from horeca_catalog.core.config import settings

logger = logging.getLogger(__name__)

_TRACER_PROVIDER: TracerProvider | None = None


def setup_telemetry() -> TracerProvider | None:
    """TracerProvider, propagator, PyMongo 계측 설정. OTEL_ENABLED=false 이면 no-op tracer 유지"""
    global _TRACER_PROVIDER

    if not settings.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled; using no-op tracer.")
        return None
    if _TRACER_PROVIDER is not None:
        return _TRACER_PROVIDER

    try:
        resource = Resource.create({
            "service.name": settings.OTEL_SERVICE_NAME,
            "deployment.environment": settings.ENVIRONMENT,
        })
        tracer_provider = TracerProvider(resource=resource)
        # gRPC 엔드포인트는 'host:port' 형식
        endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT.removeprefix("http://").removeprefix("https://")
        tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))
        trace.set_tracer_provider(tracer_provider)
        propagate.set_global_textmap(TraceContextTextMapPropagator())

        PymongoInstrumentor().instrument()
        logger.info("PymongoInstrumentor applied.")

        _TRACER_PROVIDER = tracer_provider
        logger.info("OpenTelemetry setup completed.",
                    extra={"service_name": settings.OTEL_SERVICE_NAME, "endpoint": endpoint})
        return tracer_provider
    except Exception as e:
        logger.error("Failed to setup OpenTelemetry.", extra={"error": str(e)}, exc_info=True)
        raise


def instrument_fastapi_app(app):
    """FastAPI 앱을 OpenTelemetry로 계측"""
    if _TRACER_PROVIDER is None:
        logger.debug("TracerProvider not configured; skipping FastAPI instrumentation.")
        return
    FastAPIInstrumentor.instrument_app(app, tracer_provider=_TRACER_PROVIDER)
    logger.info("FastAPI application instrumented by OpenTelemetry.")


def shutdown_telemetry():
    global _TRACER_PROVIDER
    if _TRACER_PROVIDER is not None:
        try:
            _TRACER_PROVIDER.shutdown()
            logger.info("TracerProvider shutdown successful.")
        except Exception as e:
            logger.error("Error during TracerProvider shutdown.", extra={"error": str(e)}, exc_info=True)
        _TRACER_PROVIDER = None
