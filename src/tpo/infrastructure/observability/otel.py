from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from tpo.infrastructure import settings

_OTEL_CONFIGURED = False
_EXCLUDED_URLS = "health/live,health/ready,metrics"
logger = logging.getLogger(__name__)


def configure_otel(app: FastAPI) -> None:
    """Install the tracer provider and instrument inbound (FastAPI) and outbound (requests) HTTP."""
    global _OTEL_CONFIGURED
    if _OTEL_CONFIGURED:
        return

    service_name = os.getenv("OTEL_SERVICE_NAME", "tpo-pricing")
    environment = settings.app_env()
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: service_name, "deployment.environment": environment})
    )
    if endpoint:
        try:
            exporter = OTLPSpanExporter(
                endpoint=endpoint,
                insecure=endpoint.startswith("http://"),
            )
            provider.add_span_processor(BatchSpanProcessor(exporter))
        except Exception:
            logger.exception("otel_exporter_setup_failed")
    else:
        logger.info("otel_exporter_disabled", extra={"reason": "OTEL_EXPORTER_OTLP_ENDPOINT missing"})

    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider, excluded_urls=_EXCLUDED_URLS)
    RequestsInstrumentor().instrument(tracer_provider=provider)
    _OTEL_CONFIGURED = True
