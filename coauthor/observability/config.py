"""
OpenTelemetry Configuration

Sets up distributed tracing and logging for the Coauthor API.
"""

import os
import logging
from typing import Any, Dict, Optional
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

SERVICE_NAME = 'coauthor-api'

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}


def setup_observability(config: Optional[Dict[str, Any]] = None) -> bool:
    """
    Initialize OpenTelemetry tracing based on configuration.

    Returns:
        True if a tracer provider was installed
    """
    config = config or {}
    environment = config.get('ENVIRONMENT', os.getenv('ENVIRONMENT', 'development'))
    otel_enabled = config.get('OTEL_ENABLED', os.getenv('OTEL_ENABLED', 'false').lower() == 'true')

    setup_structured_logging(environment)

    if not otel_enabled:
        # No tracer provider: spans are no-ops
        return False

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": os.getenv('SERVICE_VERSION', '1.0.0'),
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(
        sampler=TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0)),
        resource=resource
    )

    otlp_endpoint = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    if otlp_endpoint:
        headers = None
        if os.getenv('OTEL_API_KEY'):
            headers = {"Authorization": f"Bearer {os.getenv('OTEL_API_KEY')}"}
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, headers=headers))
        )
    elif environment == 'development':
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)
    return True


def setup_structured_logging(environment: str):
    """Configure logging levels per environment."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG,
        'test': logging.WARNING
    }.get(environment, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # Driver chatter
    logging.getLogger('pymongo').setLevel(logging.WARNING)
    logging.getLogger('backoff').setLevel(logging.INFO if environment == 'development' else logging.WARNING)
