"""OpenTelemetry wiring for the dashboard API and the data reader.

Instruments are always available through the global API providers; without
``setup_telemetry`` they are no-ops, so library code and tests can record
spans and counters unconditionally.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace import Span, Status, StatusCode

from dca_dashboard.config import AppSettings

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "dca_dashboard"
METRIC_EXPORT_INTERVAL_MS = 15000

_configured = False


def parse_otlp_headers(raw: str | None) -> dict[str, str]:
    """Turn ``"k1=v1,k2=v2"`` into a header dict, skipping malformed items."""

    headers: dict[str, str] = {}
    for item in (raw or "").split(","):
        key, sep, value = item.partition("=")
        if sep and key.strip():
            headers[key.strip().lower()] = value.strip()
    return headers


def otlp_exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    headers = parse_otlp_headers(settings.telemetry_otlp_headers)
    if headers:
        options["headers"] = headers
    return options


def setup_telemetry(app: FastAPI, settings: AppSettings) -> bool:
    """Install OTLP trace, metric and log pipelines and instrument ``app``.

    Returns ``True`` when telemetry is active after the call. Safe to call
    more than once; only the first enabled call installs providers.
    """

    global _configured  # noqa: PLW0603

    if _configured:
        return True
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "dca-dashboard",
        }
    )
    options = otlp_exporter_options(settings)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**options)))
    trace.set_tracer_provider(tracer_provider)

    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[
            PeriodicExportingMetricReader(
                OTLPMetricExporter(**options),
                export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
            )
        ],
    )
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**options)))
    set_logger_provider(logger_provider)
    # Adds trace ids to log records; the stdout format from setup_logging is kept
    LoggingInstrumentor().instrument(set_logging_format=False)

    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider, meter_provider=meter_provider)
    HTTPXClientInstrumentor().instrument()

    _configured = True
    logger.info("Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "the default OTLP endpoint")
    return True


def _meter() -> metrics.Meter:
    return metrics.get_meter(INSTRUMENTATION_NAME)


def record_dropped_lines(resource: str, count: int) -> None:
    """Count data file lines that were skipped as malformed."""

    if count <= 0:
        return
    counter = _meter().create_counter(
        "dca_dashboard.reader.dropped_lines",
        unit="{line}",
        description="Malformed NDJSON lines skipped while reading bot output",
    )
    counter.add(count, {"resource": resource})


@contextmanager
def data_file_span(resource: str, location: str) -> Iterator[Span]:
    """Span around one data file read; failures mark the span as errored."""

    tracer = trace.get_tracer(INSTRUMENTATION_NAME)
    with tracer.start_as_current_span(
        "data_reader.fetch",
        attributes={"dca.resource": resource, "dca.location": location},
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise


__all__ = [
    "data_file_span",
    "otlp_exporter_options",
    "parse_otlp_headers",
    "record_dropped_lines",
    "setup_telemetry",
]
