"""OpenTelemetry wiring for the ledger analytics service.

Traces, metrics and (optionally) logs are exported over OTLP when
``telemetry_enabled`` is set. The analytics service asks this module for its
tracer and for :class:`LedgerInstruments`, so spans and ledger metrics land on
the providers configured here, or on the global no-op providers otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes

from app.config import AppSettings

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "ledger_analytics"
_METRIC_EXPORT_INTERVAL_MS = 10000


class LedgerInstruments:
    """Metric instruments recorded around ledger computations."""

    def __init__(self, meter: metrics.Meter) -> None:
        self.events_replayed = meter.create_histogram(
            "ledger.events",
            unit="{event}",
            description="Ledger events built or replayed per request",
        )
        self.estimated_snapshots = meter.create_counter(
            "ledger.basis.estimated",
            unit="{snapshot}",
            description="Cost-basis results whose basis relies on estimated lots or unmatched sells",
        )
        self.dca_signals = meter.create_counter(
            "ledger.dca.signals",
            unit="{signal}",
            description="DCA signals produced by asset analytics",
        )


@dataclass
class _TelemetryState:
    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    logger_provider: Optional[LoggerProvider] = None
    log_handler: Optional[LoggingHandler] = None


_STATE: Optional[_TelemetryState] = None
_INSTRUMENTS: Optional[LedgerInstruments] = None


def get_tracer(name: str = INSTRUMENTATION_NAME) -> trace.Tracer:
    """Return a tracer bound to the configured provider, or the global one."""

    if _STATE is not None:
        return _STATE.tracer_provider.get_tracer(name)
    return trace.get_tracer(name)


def get_instruments() -> LedgerInstruments:
    """Return the ledger instruments, created lazily on the global meter."""

    global _INSTRUMENTS  # noqa: PLW0603 - lazily bound instruments
    if _INSTRUMENTS is None:
        _INSTRUMENTS = LedgerInstruments(metrics.get_meter(INSTRUMENTATION_NAME))
    return _INSTRUMENTS


def _build_resource(settings: AppSettings) -> Resource:
    attributes: dict[str, Any] = {
        ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
        ResourceAttributes.SERVICE_NAMESPACE: "ledger-analytics",
    }
    return Resource.create(attributes)


def setup_telemetry(
    app: FastAPI,
    settings: AppSettings,
    *,
    span_exporter: Optional[SpanExporter] = None,
    metric_reader: Optional[MetricReader] = None,
) -> bool:
    """Configure exporters, instrument FastAPI and bind the ledger instruments.

    OTLP exporters are built from settings unless ``span_exporter`` or
    ``metric_reader`` are supplied. Returns True when instrumentation is active
    after the call.
    """

    global _STATE, _INSTRUMENTS  # noqa: PLW0603 - single initialisation guard

    if _STATE is not None:
        return True

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    resource = _build_resource(settings)
    sampler = ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio))
    exporter_options = _build_exporter_options(settings)

    tracer_provider = TracerProvider(resource=resource, sampler=sampler)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(span_exporter or OTLPSpanExporter(**exporter_options))
    )
    trace.set_tracer_provider(tracer_provider)

    if metric_reader is None:
        metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(**exporter_options),
            export_interval_millis=_METRIC_EXPORT_INTERVAL_MS,
        )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)

    state = _TelemetryState(tracer_provider=tracer_provider, meter_provider=meter_provider)
    if settings.telemetry_logs_enabled:
        _configure_logging(state, resource, exporter_options)

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )

    _STATE = state
    _INSTRUMENTS = LedgerInstruments(meter_provider.get_meter(INSTRUMENTATION_NAME))
    logger.info(
        "Telemetry initialised for %s (logs exported: %s)",
        settings.telemetry_service_name,
        settings.telemetry_logs_enabled,
    )
    return True


def shutdown_telemetry() -> None:
    """Flush and release the providers created by :func:`setup_telemetry`."""

    global _STATE, _INSTRUMENTS  # noqa: PLW0603 - single initialisation guard

    state = _STATE
    if state is None:
        return
    _STATE = None
    _INSTRUMENTS = None

    if state.log_handler is not None:
        logging.getLogger().removeHandler(state.log_handler)
        LoggingInstrumentor().uninstrument()
    if state.logger_provider is not None:
        state.logger_provider.shutdown()
    state.tracer_provider.shutdown()
    state.meter_provider.shutdown()


# Helpers

def _build_exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def _configure_logging(state: _TelemetryState, resource: Resource, exporter_options: dict[str, Any]) -> None:
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**exporter_options)))
    set_logger_provider(logger_provider)

    handler = LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    logging.getLogger().addHandler(handler)
    LoggingInstrumentor().instrument(set_logging_format=False)

    state.logger_provider = logger_provider
    state.log_handler = handler


__all__ = ["LedgerInstruments", "get_instruments", "get_tracer", "setup_telemetry", "shutdown_telemetry"]
