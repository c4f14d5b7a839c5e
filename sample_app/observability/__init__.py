"""Observability wiring for the sample service.

structlog JSON logs (console + Loki), a prometheus_client registry scraped at
/metrics, and OpenTelemetry spans exported over OTLP/HTTP.
"""
