"""
Shared utilities for the Rule Mapping Service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with mapping session correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: Config, logging and metrics wiring for services
- test_helpers: Program rule fixture factories (tests only)

Apart from test_helpers, nothing here imports from service packages.
"""
