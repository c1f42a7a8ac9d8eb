"""
Shared utilities for the Booking Gateway.

This package aggregates the common building blocks used by the gateway
service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Error taxonomy and the response envelope
- base_service: FastAPI application scaffolding

Do not import from booking_gateway into shared/.
"""
