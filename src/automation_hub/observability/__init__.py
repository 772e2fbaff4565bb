"""
automation_hub.observability

Logging and request-context helpers.

Responsibilities:
- structlog configuration for JSON logs.
- Request-scoped context binding via Starlette middleware.
"""

# Package marker.
