"""Infrastructure layer: HTTP integration, rate limiting and observability."""
