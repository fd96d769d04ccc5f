"""API route handlers."""

from api.routes import campaigns, health, verify

__all__ = ["campaigns", "health", "verify"]
