"""Public API routers exposed by the FastAPI application."""

from . import agencies, assistant, fees, health, procedures

__all__ = [
    "agencies",
    "assistant",
    "fees",
    "health",
    "procedures",
]
