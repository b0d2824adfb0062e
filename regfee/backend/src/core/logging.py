"""Structured logging configuration."""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Configure basic JSON-style logging for the service."""

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format='{"level": "%(levelname)s", "message": "%(message)s"}',
    )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
