"""Core package - Configuration, logging, exceptions.

This package provides foundational infrastructure used by all other layers.

Modules:
    - config: Environment and configuration management
    - logging: Structured JSON logging
    - exceptions: Custom exception hierarchy
    - phone: Phone number normalization
"""

from keepwarm.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    GenerationFailure,
    IntegrationError,
    KeepWarmError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "KeepWarmError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
    "IntegrationError",
    "GenerationFailure",
]
