"""
Utility modules for the LightBnB data-access layer.
"""

from .exceptions import (
    DataAccessError,
    ValidationError,
    InfrastructureError,
    ConstraintViolationError,
    DuplicateResourceError
)
from .logger import configure_logging

__all__ = [
    # Exceptions
    "DataAccessError",
    "ValidationError",
    "InfrastructureError",
    "ConstraintViolationError",
    "DuplicateResourceError",

    # Logging
    "configure_logging",
]
