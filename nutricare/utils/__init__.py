"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    NutriCareError,
    NotFoundError,
    ValidationError,
    GenerationError,
    DataIntegrityError,
    ReportGenerationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "NutriCareError",
    "NotFoundError",
    "ValidationError",
    "GenerationError",
    "DataIntegrityError",
    "ReportGenerationError",
]
