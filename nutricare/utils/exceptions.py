"""
Custom Exception Hierarchy

Specific exception types for each failure category of the aggregation
pipeline, carrying structured error information for API responses.
"""
from typing import Optional, Dict, Any


class NutriCareError(Exception):
    """Base exception for all practice-management errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class NotFoundError(NutriCareError):
    """Patient, program or other entity absent for the given organization."""

    def __init__(
        self,
        entity: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id, **(details or {})}
        )
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(NutriCareError):
    """Malformed input shape, rejected at the boundary."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field


class GenerationError(NutriCareError):
    """External text generation failed or returned unparseable content."""

    PROVIDER_ERROR = "provider_error"
    NOT_CONFIGURED = "not_configured"
    MALFORMED_RESPONSE = "malformed_response"

    def __init__(
        self,
        message: str,
        mode: str = "unknown",
        reason: str = PROVIDER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="GENERATION_ERROR",
            details={"mode": mode, "reason": reason, **(details or {})}
        )
        self.mode = mode
        self.reason = reason


class DataIntegrityError(NutriCareError):
    """An internal invariant of the fetched data is violated."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="DATA_INTEGRITY_ERROR",
            details={"source": source, **(details or {})}
        )
        self.source = source


class ReportGenerationError(NutriCareError):
    """Errors while rendering a report document."""

    def __init__(
        self,
        message: str,
        report_type: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="REPORT_ERROR",
            details={"report_type": report_type, **(details or {})}
        )
        self.report_type = report_type
