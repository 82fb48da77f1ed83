"""
Error Handling & Sanitization
Exception types raised by the engine and a client-safe error payload builder

SECURITY REQUIREMENTS:
- No patient data in error payloads
- Detailed errors only in secure logs
- Consistent error format for the calling service
"""

import uuid
from typing import Optional, Dict, Any

from pydantic import ValidationError

from mobility_outcomes.core.logging import log_error


class StayPredictionError(Exception):
    """Base exception for stay-prediction engine errors"""
    pass


class UnrecognizedClinicalValueError(StayPredictionError, ValueError):
    """Raised in strict mode when an enum-like profile field has an unknown value"""
    
    def __init__(self, field: str, value: Any, allowed: Optional[list] = None):
        self.field = field
        self.value = value
        self.allowed = list(allowed or [])
        super().__init__(
            f"Unrecognized value for '{field}'; expected one of: {', '.join(self.allowed)}"
        )


class InvalidAssessmentInputError(StayPredictionError, ValueError):
    """Raised when the base risk result handed to the engine has the wrong shape"""
    
    def __init__(self, message: str, fields: Optional[list] = None):
        self.fields = list(fields or [])
        super().__init__(message)
    
    @classmethod
    def from_validation_error(cls, error: ValidationError) -> "InvalidAssessmentInputError":
        fields = [".".join(str(part) for part in err["loc"]) for err in error.errors()]
        return cls(f"Invalid base risk result: {', '.join(fields)}", fields=fields)


class ErrorSanitizer:
    """Sanitizes engine errors before they leave the process"""
    
    @staticmethod
    def sanitize_error(error: Exception, context: Optional[str] = None) -> Dict[str, Any]:
        """
        Sanitize error for client response
        
        Args:
            error: Exception instance
            context: Additional context (logged only)
            
        Returns:
            Sanitized error dictionary
        """
        if isinstance(error, UnrecognizedClinicalValueError):
            return {
                "error": f"Unrecognized value for field '{error.field}'",
                "status_code": 400,
                "type": "validation_error",
                "fields": [error.field],
            }
        
        if isinstance(error, InvalidAssessmentInputError):
            return {
                "error": "Validation error",
                "status_code": 400,
                "type": "validation_error",
                "fields": error.fields,
            }
        
        if isinstance(error, ValidationError):
            return {
                "error": "Validation error",
                "status_code": 400,
                "type": "validation_error",
                "fields": [".".join(str(part) for part in err["loc"]) for err in error.errors()],
            }
        
        # Anything else is a programming error; keep details in the log
        error_id = ErrorSanitizer._generate_error_id()
        log_error(
            f"Unhandled engine error [{error_id}] ({context or 'no context'}): {type(error).__name__}",
            logger_name="error_handler",
        )
        return {
            "error": "An error occurred processing the assessment",
            "status_code": 500,
            "type": "internal_error",
            "error_id": error_id,
        }
    
    @staticmethod
    def _generate_error_id() -> str:
        """Generate a short error ID for tracking"""
        return str(uuid.uuid4())[:8]
