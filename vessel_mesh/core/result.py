"""
Operation result types for structured feedback.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum


class OperationStatus(Enum):
    """Status of an operation."""
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


class ErrorCode(Enum):
    """Standard error codes attached to failed loads and builds."""
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    EMPTY_DATASET = "EMPTY_DATASET"
    BUILD_FAILED = "BUILD_FAILED"
    EXPORT_FAILED = "EXPORT_FAILED"
    INVALID_PARAMETER = "INVALID_PARAMETER"


def _is_json_safe(value) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


@dataclass
class OperationResult:
    """
    Structured result from a load, build or export.
    
    Geometry and scalar arrays travel in ``metadata``; everything that was
    recovered locally (dropped lines, skipped segments) is listed in
    ``warnings`` so a caller can inspect it without the call failing.
    """
    
    status: OperationStatus
    message: str = ""
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    
    def is_success(self) -> bool:
        """Check if operation was successful."""
        return self.status in (OperationStatus.SUCCESS, OperationStatus.PARTIAL_SUCCESS)
    
    def is_failure(self) -> bool:
        """Check if operation failed."""
        return self.status == OperationStatus.FAILURE
    
    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)
    
    def add_error(self, error: str, code: Optional[ErrorCode] = None) -> None:
        """Add an error message with optional error code."""
        self.errors.append(error)
        if code is not None:
            self.error_codes.append(code.value)
    
    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.
        
        Only JSON-safe metadata entries are kept; buffers, arrays and
        futures are summarized by their type name.
        """
        safe_metadata = {}
        for key, value in self.metadata.items():
            if _is_json_safe(value):
                safe_metadata[key] = value
            else:
                safe_metadata[key] = f"<{type(value).__name__}>"
        return {
            "status": self.status.value,
            "message": self.message,
            "warnings": self.warnings,
            "errors": self.errors,
            "error_codes": self.error_codes,
            "metadata": safe_metadata,
        }
    
    @classmethod
    def success(cls, message: str = "", **kwargs) -> "OperationResult":
        """Create a success result."""
        return cls(status=OperationStatus.SUCCESS, message=message, **kwargs)
    
    @classmethod
    def failure(cls, message: str = "", **kwargs) -> "OperationResult":
        """Create a failure result."""
        return cls(status=OperationStatus.FAILURE, message=message, **kwargs)
    
    @classmethod
    def partial_success(cls, message: str = "", **kwargs) -> "OperationResult":
        """Create a partial success result."""
        return cls(status=OperationStatus.PARTIAL_SUCCESS, message=message, **kwargs)
