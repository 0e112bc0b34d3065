"""
Record errors

Raised by the services when a write would leave stored records
inconsistent. The API maps each code to an HTTP status.
"""

from typing import Any, Dict, Optional

NOT_FOUND = "NOT_FOUND"
DANGLING_REFERENCE = "DANGLING_REFERENCE"
INCONSISTENT_FLAG = "INCONSISTENT_FLAG"
IMMUTABLE_FIELD = "IMMUTABLE_FIELD"
REFERENCED_RECORD = "REFERENCED_RECORD"
DUPLICATE = "DUPLICATE"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
VALIDATION_ERROR = "VALIDATION_ERROR"


class RecordError(Exception):
    """Base exception for record write failures"""
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "error",
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
