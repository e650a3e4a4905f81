"""
Shared error handling for the Rule Mapping Service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class RuleMappingException(Exception):
    """Base exception for rule mapping."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class MissingReferenceError(RuleMappingException):
    """A referenced data element does not exist in the store."""

    def __init__(self, uid: str, entity: str = "DataElement", details: Optional[Dict[str, Any]] = None):
        self.uid = uid
        self.entity = entity
        payload = {"uid": uid, "entity": entity}
        payload.update(details or {})
        super().__init__("MISSING_REFERENCE", f"Required {entity}({uid}) was not found.", payload)


class MalformedDefinitionError(RuleMappingException):
    """A persisted definition lacks an association its kind requires."""

    def __init__(self, message: str = "Malformed definition", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_DEFINITION", message, details)


class EngineModelError(RuleMappingException):
    """An engine entity would violate its construction invariants."""

    def __init__(self, message: str = "Invalid engine entity", details: Optional[Dict[str, Any]] = None):
        super().__init__("ENGINE_MODEL_INVALID", message, details)


class StatusMappingError(RuleMappingException):
    """A persisted status has no engine counterpart."""

    def __init__(self, status: Any, target: str, details: Optional[Dict[str, Any]] = None):
        payload = {"status": str(status), "target": target}
        payload.update(details or {})
        super().__init__("STATUS_MAPPING_ERROR", f"No {target} status for '{status}'", payload)
