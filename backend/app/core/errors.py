"""Error Codes and Exceptions

Nothing raised from here is fatal to a classification request: stages catch
these and degrade to a conservative default. Only rule registration errors
propagate to the caller.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    """Error category"""
    CLASSIFICATION = "CLASSIFICATION"  # E1xxx
    LOOKUP = "LOOKUP"                  # E2xxx: entity / meeting stores
    LLM = "LLM"                        # E3xxx
    CONFIGURATION = "CONFIGURATION"    # E4xxx
    SYSTEM = "SYSTEM"                  # E5xxx


class ErrorCode(str, Enum):
    """Error codes"""

    # === E1xxx: Classification ===
    CLASSIFICATION_FAILED = "E1001"
    CLASSIFICATION_TIMEOUT = "E1002"
    INTERPRETATION_FAILED = "E1003"
    VALIDATION_FAILED = "E1004"

    # === E2xxx: Lookup ===
    ENTITY_STORE_UNAVAILABLE = "E2001"
    MEETING_STORE_UNAVAILABLE = "E2002"
    MEETING_NOT_FOUND = "E2003"

    # === E3xxx: LLM ===
    LLM_API_ERROR = "E3001"
    LLM_TIMEOUT = "E3002"
    LLM_MALFORMED_RESPONSE = "E3003"
    LLM_UNKNOWN_PROVIDER = "E3004"

    # === E4xxx: Configuration ===
    RULE_INVALID_PATTERN = "E4001"
    RULE_UNKNOWN_INTENT = "E4002"
    PROMPT_NOT_FOUND = "E4003"

    # === E5xxx: System ===
    INTERNAL_ERROR = "E5001"


ERROR_CATEGORIES: dict[str, ErrorCategory] = {
    "E1": ErrorCategory.CLASSIFICATION,
    "E2": ErrorCategory.LOOKUP,
    "E3": ErrorCategory.LLM,
    "E4": ErrorCategory.CONFIGURATION,
    "E5": ErrorCategory.SYSTEM,
}


# Error Code -> Message mapping
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Classification
    ErrorCode.CLASSIFICATION_FAILED: "Intent classification failed.",
    ErrorCode.CLASSIFICATION_TIMEOUT: "Intent classification exceeded its deadline.",
    ErrorCode.INTERPRETATION_FAILED: "LLM interpretation of the query failed.",
    ErrorCode.VALIDATION_FAILED: "LLM validation of a low-confidence intent failed.",

    # Lookup
    ErrorCode.ENTITY_STORE_UNAVAILABLE: "Known-entity store is unavailable.",
    ErrorCode.MEETING_STORE_UNAVAILABLE: "Meeting store is unavailable.",
    ErrorCode.MEETING_NOT_FOUND: "Meeting not found.",

    # LLM
    ErrorCode.LLM_API_ERROR: "LLM API call failed.",
    ErrorCode.LLM_TIMEOUT: "LLM call timed out.",
    ErrorCode.LLM_MALFORMED_RESPONSE: "LLM returned a malformed response.",
    ErrorCode.LLM_UNKNOWN_PROVIDER: "Unknown LLM provider.",

    # Configuration
    ErrorCode.RULE_INVALID_PATTERN: "Rule pattern is not a valid regular expression.",
    ErrorCode.RULE_UNKNOWN_INTENT: "Rule refers to an unknown intent.",
    ErrorCode.PROMPT_NOT_FOUND: "Prompt file not found.",

    # System
    ErrorCode.INTERNAL_ERROR: "Internal error.",
}


class ErrorDetail(BaseModel):
    """Structured error detail for logs and decision metadata"""
    code: str
    category: str
    message: str
    details: Optional[dict[str, Any]] = None
    stage: Optional[str] = None


class DecisionLayerError(Exception):
    """Base decision layer exception"""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        stage: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Unknown error")
        self.details = details
        self.stage = stage
        super().__init__(self.message)

    @property
    def category(self) -> ErrorCategory:
        return ERROR_CATEGORIES.get(self.code.value[:2], ErrorCategory.SYSTEM)

    def to_detail(self) -> ErrorDetail:
        """Convert to structured detail"""
        return ErrorDetail(
            code=self.code.value,
            category=self.category.value,
            message=self.message,
            details=self.details,
            stage=self.stage,
        )


class LLMError(DecisionLayerError):
    """LLM call errors"""

    def __init__(self, message: Optional[str] = None, **kwargs: Any):
        super().__init__(ErrorCode.LLM_API_ERROR, message, **kwargs)


class LLMTimeoutError(LLMError):
    """LLM call exceeded its budget"""

    def __init__(self, timeout_sec: float, **kwargs: Any):
        DecisionLayerError.__init__(
            self,
            ErrorCode.LLM_TIMEOUT,
            f"LLM call timed out after {timeout_sec}s",
            details={"timeout_sec": timeout_sec},
            **kwargs,
        )


class LLMResponseError(LLMError):
    """LLM returned something that could not be parsed"""

    def __init__(self, message: Optional[str] = None, **kwargs: Any):
        DecisionLayerError.__init__(
            self, ErrorCode.LLM_MALFORMED_RESPONSE, message, **kwargs
        )


class StoreError(DecisionLayerError):
    """Entity / meeting store errors"""
    pass


class RuleConfigurationError(DecisionLayerError):
    """Invalid rule registration"""
    pass
