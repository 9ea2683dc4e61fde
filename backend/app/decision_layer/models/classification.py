"""Classification Models

Per-request value objects produced by the intent router and the follow-up
detector. Nothing here is cached across requests.
"""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .enums import DetectionMethod, Intent, OFFLINE_DETECTION_METHODS


# ============================================================
# Thread Context
# ============================================================

class ThreadMessage(BaseModel):
    """One message of the surrounding conversation"""
    model_config = ConfigDict(frozen=True)

    text: str
    is_bot: bool = False


class ThreadContext(BaseModel):
    """Ordered conversation history supplied by the transport layer

    The last message is the one being classified. ``meeting_id`` and
    ``company_id`` are set when the thread is already anchored to a meeting.
    """
    model_config = ConfigDict(frozen=True)

    messages: Tuple[ThreadMessage, ...] = ()
    meeting_id: Optional[str] = None
    company_id: Optional[str] = None

    def history(self) -> Tuple[ThreadMessage, ...]:
        """All messages except the current (last) one"""
        return self.messages[:-1]

    def last_bot_message(self) -> Optional[ThreadMessage]:
        for message in reversed(self.messages):
            if message.is_bot:
                return message
        return None


# ============================================================
# Follow-up
# ============================================================

class FollowUpResult(BaseModel):
    """A detected refinement of the previous bot answer"""
    is_follow_up: bool = True
    inferred_intent_key: Intent
    reason: str
    previous_bot_snippet: str
    confidence: float = Field(ge=0.0, le=1.0)


# ============================================================
# LLM Interpretation
# ============================================================

class ProposedInterpretation(BaseModel):
    """What the LLM thinks the user wants

    ``contracts`` is an ordered chain, e.g. ["EXTERNAL_RESEARCH", "SALES_DOCS_PREP"].
    """
    intent: Intent
    contracts: List[str] = Field(default_factory=list)
    summary: str = ""


class InterpretationAlternative(BaseModel):
    intent: Intent
    contracts: List[str] = Field(default_factory=list)
    description: str
    hint: Optional[str] = None


class InterpretationMetadata(BaseModel):
    proposed_intent: Intent
    proposed_contracts: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    failure_reason: str
    question_form: Optional[str] = None
    partial_answer: Optional[str] = None


class ClarifyWithInterpretation(BaseModel):
    """Parsed interpretation plus the user-facing clarification message"""
    message: str
    proposed_interpretation: ProposedInterpretation
    alternatives: List[InterpretationAlternative] = Field(default_factory=list)
    metadata: InterpretationMetadata


class IntentValidationResult(BaseModel):
    """Outcome of validating a weak deterministic match"""
    confirmed: bool
    suggested_intent: Optional[Intent] = None
    suggested_contract: Optional[str] = None
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reason: str = ""


# ============================================================
# Classification Result
# ============================================================

class DecisionMetadata(BaseModel):
    """Observability fields attached to a classification"""
    matched_signals: List[str] = Field(default_factory=list)
    matched_entity: Optional[str] = None
    is_follow_up: bool = False
    previous_bot_snippet: Optional[str] = None
    original_intent: Optional[Intent] = None
    original_reason: Optional[str] = None
    llm_validation: Optional[dict[str, Any]] = None
    llm_interpretation: Optional[InterpretationMetadata] = None
    classification_error: Optional[str] = None


class ClassificationResult(BaseModel):
    """Final intent decision for one message"""
    intent: Intent
    confidence: float = Field(ge=0.0, le=1.0)
    detection_method: DetectionMethod
    needs_split: bool = False
    split_options: List[str] = Field(default_factory=list)
    reason: Optional[str] = None
    clarify_message: Optional[str] = None
    proposed_interpretation: Optional[ProposedInterpretation] = None
    alternatives: List[InterpretationAlternative] = Field(default_factory=list)
    metadata: DecisionMetadata = Field(default_factory=DecisionMetadata)

    @property
    def is_offline(self) -> bool:
        """True when the result was produced without any network call"""
        return self.detection_method in OFFLINE_DETECTION_METHODS
