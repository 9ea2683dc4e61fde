"""Decision Models

Context layers and the combined result handed to downstream executors.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .classification import ClassificationResult, ProposedInterpretation
from .contracts import ContractSelection
from .enums import AnswerContract, Intent
from .meetings import MeetingReferenceResult


class ContextLayers(BaseModel):
    """Which evidence sources the answer generator may see"""
    product_identity: bool = True
    product_ssot: bool = False
    single_meeting: bool = False
    multi_meeting: bool = False
    document_context: bool = False
    slack_search: bool = False

    def enabled(self) -> List[str]:
        return [name for name, on in self.model_dump().items() if on]


class ContextLayerMetadata(BaseModel):
    layers: ContextLayers
    reason: str
    intent: Intent


class AggregateScope(BaseModel):
    """Scope detected for a multi-meeting question"""
    scope_type: Literal["all", "specific", "none"] = "none"
    all_customers: bool = False
    specific_companies: Optional[List[str]] = None
    has_time_range: bool = False
    has_customer_scope: bool = False
    time_range_explanation: str = ""
    customer_scope_explanation: str = ""
    meeting_limit: Optional[int] = None


class DecisionResult(BaseModel):
    """Everything the answer-generation stage needs to act on a message"""
    intent: Intent
    classification: ClassificationResult
    context_layers: ContextLayers
    contract: ContractSelection
    contract_chain: Optional[List[AnswerContract]] = None
    clarify_message: Optional[str] = None
    proposed_interpretation: Optional[ProposedInterpretation] = None
    meeting_reference: Optional[MeetingReferenceResult] = None
    scope: Optional[AggregateScope] = None
    scope_note: Optional[str] = None
    notes: List[str] = Field(default_factory=list)
