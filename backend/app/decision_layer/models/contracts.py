"""Answer Contract Models"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.core.config import settings

from .enums import (
    AnswerContract,
    ContractSelectionMethod,
    EmptyResultBehavior,
    ResponseFormat,
    ScopeType,
    SsotMode,
)


class CoverageSummary(BaseModel):
    """Evidence counts gathered for an answer"""
    total_meetings: int = Field(ge=0)
    unique_companies: int = Field(ge=0)


class CoverageThresholds(BaseModel):
    """Upper bounds (inclusive) of the LIMITED and NOTE coverage tiers"""
    model_config = ConfigDict(frozen=True)

    limited_max_meetings: int = 2
    limited_max_companies: int = 1
    note_max_meetings: int = 5
    note_max_companies: int = 2

    @classmethod
    def from_settings(cls) -> "CoverageThresholds":
        return cls(
            limited_max_meetings=settings.COVERAGE_LIMITED_MAX_MEETINGS,
            limited_max_companies=settings.COVERAGE_LIMITED_MAX_COMPANIES,
            note_max_meetings=settings.COVERAGE_NOTE_MAX_MEETINGS,
            note_max_companies=settings.COVERAGE_NOTE_MAX_COMPANIES,
        )


class ContractConstraints(BaseModel):
    """Execution constraints attached to a contract"""
    model_config = ConfigDict(frozen=True)

    ssot_mode: SsotMode
    requires_evidence: bool
    allows_summary: bool
    requires_citation: bool
    response_format: ResponseFormat
    empty_result_behavior: EmptyResultBehavior
    min_evidence_threshold: Optional[int] = None
    max_length: Optional[int] = None


class ContractSelection(BaseModel):
    contract: AnswerContract
    method: ContractSelectionMethod
    constraints: ContractConstraints


class ContractChain(BaseModel):
    """Ordered contracts executed in sequence (extraction -> analysis -> drafting)"""
    contracts: List[AnswerContract]
    selection_method: ContractSelectionMethod
    primary_contract: AnswerContract
    clarify_reason: Optional[str] = None


class ScopeFilters(BaseModel):
    company: Optional[str] = None
    topic: Optional[str] = None
    time_range_start: Optional[datetime] = None
    time_range_end: Optional[datetime] = None


class ChainBuildScope(BaseModel):
    """Resolved evidence scope used when building a contract chain"""
    type: ScopeType = ScopeType.NONE
    meeting_id: Optional[str] = None
    meeting_ids: Optional[List[str]] = None
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    filters: ScopeFilters = Field(default_factory=ScopeFilters)
    coverage: Optional[CoverageSummary] = None
