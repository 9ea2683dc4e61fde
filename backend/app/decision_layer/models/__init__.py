"""Models - pydantic value objects for the decision layer

Structure:
- enums.py: Intent, DetectionMethod, AnswerContract and contract attributes
- classification.py: ThreadContext, ClassificationResult, FollowUpResult, LLM interpretation
- entities.py: KnownCompany, EntityMatch, EntitySnapshot
- meetings.py: MeetingReferenceResult, MeetingRecord, meeting resolution variants
- contracts.py: CoverageSummary, ContractConstraints, ContractChain, ChainBuildScope
- decision.py: ContextLayers, AggregateScope, DecisionResult

Usage:
    from backend.app.decision_layer.models import Intent, ClassificationResult
"""

from .enums import (
    AnswerContract,
    ContractSelectionMethod,
    DetectionMethod,
    EmptyResultBehavior,
    EntityMatchType,
    Intent,
    OFFLINE_DETECTION_METHODS,
    ResponseFormat,
    ScopeType,
    SsotMode,
    TaskPhase,
)

from .classification import (
    ClarifyWithInterpretation,
    ClassificationResult,
    DecisionMetadata,
    FollowUpResult,
    IntentValidationResult,
    InterpretationAlternative,
    InterpretationMetadata,
    ProposedInterpretation,
    ThreadContext,
    ThreadMessage,
)

from .entities import EntityMatch, EntitySnapshot, KnownCompany

from .meetings import (
    CompanyContext,
    MeetingClarification,
    MeetingOption,
    MeetingRecord,
    MeetingReferenceResult,
    MeetingResolution,
    ResolvedMeeting,
    UnresolvedMeeting,
)

from .contracts import (
    ChainBuildScope,
    ContractChain,
    ContractConstraints,
    ContractSelection,
    CoverageSummary,
    CoverageThresholds,
    ScopeFilters,
)

from .decision import (
    AggregateScope,
    ContextLayerMetadata,
    ContextLayers,
    DecisionResult,
)

__all__ = [
    # Enums
    "AnswerContract",
    "ContractSelectionMethod",
    "DetectionMethod",
    "EmptyResultBehavior",
    "EntityMatchType",
    "Intent",
    "OFFLINE_DETECTION_METHODS",
    "ResponseFormat",
    "ScopeType",
    "SsotMode",
    "TaskPhase",
    # Classification
    "ClarifyWithInterpretation",
    "ClassificationResult",
    "DecisionMetadata",
    "FollowUpResult",
    "IntentValidationResult",
    "InterpretationAlternative",
    "InterpretationMetadata",
    "ProposedInterpretation",
    "ThreadContext",
    "ThreadMessage",
    # Entities
    "EntityMatch",
    "EntitySnapshot",
    "KnownCompany",
    # Meetings
    "CompanyContext",
    "MeetingClarification",
    "MeetingOption",
    "MeetingRecord",
    "MeetingReferenceResult",
    "MeetingResolution",
    "ResolvedMeeting",
    "UnresolvedMeeting",
    # Contracts
    "ChainBuildScope",
    "ContractChain",
    "ContractConstraints",
    "ContractSelection",
    "CoverageSummary",
    "CoverageThresholds",
    "ScopeFilters",
    # Decision
    "AggregateScope",
    "ContextLayerMetadata",
    "ContextLayers",
    "DecisionResult",
]
