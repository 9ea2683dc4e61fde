"""Answer Contract Constraints

Static tables: execution constraints per contract, valid contracts per
intent, contract phases for chain ordering.
"""

from typing import Dict, List, Optional, Tuple

from backend.app.decision_layer.models import (
    AnswerContract,
    ContractConstraints,
    EmptyResultBehavior,
    Intent,
    ResponseFormat,
    SsotMode,
    TaskPhase,
)

C = AnswerContract


def _c(
    ssot: SsotMode,
    evidence: bool,
    summary: bool,
    citation: bool,
    fmt: ResponseFormat,
    empty: EmptyResultBehavior,
    min_evidence: Optional[int] = None,
) -> ContractConstraints:
    return ContractConstraints(
        ssot_mode=ssot,
        requires_evidence=evidence,
        allows_summary=summary,
        requires_citation=citation,
        response_format=fmt,
        empty_result_behavior=empty,
        min_evidence_threshold=min_evidence,
    )


_NONE, _DESC, _AUTH = SsotMode.NONE, SsotMode.DESCRIPTIVE, SsotMode.AUTHORITATIVE
_TEXT, _LIST, _STRUCT = ResponseFormat.TEXT, ResponseFormat.LIST, ResponseFormat.STRUCTURED
_EMPTY, _CLARIFY, _REFUSE = (
    EmptyResultBehavior.RETURN_EMPTY,
    EmptyResultBehavior.CLARIFY,
    EmptyResultBehavior.REFUSE,
)

#                                  ssot   evid   summ   cite   format   empty     min
CONTRACT_CONSTRAINTS: Dict[AnswerContract, ContractConstraints] = {
    C.MEETING_SUMMARY:         _c(_NONE, False, True,  False, _TEXT,   _CLARIFY),
    C.NEXT_STEPS:              _c(_NONE, True,  False, True,  _LIST,   _EMPTY),
    C.ATTENDEES:               _c(_NONE, False, False, False, _LIST,   _EMPTY),
    C.CUSTOMER_QUESTIONS:      _c(_NONE, True,  False, True,  _LIST,   _EMPTY),
    C.EXTRACTIVE_FACT:         _c(_NONE, True,  False, True,  _TEXT,   _CLARIFY, 1),
    C.AGGREGATIVE_LIST:        _c(_NONE, True,  False, False, _LIST,   _EMPTY),
    C.PATTERN_ANALYSIS:        _c(_NONE, True,  True,  True,  _TEXT,   _CLARIFY, 2),
    C.COMPARISON:              _c(_NONE, True,  False, True,  _STRUCT, _CLARIFY, 2),
    C.TREND_SUMMARY:           _c(_NONE, True,  True,  True,  _TEXT,   _CLARIFY, 3),
    C.CROSS_MEETING_QUESTIONS: _c(_NONE, True,  False, True,  _LIST,   _EMPTY),
    C.PRODUCT_EXPLANATION:     _c(_DESC, False, True,  False, _TEXT,   _EMPTY),
    C.VALUE_PROPOSITION:       _c(_DESC, False, True,  False, _TEXT,   _EMPTY),
    C.DRAFT_RESPONSE:          _c(_DESC, False, True,  False, _TEXT,   _EMPTY),
    C.DRAFT_EMAIL:             _c(_DESC, False, True,  False, _TEXT,   _EMPTY),
    C.FEATURE_VERIFICATION:    _c(_AUTH, True,  False, True,  _TEXT,   _REFUSE,  1),
    C.FAQ_ANSWER:              _c(_AUTH, True,  False, False, _TEXT,   _CLARIFY),
    C.PRODUCT_KNOWLEDGE:       _c(_AUTH, False, True,  True,  _TEXT,   _EMPTY),
    C.EXTERNAL_RESEARCH:       _c(_DESC, False, True,  False, _TEXT,   _CLARIFY),
    C.SALES_DOCS_PREP:         _c(_DESC, False, True,  False, _STRUCT, _CLARIFY),
    C.GENERAL_RESPONSE:        _c(_NONE, False, True,  False, _TEXT,   _EMPTY),
    C.NOT_FOUND:               _c(_NONE, False, False, False, _TEXT,   _EMPTY),
    C.SLACK_MESSAGE_SEARCH:    _c(_NONE, True,  False, True,  _LIST,   _EMPTY,   1),
    C.SLACK_CHANNEL_INFO:      _c(_NONE, False, False, False, _LIST,   _EMPTY),
    C.REFUSE:                  _c(_NONE, False, False, False, _TEXT,   _REFUSE),
    C.CLARIFY:                 _c(_NONE, False, False, False, _TEXT,   _CLARIFY),
}


def get_contract_constraints(contract: AnswerContract) -> ContractConstraints:
    return CONTRACT_CONSTRAINTS[contract]


# ============================================================
# Intent -> contracts
# ============================================================

INTENT_CONTRACTS: Dict[Intent, Tuple[AnswerContract, ...]] = {
    Intent.SINGLE_MEETING: (
        C.MEETING_SUMMARY, C.NEXT_STEPS, C.ATTENDEES,
        C.CUSTOMER_QUESTIONS, C.EXTRACTIVE_FACT, C.AGGREGATIVE_LIST,
    ),
    Intent.MULTI_MEETING: (
        C.PATTERN_ANALYSIS, C.COMPARISON, C.TREND_SUMMARY,
        C.CROSS_MEETING_QUESTIONS, C.AGGREGATIVE_LIST,
    ),
    Intent.PRODUCT_KNOWLEDGE: (
        C.PRODUCT_EXPLANATION, C.FEATURE_VERIFICATION, C.FAQ_ANSWER,
        C.VALUE_PROPOSITION, C.PRODUCT_KNOWLEDGE,
    ),
    Intent.EXTERNAL_RESEARCH: (
        C.EXTERNAL_RESEARCH, C.SALES_DOCS_PREP, C.VALUE_PROPOSITION, C.PRODUCT_KNOWLEDGE,
    ),
    Intent.DOCUMENT_SEARCH: (C.EXTRACTIVE_FACT, C.NOT_FOUND),
    Intent.GENERAL_HELP: (
        C.GENERAL_RESPONSE, C.DRAFT_RESPONSE, C.DRAFT_EMAIL, C.VALUE_PROPOSITION,
    ),
    Intent.SLACK_SEARCH: (C.SLACK_MESSAGE_SEARCH, C.SLACK_CHANNEL_INFO),
    Intent.CLARIFY: (C.CLARIFY,),
    Intent.REFUSE: (C.REFUSE,),
}

DEFAULT_INTENT_CONTRACT: Dict[Intent, AnswerContract] = {
    Intent.SINGLE_MEETING: C.EXTRACTIVE_FACT,
    Intent.MULTI_MEETING: C.PATTERN_ANALYSIS,
    Intent.PRODUCT_KNOWLEDGE: C.PRODUCT_EXPLANATION,
    Intent.EXTERNAL_RESEARCH: C.EXTERNAL_RESEARCH,
    Intent.GENERAL_HELP: C.GENERAL_RESPONSE,
    Intent.CLARIFY: C.CLARIFY,
    Intent.REFUSE: C.REFUSE,
}


def get_default_contract(intent: Intent) -> AnswerContract:
    return DEFAULT_INTENT_CONTRACT.get(intent, C.GENERAL_RESPONSE)


def valid_contracts_for(intent: Intent) -> List[AnswerContract]:
    return list(INTENT_CONTRACTS.get(intent, ()))


# ============================================================
# Phases
# ============================================================

_EXTRACTION = {
    C.MEETING_SUMMARY, C.NEXT_STEPS, C.ATTENDEES, C.CUSTOMER_QUESTIONS,
    C.EXTRACTIVE_FACT, C.AGGREGATIVE_LIST, C.CROSS_MEETING_QUESTIONS,
    C.PRODUCT_KNOWLEDGE, C.SLACK_MESSAGE_SEARCH, C.SLACK_CHANNEL_INFO,
}
_ANALYSIS = {
    C.PATTERN_ANALYSIS, C.COMPARISON, C.TREND_SUMMARY,
    C.EXTERNAL_RESEARCH, C.SALES_DOCS_PREP,
}

PHASE_ORDER: Dict[TaskPhase, int] = {
    TaskPhase.EXTRACTION: 1,
    TaskPhase.ANALYSIS: 2,
    TaskPhase.DRAFTING: 3,
}


def get_contract_phase(contract: AnswerContract) -> TaskPhase:
    if contract in _EXTRACTION:
        return TaskPhase.EXTRACTION
    if contract in _ANALYSIS:
        return TaskPhase.ANALYSIS
    return TaskPhase.DRAFTING
