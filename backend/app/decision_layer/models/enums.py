"""Shared Enums for Models

Intent and contract tags use value == name so that strings proposed by the
LLM ("SINGLE_MEETING", "PATTERN_ANALYSIS") round-trip without a lookup table.
"""

from enum import Enum
from typing import Any, Optional


class Intent(str, Enum):
    """Closed set of query intents"""
    SINGLE_MEETING = "SINGLE_MEETING"        # one specific meeting
    MULTI_MEETING = "MULTI_MEETING"          # patterns / trends across meetings
    PRODUCT_KNOWLEDGE = "PRODUCT_KNOWLEDGE"  # product capabilities, pricing
    EXTERNAL_RESEARCH = "EXTERNAL_RESEARCH"  # web / public research
    DOCUMENT_SEARCH = "DOCUMENT_SEARCH"
    GENERAL_HELP = "GENERAL_HELP"            # drafting, greetings
    CLARIFY = "CLARIFY"
    REFUSE = "REFUSE"
    SLACK_SEARCH = "SLACK_SEARCH"

    @classmethod
    def parse(cls, value: Any) -> Optional["Intent"]:
        """Return the member for a tag string, or None for anything else"""
        if not isinstance(value, str) or not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class DetectionMethod(str, Enum):
    """Provenance of a classification result"""
    PATTERN = "pattern"
    ENTITY = "entity"
    LLM_INTERPRETATION = "llm_interpretation"
    DEFAULT = "default"
    FOLLOW_UP_DETECTION = "follow_up_detection"
    PRODUCT_SIGNAL = "product_signal"
    SITUATION_ADVICE = "situation_advice"
    ENTITY_ACRONYM = "entity_acronym"
    LLM_VALIDATED = "llm_validated"


# Methods that never touch the network
OFFLINE_DETECTION_METHODS: frozenset[DetectionMethod] = frozenset({
    DetectionMethod.PATTERN,
    DetectionMethod.ENTITY,
    DetectionMethod.FOLLOW_UP_DETECTION,
    DetectionMethod.PRODUCT_SIGNAL,
    DetectionMethod.SITUATION_ADVICE,
})


class AnswerContract(str, Enum):
    """Response contract handed to the answer generator"""

    # Single meeting, extractive
    MEETING_SUMMARY = "MEETING_SUMMARY"
    NEXT_STEPS = "NEXT_STEPS"
    ATTENDEES = "ATTENDEES"
    CUSTOMER_QUESTIONS = "CUSTOMER_QUESTIONS"
    EXTRACTIVE_FACT = "EXTRACTIVE_FACT"
    AGGREGATIVE_LIST = "AGGREGATIVE_LIST"

    # Multi meeting
    PATTERN_ANALYSIS = "PATTERN_ANALYSIS"
    COMPARISON = "COMPARISON"
    TREND_SUMMARY = "TREND_SUMMARY"
    CROSS_MEETING_QUESTIONS = "CROSS_MEETING_QUESTIONS"

    # Descriptive
    PRODUCT_EXPLANATION = "PRODUCT_EXPLANATION"
    VALUE_PROPOSITION = "VALUE_PROPOSITION"
    DRAFT_RESPONSE = "DRAFT_RESPONSE"
    DRAFT_EMAIL = "DRAFT_EMAIL"

    # Product knowledge (chainable)
    PRODUCT_KNOWLEDGE = "PRODUCT_KNOWLEDGE"

    # Authoritative
    FEATURE_VERIFICATION = "FEATURE_VERIFICATION"
    FAQ_ANSWER = "FAQ_ANSWER"

    # External research
    EXTERNAL_RESEARCH = "EXTERNAL_RESEARCH"
    SALES_DOCS_PREP = "SALES_DOCS_PREP"

    # Slack
    SLACK_MESSAGE_SEARCH = "SLACK_MESSAGE_SEARCH"
    SLACK_CHANNEL_INFO = "SLACK_CHANNEL_INFO"

    # General
    GENERAL_RESPONSE = "GENERAL_RESPONSE"
    NOT_FOUND = "NOT_FOUND"

    # Terminal
    REFUSE = "REFUSE"
    CLARIFY = "CLARIFY"

    @classmethod
    def parse(cls, value: Any) -> Optional["AnswerContract"]:
        """Return the member for a tag string, or None for anything else"""
        if not isinstance(value, str) or not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class SsotMode(str, Enum):
    """How much product source-of-truth authority a contract carries"""
    NONE = "none"
    DESCRIPTIVE = "descriptive"
    AUTHORITATIVE = "authoritative"


class ResponseFormat(str, Enum):
    TEXT = "text"
    LIST = "list"
    STRUCTURED = "structured"


class EmptyResultBehavior(str, Enum):
    """What a contract does when no evidence is found"""
    RETURN_EMPTY = "return_empty"
    CLARIFY = "clarify"
    REFUSE = "refuse"


class ContractSelectionMethod(str, Enum):
    KEYWORD = "keyword"
    LLM = "llm"
    LLM_PROPOSED = "llm_proposed"
    DEFAULT = "default"
    VALIDATION_FAILURE = "validation_failure"


class TaskPhase(str, Enum):
    """Execution phase of a contract inside a chain"""
    EXTRACTION = "extraction"
    ANALYSIS = "analysis"
    DRAFTING = "drafting"


class EntityMatchType(str, Enum):
    FULL = "full"        # full name, base name, parenthetical or alias phrase
    PARTIAL = "partial"  # a single name token


class ScopeType(str, Enum):
    """Scope of meeting evidence for chain building"""
    SINGLE_MEETING = "single_meeting"
    MULTI_MEETING = "multi_meeting"
    NONE = "none"
