"""Patterns - deterministic regex rule sets"""

from .library import (
    DATE_REFERENCE,
    LAST_MEETING_PATTERNS,
    LAST_MONTH,
    LAST_WEEK,
    MEETING_WORDS,
    MULTI_INTENT_PATTERNS,
    PATTERN_LIBRARY_VERSION,
    REFUSE_PATTERNS,
    SIMPLE_GREETINGS,
    TEMPORAL_PATTERNS,
    PatternRule,
    PatternSet,
    detect_multi_intent,
    has_multi_meeting_signal,
    has_product_signal,
    has_temporal_reference,
    is_situation_advice,
    match_greeting,
    match_refusal,
)

__all__ = [
    # Types
    "PatternRule",
    "PatternSet",
    "PATTERN_LIBRARY_VERSION",
    # Rule sets
    "REFUSE_PATTERNS",
    "MULTI_INTENT_PATTERNS",
    "SIMPLE_GREETINGS",
    "TEMPORAL_PATTERNS",
    "LAST_MEETING_PATTERNS",
    "DATE_REFERENCE",
    "LAST_WEEK",
    "LAST_MONTH",
    "MEETING_WORDS",
    # Matchers
    "match_refusal",
    "match_greeting",
    "detect_multi_intent",
    "has_product_signal",
    "is_situation_advice",
    "has_multi_meeting_signal",
    "has_temporal_reference",
]
