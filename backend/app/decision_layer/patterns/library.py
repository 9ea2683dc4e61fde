"""Pattern Library

Versioned, immutable regex rule sets used by the deterministic fast paths of
the intent router and the meeting reference resolver. Rule order is
significant: the first matching rule wins.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from backend.app.core.logging import get_logger

logger = get_logger(__name__)

PATTERN_LIBRARY_VERSION = "2025.1"


# ============================================================
# Rule Types
# ============================================================

@dataclass(frozen=True)
class PatternRule:
    """One compiled regex with a human readable description"""
    pattern: re.Pattern
    description: str

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class PatternSet:
    """Ordered, immutable group of rules"""
    name: str
    version: str
    rules: Tuple[PatternRule, ...]

    def first_match(self, text: str) -> Optional[PatternRule]:
        for rule in self.rules:
            if rule.matches(text):
                return rule
        return None

    def matches(self, text: str) -> bool:
        return self.first_match(text) is not None


def _rule(pattern: str, description: str, flags: int = re.IGNORECASE) -> PatternRule:
    return PatternRule(pattern=re.compile(pattern, flags), description=description)


def _set(name: str, *rules: PatternRule) -> PatternSet:
    return PatternSet(name=name, version=PATTERN_LIBRARY_VERSION, rules=tuple(rules))


# ============================================================
# Refusal / Multi-intent / Greetings
# ============================================================

REFUSE_PATTERNS = _set(
    "refuse",
    _rule(r"\bweather\s+(in|like|forecast)\b", "weather"),
    _rule(r"\bstock\s+(price|market|ticker)\b", "stock market"),
    _rule(r"\bhome\s+address\b", "home address"),
    _rule(r"\bpersonal\s+(address|phone|email)\b", "personal contact details"),
    _rule(r"\bhow\s+much\s+(revenue|money|profit)\s+will\b", "financial prediction"),
    _rule(r"\bwhat('s| is)\s+the\s+time\b", "current time"),
    _rule(r"\b(tell\s+me\s+a\s+)?joke\b", "joke"),
    _rule(r"\bwrite\s+(me\s+)?a?\s*(poem|story|song)\b", "creative writing"),
)

MULTI_INTENT_PATTERNS = _set(
    "multi_intent",
    _rule(
        r"\b(summarize|summary)\b.*\b(and|then)\b.*\b(pricing|check|email|compare)\b",
        "summarize + other task",
    ),
    _rule(
        r"\b(answer|respond)\b.*\b(and|then)\b.*\b(email|summarize|pricing)\b",
        "answer + other task",
    ),
    _rule(r"\bcompare\b.*\b(and|then)\b.*\b(email|summarize)\b", "compare + other task"),
)

MULTI_INTENT_SPLIT_OPTIONS: Tuple[str, ...] = ("meeting content", "other request")

SIMPLE_GREETINGS: frozenset[str] = frozenset({
    "hello",
    "hi",
    "hi there",
    "hey",
    "hey there",
    "good morning",
    "good afternoon",
    "good evening",
    "thanks",
    "thank you",
    "thanks!",
    "thank you!",
})


# ============================================================
# Product / Advice / Multi-meeting signals
# ============================================================

PRODUCT_SIGNAL_PATTERNS = _set(
    "product_signal",
    _rule(
        r"\b(based\s+on\s+pitcrew|pitcrew['’]?s?\s+value|our\s+value\s+prop"
        r"|how\s+(should\s+we|can\s+we|do\s+we)\s+(approach|help|handle)"
        r"|help\s+me\s+think\s+through|think\s+through\s+how"
        r"|our\s+(q[1-4]\s+)?roadmap|what['’]?s\s+on\s+our\s+roadmap"
        r"|features?\s+coming\s+next|our\s+recommended\s+approach"
        r"|what['’]?s\s+our\s+(recommended\s+)?approach)\b",
        "strategic advice request",
    ),
)

SITUATION_PATTERNS = _set(
    "situation",
    _rule(
        r"\b(pattern\s+we['’]?re\s+seeing|emerging\s+pattern|customers?\s+want|they\s+want)\b",
        "describing a customer situation",
    ),
)

ADVICE_PATTERNS = _set(
    "advice",
    _rule(
        r"\b(how\s+(can|should|do)\s+we|help\s+me|what\s+should|approach\s+this)\b",
        "asking for advice",
    ),
)

MULTI_MEETING_SIGNAL_PATTERNS = _set(
    "multi_meeting_signal",
    _rule(r"\b(all|every|across|find|which|any)\b", "multi-meeting signal word"),
)


# ============================================================
# Temporal meeting references
# ============================================================

MEETING_WORDS = "meeting|call|transcript|sync|session|conversation|chat|touchpoint|demo|visit"

LAST_MEETING_DIRECT = _rule(
    rf"\b(last|latest|most recent)\s+({MEETING_WORDS})\b", "last meeting"
)
LAST_MEETING_WITH_COMPANY = _rule(
    rf"\b(last|latest|most recent)\s+\S+(?:\s+\S+)?\s+({MEETING_WORDS})\b",
    "last <company> meeting",
)
LAST_MEETING_WITH_SUFFIX = _rule(
    rf"\b(last|latest|most recent)\s+({MEETING_WORDS})\s+(?:with|from)\s+",
    "last meeting with <company>",
)
DATE_REFERENCE = _rule(
    rf"\b({MEETING_WORDS})\s+(?:on|from)\s+"
    r"(\w+\s+\d{1,2}(?:,?\s*\d{4})?|\d{1,2}(?:/|-)\d{1,2}(?:(?:/|-)\d{2,4})?)\b",
    "meeting on <date>",
)
LAST_WEEK = _rule(rf"\b({MEETING_WORDS})\s+last\s+week\b", "meeting last week")
LAST_MONTH = _rule(rf"\b({MEETING_WORDS})\s+last\s+month\b", "meeting last month")
IN_THE_LAST = _rule(
    r"\b(?:in|from|during)\s+(?:the|our|their)?\s*(last|latest|most recent)\s+",
    "in the last <x>",
)
RECENT_WITH_COMPANY = _rule(
    rf"\b(?:our|the)?\s*recent\s+\S+(?:\s+\S+)?\s+({MEETING_WORDS})\b",
    "recent <company> meeting",
)
COMPANY_THEN_TEMPORAL = _rule(
    rf"\b\w+(?:\s+\w+)?,\s*(last|latest|recent)\s+({MEETING_WORDS})",
    "<company>, last meeting",
)

TEMPORAL_PATTERNS = _set(
    "temporal",
    LAST_MEETING_DIRECT,
    LAST_MEETING_WITH_COMPANY,
    LAST_MEETING_WITH_SUFFIX,
    DATE_REFERENCE,
    LAST_WEEK,
    LAST_MONTH,
    IN_THE_LAST,
    RECENT_WITH_COMPANY,
    COMPANY_THEN_TEMPORAL,
)

# Subset meaning "the most recent meeting"
LAST_MEETING_PATTERNS = _set(
    "last_meeting",
    LAST_MEETING_DIRECT,
    LAST_MEETING_WITH_COMPANY,
    LAST_MEETING_WITH_SUFFIX,
    IN_THE_LAST,
)


# ============================================================
# Matchers
# ============================================================

def match_refusal(text: str) -> bool:
    """True when the message is clearly out of scope"""
    rule = REFUSE_PATTERNS.first_match(text)
    if rule:
        logger.debug("Refusal pattern matched", rule=rule.description)
        return True
    return False


def match_greeting(text: str) -> bool:
    """True when the whole (trimmed, lower-cased) message is a simple greeting"""
    return text.strip().lower() in SIMPLE_GREETINGS


def detect_multi_intent(text: str) -> Tuple[bool, List[str]]:
    """Detect requests that bundle meeting content with another task

    Returns:
        (needs_split, split_options)
    """
    if MULTI_INTENT_PATTERNS.matches(text):
        return True, list(MULTI_INTENT_SPLIT_OPTIONS)
    return False, []


def has_product_signal(text: str) -> bool:
    return PRODUCT_SIGNAL_PATTERNS.matches(text)


def is_situation_advice(text: str) -> bool:
    """Customer situation description combined with an advice ask"""
    return SITUATION_PATTERNS.matches(text) and ADVICE_PATTERNS.matches(text)


def has_multi_meeting_signal(text: str) -> bool:
    return MULTI_MEETING_SIGNAL_PATTERNS.matches(text)


def has_temporal_reference(text: str) -> bool:
    return TEMPORAL_PATTERNS.matches(text)
