"""Follow-Up Rules

Refinement patterns ("make it shorter", "try again") and the rules that
infer which intent the previous bot answer served. Rules live in an
immutable ``FollowUpRuleConfig``; registration builds a new snapshot under a
lock and swaps it in, so readers never see a half-updated table.
"""

import re
import threading
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple, Union

from backend.app.core.config import settings
from backend.app.core.errors import ErrorCode, RuleConfigurationError
from backend.app.core.logging import get_logger
from backend.app.decision_layer.models import Intent
from backend.app.decision_layer.patterns import PatternRule

logger = get_logger(__name__)


@dataclass(frozen=True)
class IntentInferenceRule:
    """Bot-text markers that identify the intent of the previous answer"""
    markers: Tuple[str, ...]
    intent: Intent
    description: str


def _p(pattern: str, description: str) -> PatternRule:
    return PatternRule(pattern=re.compile(pattern, re.IGNORECASE), description=description)


DEFAULT_FOLLOW_UP_PATTERNS: Tuple[PatternRule, ...] = (
    _p(r"^(make\s+it|can\s+you\s+make\s+it)\s+(shorter|longer|more\s+concise|simpler|clearer)", "make it X"),
    _p(r"^(too\s+)?(long|short|verbose|wordy|brief)", "too X / X feedback"),
    _p(r"^(better|good|nice),?\s+but\s+(too|a\s+bit|still)", "good but X"),
    _p(r"^try\s+(again|once\s+more)", "try again"),
    _p(r"^(more|less)\s+(concise|detailed|verbose|brief)", "more/less X"),
    _p(r"^(shorten|expand|simplify|clarify)\s+(it|this|that)", "action it"),
    _p(r"^(that'?s?|this\s+is)\s+(too|not)", "that's too X"),
    _p(r"^not\s+quite", "not quite"),
    _p(r"^(tweak|adjust|refine|revise)\s+(it|this|that)", "tweak it"),
    _p(r"^can\s+you\s+(redo|rewrite|revise)", "can you redo"),
    # modification requests against the previous output
    _p(r"^can\s+you\s+(include|add|also\s+show|also\s+include|put\s+in)", "can you include X"),
    _p(r"^(include|add)\s+(the|their|customer|company)", "include the X"),
    _p(r"^(also|and)\s+(include|add|show)", "also include X"),
    _p(r"^(what\s+about|how\s+about)\s+(adding|including)", "what about adding X"),
    _p(r"^(could\s+you|would\s+you)\s+(add|include)", "could you add X"),
)

DEFAULT_INFERENCE_RULES: Tuple[IntentInferenceRule, ...] = (
    IntentInferenceRule(
        markers=("feature description", "description:", "**net safety", "research report", "researching"),
        intent=Intent.EXTERNAL_RESEARCH,
        description="External research / feature description",
    ),
    IntentInferenceRule(
        markers=("meeting", "they said", "action items", "next steps", "discussed", "mentioned"),
        intent=Intent.SINGLE_MEETING,
        description="Meeting-related task",
    ),
    IntentInferenceRule(
        markers=("pitcrew pricing", "pitcrew feature", "integration", "product knowledge", "pitcrew can", "our approach"),
        intent=Intent.PRODUCT_KNOWLEDGE,
        description="Product knowledge task",
    ),
    IntentInferenceRule(
        markers=("across", "meetings", "companies", "calls", "themes", "pattern analysis", "summary of recent", "customer themes"),
        intent=Intent.MULTI_MEETING,
        description="Multi-meeting analysis",
    ),
    IntentInferenceRule(
        markers=("document", "contract", "spec", "pdf", "file", "attachment", "deck", "presentation"),
        intent=Intent.DOCUMENT_SEARCH,
        description="Document search task",
    ),
    IntentInferenceRule(
        markers=("draft", "email", "write", "compose", "help you", "assist"),
        intent=Intent.GENERAL_HELP,
        description="General assistance task",
    ),
)

DEFAULT_INTENT = Intent.GENERAL_HELP
DEFAULT_INTENT_DESCRIPTION = "General follow-up"


@dataclass(frozen=True)
class FollowUpRuleConfig:
    """Immutable snapshot of the follow-up rule tables"""
    patterns: Tuple[PatternRule, ...] = DEFAULT_FOLLOW_UP_PATTERNS
    inference_rules: Tuple[IntentInferenceRule, ...] = DEFAULT_INFERENCE_RULES
    min_thread_messages: int = field(default_factory=lambda: settings.FOLLOW_UP_MIN_THREAD_MESSAGES)
    confidence: float = field(default_factory=lambda: settings.FOLLOW_UP_CONFIDENCE)

    @property
    def pattern_count(self) -> int:
        return len(self.patterns)


# ============================================================
# Validation
# ============================================================

PatternSpec = Union[PatternRule, Tuple[str, str]]
InferenceSpec = Union[IntentInferenceRule, Tuple[Iterable[str], Union[str, Intent], str]]


def _build_pattern(spec: PatternSpec) -> PatternRule:
    if isinstance(spec, PatternRule):
        return spec
    pattern, description = spec
    try:
        compiled = re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise RuleConfigurationError(
            ErrorCode.RULE_INVALID_PATTERN,
            f"Invalid follow-up pattern {pattern!r}: {e}",
            stage="follow_up",
        ) from e
    return PatternRule(pattern=compiled, description=description)


def _build_inference_rule(spec: InferenceSpec) -> IntentInferenceRule:
    if isinstance(spec, IntentInferenceRule):
        markers, intent, description = spec.markers, spec.intent, spec.description
    else:
        markers, intent, description = spec

    resolved = intent if isinstance(intent, Intent) else Intent.parse(intent)
    if resolved is None:
        raise RuleConfigurationError(
            ErrorCode.RULE_UNKNOWN_INTENT,
            f"Unknown intent in inference rule: {intent!r}",
            stage="follow_up",
        )
    return IntentInferenceRule(
        markers=tuple(m.lower() for m in markers),
        intent=resolved,
        description=description,
    )


# ============================================================
# Registry
# ============================================================

class FollowUpRuleRegistry:
    """Holds the current rule snapshot; writers swap it copy-on-write"""

    def __init__(self, config: Optional[FollowUpRuleConfig] = None):
        self._default = config or FollowUpRuleConfig()
        self._config = self._default
        self._lock = threading.Lock()

    @property
    def config(self) -> FollowUpRuleConfig:
        return self._config

    def register_patterns(self, rules: Iterable[PatternSpec]) -> FollowUpRuleConfig:
        # validate everything before touching the snapshot
        new_rules = tuple(_build_pattern(rule) for rule in rules)
        with self._lock:
            self._config = replace(self._config, patterns=self._config.patterns + new_rules)
            config = self._config
        logger.info("Follow-up patterns registered", added=len(new_rules), total=config.pattern_count)
        return config

    def register_inference_rules(self, rules: Iterable[InferenceSpec]) -> FollowUpRuleConfig:
        new_rules = tuple(_build_inference_rule(rule) for rule in rules)
        with self._lock:
            self._config = replace(
                self._config,
                inference_rules=self._config.inference_rules + new_rules,
            )
            config = self._config
        logger.info("Intent inference rules registered", added=len(new_rules))
        return config

    def reset_to_defaults(self) -> FollowUpRuleConfig:
        with self._lock:
            self._config = self._default
        return self._default


_registry = FollowUpRuleRegistry()


def get_follow_up_registry() -> FollowUpRuleRegistry:
    return _registry


def register_follow_up_patterns(rules: Iterable[PatternSpec]) -> FollowUpRuleConfig:
    """Append refinement patterns to the process-wide rule snapshot"""
    return _registry.register_patterns(rules)


def register_intent_inference_rules(rules: Iterable[InferenceSpec]) -> FollowUpRuleConfig:
    """Append intent inference rules to the process-wide rule snapshot

    Raises:
        RuleConfigurationError: a rule names an unknown intent
    """
    return _registry.register_inference_rules(rules)


def reset_to_defaults() -> FollowUpRuleConfig:
    return _registry.reset_to_defaults()
