"""Follow-Up - refinement detection with an immutable rule registry"""

from .rules import (
    DEFAULT_FOLLOW_UP_PATTERNS,
    DEFAULT_INFERENCE_RULES,
    FollowUpRuleConfig,
    FollowUpRuleRegistry,
    IntentInferenceRule,
    get_follow_up_registry,
    register_follow_up_patterns,
    register_intent_inference_rules,
    reset_to_defaults,
)

from .detector import detect_follow_up

__all__ = [
    # Rules
    "IntentInferenceRule",
    "FollowUpRuleConfig",
    "FollowUpRuleRegistry",
    "DEFAULT_FOLLOW_UP_PATTERNS",
    "DEFAULT_INFERENCE_RULES",
    "get_follow_up_registry",
    "register_follow_up_patterns",
    "register_intent_inference_rules",
    "reset_to_defaults",
    # Detector
    "detect_follow_up",
]
