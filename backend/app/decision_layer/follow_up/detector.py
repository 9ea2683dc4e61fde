"""Follow-Up Detector

Detects a message that refines the previous bot answer ("make it shorter",
"try again") and infers the intent that answer served.
"""

from typing import Optional

from backend.app.core.logging import get_logger
from backend.app.decision_layer.models import FollowUpResult, ThreadContext

from .rules import (
    DEFAULT_INTENT,
    DEFAULT_INTENT_DESCRIPTION,
    FollowUpRuleConfig,
    get_follow_up_registry,
)

logger = get_logger(__name__)

SNIPPET_LENGTH = 100


def detect_follow_up(
    message: str,
    thread_context: Optional[ThreadContext],
    rules: Optional[FollowUpRuleConfig] = None,
) -> Optional[FollowUpResult]:
    """Detect a follow-up refinement

    Args:
        message: current user message
        thread_context: surrounding thread (needs at least two messages)
        rules: rule snapshot; defaults to the registry's current one

    Returns:
        FollowUpResult, or None when the message is not a follow-up
    """
    config = rules or get_follow_up_registry().config

    if thread_context is None or len(thread_context.messages) < config.min_thread_messages:
        return None

    lower = message.strip().lower()

    matched = next((rule for rule in config.patterns if rule.matches(lower)), None)
    if matched is None:
        return None

    last_bot = thread_context.last_bot_message()
    if last_bot is None:
        return None

    bot_text = last_bot.text.lower()

    intent, description = DEFAULT_INTENT, DEFAULT_INTENT_DESCRIPTION
    for rule in config.inference_rules:
        if any(marker in bot_text for marker in rule.markers):
            intent, description = rule.intent, rule.description
            break

    logger.info(
        "Follow-up detected",
        pattern=matched.description,
        inferred_intent=intent.value,
    )

    return FollowUpResult(
        inferred_intent_key=intent,
        reason=f"Follow-up ({matched.description}) to {description}",
        previous_bot_snippet=bot_text[:SNIPPET_LENGTH],
        confidence=config.confidence,
    )
