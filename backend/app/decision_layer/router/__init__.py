"""Router - intent classification, LLM interpretation and context layers"""

from .context_layers import INTENT_LAYER, compute_context_layers

from .interpretation import (
    FALLBACK_CLARIFY_MESSAGE,
    build_smart_clarify_message,
    interpret_ambiguous_query,
    parse_interpretation,
    thread_history,
    validate_low_confidence_intent,
)

from .intent_router import (
    IntentRouter,
    classify_intent,
    fallback_result,
    get_intent_router,
    needs_validation,
)

__all__ = [
    # Context layers
    "INTENT_LAYER",
    "compute_context_layers",
    # Interpretation
    "FALLBACK_CLARIFY_MESSAGE",
    "build_smart_clarify_message",
    "interpret_ambiguous_query",
    "parse_interpretation",
    "thread_history",
    "validate_low_confidence_intent",
    # Router
    "IntentRouter",
    "classify_intent",
    "fallback_result",
    "get_intent_router",
    "needs_validation",
]
