"""LLM Interpretation and Validation

Semantic fallbacks of the intent router:
- interpret_ambiguous_query: what does the user most likely want, plus a
  smart clarification message when we are not sure
- validate_low_confidence_intent: confirm or override a weak deterministic
  match (fail-open)
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from backend.app.core.errors import DecisionLayerError
from backend.app.core.logging import get_logger
from backend.app.decision_layer.contracts import get_default_contract, parse_contracts
from backend.app.decision_layer.llm_manager import (
    INTERPRETATION,
    VALIDATION,
    LLMClient,
    coerce_flag,
    coerce_text,
    get_llm_client,
    get_system_prompt,
)
from backend.app.decision_layer.models import (
    AnswerContract,
    ClarifyWithInterpretation,
    Intent,
    IntentValidationResult,
    InterpretationAlternative,
    InterpretationMetadata,
    ProposedInterpretation,
    ThreadContext,
)

logger = get_logger(__name__)

FALLBACK_CLARIFY_MESSAGE = (
    "I'd like to help, but I want to make sure I understand. "
    "Could you tell me a bit more about what you're looking for?"
)
DEFAULT_INTERPRETATION = "you have a question I'd like to help with"
MAX_ALTERNATIVES = 3


def thread_history(thread_context: Optional[ThreadContext]) -> List[Dict[str, str]]:
    """Prior turns (all but the current message) as chat messages"""
    if thread_context is None or len(thread_context.messages) <= 1:
        return []
    return [
        {"role": "assistant" if m.is_bot else "user", "content": m.text}
        for m in thread_context.history()
    ]


# ============================================================
# Interpretation
# ============================================================

def _contracts_from(entry: Dict[str, Any], plural: str, singular: str) -> List[str]:
    raw = entry.get(plural)
    if not raw and entry.get(singular):
        raw = [entry[singular]]
    return [c.value for c in parse_contracts(raw if isinstance(raw, list) else [])]


def _clamp(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = default
    return max(0.0, min(1.0, number))


def build_smart_clarify_message(
    question_form: str,
    confidence: float,
    alternatives: Sequence[InterpretationAlternative],
    partial_answer: Optional[str] = None,
) -> str:
    """Lead with the best guess, offer a partial answer and numbered alternatives"""
    parts = [question_form, ""]

    if partial_answer and confidence > 0.5:
        parts.extend([f"If so—{partial_answer}", ""])

    if alternatives:
        parts.append("Or did you mean:")
        for index, alt in enumerate(alternatives, start=1):
            line = f"{index}. {alt.description}"
            if alt.hint:
                line += f" ({alt.hint})"
            parts.append(line)
        parts.append("")

    if alternatives:
        parts.append("Reply with a number or describe what you need!")
    elif confidence < 0.8:
        parts.append("Let me know if that's right, or tell me more!")
    else:
        parts.append("Let me know!")

    return "\n".join(parts).strip()


def parse_interpretation(
    parsed: Dict[str, Any],
    failure_reason: str,
) -> ClarifyWithInterpretation:
    """Normalize a raw interpretation JSON object

    Invalid intents become GENERAL_HELP, contracts are filtered to known tags
    (falling back to the intent default), confidence is clamped to [0, 1]
    and at most three alternatives are kept.
    """
    intent = Intent.parse(parsed.get("proposedIntent")) or Intent.GENERAL_HELP

    contracts = _contracts_from(parsed, "proposedContracts", "proposedContract")
    if not contracts:
        contracts = [get_default_contract(intent).value]

    confidence = _clamp(parsed.get("confidence"), 0.5)
    summary = coerce_text(parsed.get("interpretation"), DEFAULT_INTERPRETATION)
    question_form = coerce_text(parsed.get("questionForm"), f"Are you asking about {summary}?")
    partial_answer = (
        coerce_text(parsed.get("partialAnswer"))
        if coerce_flag(parsed.get("canPartialAnswer"), False)
        else None
    )

    raw_alternatives = parsed.get("alternatives")
    if not isinstance(raw_alternatives, list):
        raw_alternatives = []

    alternatives: List[InterpretationAlternative] = []
    for raw in raw_alternatives[:MAX_ALTERNATIVES]:
        if not isinstance(raw, dict) or not coerce_text(raw.get("description")):
            continue
        alt_intent = Intent.parse(raw.get("intent")) or Intent.GENERAL_HELP
        alt_contracts = _contracts_from(raw, "contracts", "contract") or [
            AnswerContract.GENERAL_RESPONSE.value
        ]
        if alt_intent == intent and alt_contracts == contracts:
            continue
        alternatives.append(
            InterpretationAlternative(
                intent=alt_intent,
                contracts=alt_contracts,
                description=raw["description"],
                hint=coerce_text(raw.get("hint")),
            )
        )

    message = build_smart_clarify_message(question_form, confidence, alternatives, partial_answer)

    return ClarifyWithInterpretation(
        message=message,
        proposed_interpretation=ProposedInterpretation(
            intent=intent,
            contracts=contracts,
            summary=summary,
        ),
        alternatives=alternatives,
        metadata=InterpretationMetadata(
            proposed_intent=intent,
            proposed_contracts=contracts,
            confidence=confidence,
            failure_reason=failure_reason,
            question_form=question_form,
            partial_answer=partial_answer,
        ),
    )


async def interpret_ambiguous_query(
    question: str,
    failure_reason: str,
    thread_context: Optional[ThreadContext] = None,
    llm_client: Optional[LLMClient] = None,
) -> ClarifyWithInterpretation:
    """Ask the LLM what an unmatched question most likely means

    Args:
        question: user message
        failure_reason: why the deterministic stages could not decide
        thread_context: thread history passed as prior turns
        llm_client: interpretation client

    Returns:
        ClarifyWithInterpretation

    Raises:
        DecisionLayerError: LLM call failed or returned unusable output
    """
    client = llm_client or get_llm_client(INTERPRETATION)
    history = thread_history(thread_context)

    parsed = await client.generate_json(
        question,
        system_prompt=get_system_prompt(INTERPRETATION),
        history=history,
    )

    result = parse_interpretation(parsed, failure_reason)
    logger.info(
        "LLM interpretation",
        intent=result.proposed_interpretation.intent.value,
        contracts=result.proposed_interpretation.contracts,
        confidence=result.metadata.confidence,
        failure_reason=failure_reason,
        history_length=len(history),
    )
    return result


# ============================================================
# Validation
# ============================================================

def _confirmed(reason: str) -> IntentValidationResult:
    return IntentValidationResult(confirmed=True, confidence=0.5, reason=reason)


async def validate_low_confidence_intent(
    question: str,
    intent: Intent,
    reason: str,
    matched_signals: Sequence[str] = (),
    llm_client: Optional[LLMClient] = None,
) -> IntentValidationResult:
    """Confirm or override a weak deterministic match

    Any failure is treated as confirmation so that validation never blocks
    a request.
    """
    client = llm_client or get_llm_client(VALIDATION)
    system_prompt = get_system_prompt(
        VALIDATION,
        intent=intent.value,
        reason=reason,
        signals=", ".join(matched_signals) or "none",
    )

    try:
        parsed = await client.generate_json(
            f"User question: {json.dumps(question)}",
            system_prompt=system_prompt,
        )
    except DecisionLayerError as e:
        logger.warning("LLM validation failed, defaulting to confirmed", error_code=e.code.value, error=e.message)
        return _confirmed("LLM validation error, defaulting to confirmed")
    except Exception as e:
        logger.error("LLM validation error, defaulting to confirmed", error=str(e), error_type=type(e).__name__)
        return _confirmed("LLM validation error, defaulting to confirmed")

    # anything but an explicit false (bool or "false") confirms
    confirmed = coerce_flag(parsed.get("confirmed"), True)
    raw_intent = parsed.get("suggestedIntent")
    suggested = Intent.parse(raw_intent)

    if not confirmed and raw_intent and suggested is None:
        logger.warning("LLM suggested an invalid intent", suggested_intent=str(raw_intent)[:50])
        return _confirmed("LLM suggested invalid intent")

    suggested_contract = AnswerContract.parse(parsed.get("suggestedContract"))

    result = IntentValidationResult(
        confirmed=confirmed,
        suggested_intent=suggested,
        suggested_contract=suggested_contract.value if suggested_contract else None,
        confidence=_clamp(parsed.get("confidence"), 0.7),
        reason=coerce_text(parsed.get("reason"), "No reason provided"),
    )
    logger.info(
        "LLM validation",
        intent=intent.value,
        confirmed=result.confirmed,
        suggested_intent=suggested.value if suggested else None,
    )
    return result
