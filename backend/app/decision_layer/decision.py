"""Decision Layer

Single entry point for the answer pipeline:
classify -> context layers -> answer contract -> meeting reference / aggregate scope.
"""

from typing import Any, Dict, List, Optional

from backend.app.core.config import settings
from backend.app.core.decorators import trace_log
from backend.app.core.errors import DecisionLayerError
from backend.app.core.logging import get_logger
from backend.app.decision_layer.contracts import parse_contracts, select_answer_contract
from backend.app.decision_layer.llm_manager import (
    SCOPE_CHECK,
    LLMClient,
    coerce_flag,
    coerce_text,
    get_llm_client,
    get_system_prompt,
)
from backend.app.decision_layer.meetings import MeetingStore, has_temporal_meeting_reference
from backend.app.decision_layer.models import (
    AggregateScope,
    AnswerContract,
    DecisionResult,
    Intent,
    ProposedInterpretation,
    ThreadContext,
)
from backend.app.decision_layer.router import (
    IntentRouter,
    compute_context_layers,
    get_intent_router,
    thread_history,
)

logger = get_logger(__name__)

AGGREGATE_SCOPE_PROMPT = "aggregate_scope"

# Contracts that read every meeting in scope
AGGREGATE_CONTRACTS = frozenset({
    AnswerContract.CROSS_MEETING_QUESTIONS,
    AnswerContract.PATTERN_ANALYSIS,
    AnswerContract.TREND_SUMMARY,
})

TIME_RANGE_CLARIFY_TEMPLATE = (
    "You have {count} meetings on record. To keep the analysis focused, "
    "could you narrow the time range?\n"
    "\n"
    "- Last month\n"
    "- Last quarter\n"
    "- All time\n"
    "\n"
    'For example: "...from the last quarter"'
)


# ============================================================
# Aggregate scope
# ============================================================

def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def parse_aggregate_scope(parsed: Dict[str, Any]) -> AggregateScope:
    """Normalize the raw specificity JSON returned by the LLM"""
    scope_type = parsed.get("scopeType")
    if scope_type not in ("all", "specific", "none"):
        scope_type = "none"

    companies = parsed.get("specificCompanies")
    if isinstance(companies, list):
        companies = [c for c in (coerce_text(c) for c in companies) if c] or None
    else:
        companies = None

    return AggregateScope(
        scope_type=scope_type,
        all_customers=scope_type == "all",
        specific_companies=companies,
        has_time_range=coerce_flag(parsed.get("hasTimeRange"), False),
        has_customer_scope=coerce_flag(parsed.get("hasCustomerScope"), False),
        time_range_explanation=coerce_text(parsed.get("timeRangeExplanation"), ""),
        customer_scope_explanation=coerce_text(parsed.get("customerScopeExplanation"), ""),
        meeting_limit=_optional_int(parsed.get("meetingLimit")),
    )


async def check_aggregate_specificity(
    question: str,
    thread_context: Optional[ThreadContext] = None,
    llm_client: Optional[LLMClient] = None,
) -> AggregateScope:
    """Ask the LLM whether a multi-meeting question names a time range and customers

    Thread history is included so scope mentioned earlier in the thread
    counts. Any failure returns an empty scope (``none``, nothing detected).
    """
    client = llm_client or get_llm_client(SCOPE_CHECK)

    try:
        parsed = await client.generate_json(
            question,
            system_prompt=get_system_prompt(AGGREGATE_SCOPE_PROMPT),
            history=thread_history(thread_context),
        )
    except DecisionLayerError as e:
        logger.warning("Specificity check failed", error_code=e.code.value, error=e.message)
        return AggregateScope()
    except Exception as e:
        logger.error("Specificity check error", error=str(e), error_type=type(e).__name__)
        return AggregateScope()

    scope = parse_aggregate_scope(parsed)
    logger.info(
        "Specificity check",
        has_time_range=scope.has_time_range,
        has_customer_scope=scope.has_customer_scope,
        scope_type=scope.scope_type,
        specific_companies=scope.specific_companies,
        meeting_limit=scope.meeting_limit,
    )
    return scope


def generate_scope_note(has_time: bool, has_scope: bool) -> str:
    """Italic note telling the user what an unscoped search covers"""
    parts: List[str] = []
    if not has_scope:
        parts.append("all customers")
    if not has_time:
        parts.append("all time")
    if not parts:
        return ""
    return f"_Searching across {', '.join(parts)}._"


def should_ask_for_time_range(
    has_time: bool,
    meeting_count: int,
    limit: Optional[int] = None,
) -> str:
    """Clarification message when an unbounded aggregate would read too many meetings

    Returns:
        The message, or "" when no clarification is needed
    """
    limit = settings.AGGREGATE_TIME_RANGE_MEETING_LIMIT if limit is None else limit
    if not has_time and meeting_count > limit:
        return TIME_RANGE_CLARIFY_TEMPLATE.format(count=meeting_count)
    return ""


# ============================================================
# Orchestration
# ============================================================

@trace_log(layer="decision_layer", action="run_decision_layer")
async def run_decision_layer(
    question: str,
    thread_context: Optional[ThreadContext] = None,
    router: Optional[IntentRouter] = None,
    meeting_store: Optional[MeetingStore] = None,
    llm_client: Optional[LLMClient] = None,
) -> DecisionResult:
    """Decide how to answer a message

    Args:
        question: user message
        thread_context: surrounding thread
        router: intent router (process default when omitted)
        meeting_store: used to count meetings for aggregate questions
        llm_client: client for contract selection, meeting reference and scope checks

    Returns:
        DecisionResult
    """
    router = router or get_intent_router()
    classification = await router.classify(question, thread_context)
    intent = classification.intent

    layers = compute_context_layers(intent)
    proposed_contracts = (
        classification.proposed_interpretation.contracts
        if classification.proposed_interpretation
        else None
    )
    contract = await select_answer_contract(
        question,
        intent,
        llm_proposed_contracts=proposed_contracts,
        llm_client=llm_client,
    )

    logger.info(
        "Decision layer",
        intent=intent.value,
        method=classification.detection_method.value,
        layers=layers.layers.enabled(),
        contract=contract.contract.value,
        contract_method=contract.method.value,
    )

    chain = parse_contracts(proposed_contracts)
    result = DecisionResult(
        intent=intent,
        classification=classification,
        context_layers=layers.layers,
        contract=contract,
        contract_chain=chain if len(chain) > 1 else None,
        clarify_message=classification.clarify_message,
        proposed_interpretation=classification.proposed_interpretation,
    )

    if intent == Intent.SINGLE_MEETING:
        reference = await has_temporal_meeting_reference(question, llm_client=llm_client)
        return result.model_copy(update={"meeting_reference": reference})

    if intent != Intent.MULTI_MEETING:
        return result

    specificity = await check_aggregate_specificity(question, thread_context, llm_client)
    # no detectable scope means all customers
    effective_type = "all" if specificity.scope_type == "none" else specificity.scope_type
    scope = specificity.model_copy(update={
        "scope_type": effective_type,
        "all_customers": effective_type == "all",
    })

    if contract.contract in AGGREGATE_CONTRACTS and meeting_store is not None:
        meeting_count = await meeting_store.count_meetings()
        clarify_message = should_ask_for_time_range(specificity.has_time_range, meeting_count)
        if clarify_message:
            logger.info(
                "Requesting time range",
                meeting_count=meeting_count,
                limit=settings.AGGREGATE_TIME_RANGE_MEETING_LIMIT,
            )
            return result.model_copy(update={
                "intent": Intent.CLARIFY,
                "clarify_message": clarify_message,
                "proposed_interpretation": ProposedInterpretation(
                    intent=intent,
                    contracts=[contract.contract.value],
                    summary="Aggregate analysis - awaiting scope",
                ),
                "scope": scope,
                "notes": ["aggregate_scope_check"],
            })

    return result.model_copy(update={
        "scope": scope,
        "scope_note": generate_scope_note(specificity.has_time_range, specificity.has_customer_scope) or None,
    })
