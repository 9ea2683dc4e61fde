"""Contract Chain Builder

Builds an ordered contract chain for a multi-step request:
1. identify tasks in the message
2. map tasks to contracts (scope-aware)
3. fall back to the intent default when no task matched
4. order by phase (extraction -> analysis -> drafting)
5. validate; an invalid chain becomes [CLARIFY]
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from backend.app.core.decorators import trace_log
from backend.app.core.logging import get_logger
from backend.app.decision_layer.models import (
    AnswerContract,
    ChainBuildScope,
    ContractChain,
    ContractSelectionMethod,
    Intent,
    ScopeType,
    SsotMode,
)

from .constraints import PHASE_ORDER, get_contract_constraints, get_contract_phase

logger = get_logger(__name__)

C = AnswerContract
MAX_CHAIN_LENGTH = 3

TOO_MANY_TASKS_REASON = (
    "Your request seems to combine multiple distinct tasks. "
    "Could you break it into separate questions?"
)
MIXED_AUTHORITY_REASON = (
    "Your question combines meeting-specific information with product knowledge. "
    "Please ask these as separate questions."
)


@dataclass(frozen=True)
class TaskDefinition:
    task: str
    pattern: re.Pattern
    contracts: Tuple[AnswerContract, ...]
    intents: frozenset[Intent]


def _task(name: str, pattern: str, contracts: Tuple[AnswerContract, ...], *intents: Intent) -> TaskDefinition:
    return TaskDefinition(
        task=name,
        pattern=re.compile(pattern, re.IGNORECASE),
        contracts=contracts,
        intents=frozenset(intents),
    )


_SINGLE, _MULTI = Intent.SINGLE_MEETING, Intent.MULTI_MEETING

TASK_KEYWORDS: Tuple[TaskDefinition, ...] = (
    _task("extract_questions", r"questions?|asked|concerns|objections",
          (C.CUSTOMER_QUESTIONS, C.CROSS_MEETING_QUESTIONS), _SINGLE, _MULTI),
    _task("summarize", r"summarize|summary|overview", (C.MEETING_SUMMARY,), _SINGLE),
    _task("extract_actions", r"action items?|next steps?|to-?do", (C.NEXT_STEPS,), _SINGLE),
    _task("extract_attendees", r"who\s+(was|attended|joined)|attendees?|participants?",
          (C.ATTENDEES,), _SINGLE),
    _task("analyze_patterns", r"pattern|recurring|theme|common\s+theme", (C.PATTERN_ANALYSIS,), _MULTI),
    _task("compare", r"compare|difference|differ|contrast|versus|vs\b", (C.COMPARISON,), _MULTI),
    _task("analyze_trends", r"trend|over time|changing|evolving|progression", (C.TREND_SUMMARY,), _MULTI),
    _task("draft_response", r"help\s+(me\s+)?(answer|respond|reply)|draft\s+(a\s+)?response",
          (C.DRAFT_RESPONSE,), _SINGLE, _MULTI, Intent.GENERAL_HELP),
    _task("draft_email", r"draft\s+(an?\s+)?email|write\s+(an?\s+)?email|email\s+template",
          (C.DRAFT_EMAIL,), Intent.GENERAL_HELP),
    _task("external_research", r"research|earnings\s+call|public\s+statement|their\s+priorit",
          (C.EXTERNAL_RESEARCH,), Intent.EXTERNAL_RESEARCH),
    _task("sales_docs_prep",
          r"slide\s+deck|sales\s+deck|pitch\s+deck|presentation\s+for|draft.*slides?|create.*slides?",
          (C.SALES_DOCS_PREP,), Intent.EXTERNAL_RESEARCH),
    _task("product_connection",
          r"value\s*prop|pitcrew['’]?s?\s+value|our\s+value|connect.*pitcrew|align.*offering"
          r"|match.*product|our\s+offer|pitcrew\s+offer|based\s+on\s+pitcrew"
          r"|pitcrew['’]?s?\s+(?:features?|capabilities?|approach)",
          (C.PRODUCT_KNOWLEDGE,),
          Intent.EXTERNAL_RESEARCH, Intent.GENERAL_HELP, _SINGLE, _MULTI, Intent.PRODUCT_KNOWLEDGE),
)


def identify_tasks(message: str, intent: Intent) -> List[TaskDefinition]:
    return [t for t in TASK_KEYWORDS if intent in t.intents and t.pattern.search(message)]


def contract_for_task(task: TaskDefinition, scope: ChainBuildScope) -> AnswerContract:
    """Map a task to a contract, adjusted for the evidence scope"""
    if task.task == "extract_questions":
        if scope.type == ScopeType.SINGLE_MEETING:
            return C.CUSTOMER_QUESTIONS
        if scope.type == ScopeType.MULTI_MEETING:
            return C.CROSS_MEETING_QUESTIONS

    if task.task == "analyze_patterns" and scope.type == ScopeType.MULTI_MEETING:
        if scope.filters.topic:
            return C.AGGREGATIVE_LIST
        if scope.meeting_ids is not None and len(scope.meeting_ids) <= 3:
            return C.COMPARISON

    return task.contracts[0]


def default_chain_contract(intent: Intent, scope: ChainBuildScope) -> AnswerContract:
    if intent == Intent.SINGLE_MEETING:
        return C.EXTRACTIVE_FACT
    if intent == Intent.MULTI_MEETING:
        if scope.filters.topic or scope.filters.company:
            return C.AGGREGATIVE_LIST
        return C.PATTERN_ANALYSIS
    if intent == Intent.PRODUCT_KNOWLEDGE:
        return C.PRODUCT_EXPLANATION
    if intent == Intent.EXTERNAL_RESEARCH:
        return C.EXTERNAL_RESEARCH
    return C.GENERAL_RESPONSE


def validate_chain(contracts: List[AnswerContract]) -> Optional[str]:
    """Return the clarify reason of an invalid chain, or None"""
    if len(contracts) > MAX_CHAIN_LENGTH:
        return TOO_MANY_TASKS_REASON

    modes = {get_contract_constraints(c).ssot_mode for c in contracts}
    # meeting evidence and authoritative product claims don't mix
    if SsotMode.NONE in modes and SsotMode.AUTHORITATIVE in modes:
        return MIXED_AUTHORITY_REASON

    return None


@trace_log(layer="contracts", action="build_contract_chain")
def build_contract_chain(
    message: str,
    intent: Intent,
    scope: Optional[ChainBuildScope] = None,
) -> ContractChain:
    """Build the ordered contract chain for a message

    Args:
        message: user message
        intent: classified intent
        scope: resolved evidence scope

    Returns:
        ContractChain; [CLARIFY] with a reason when validation fails
    """
    scope = scope or ChainBuildScope()
    tasks = identify_tasks(message, intent)

    contracts: List[AnswerContract] = []
    for task in tasks:
        contract = contract_for_task(task, scope)
        if contract not in contracts:
            contracts.append(contract)

    if not contracts:
        contracts.append(default_chain_contract(intent, scope))

    # stable sort keeps message order within a phase
    contracts.sort(key=lambda c: PHASE_ORDER[get_contract_phase(c)])

    reason = validate_chain(contracts)
    if reason is not None:
        logger.info(
            "Contract chain rejected",
            contracts=[c.value for c in contracts],
            reason=reason,
        )
        return ContractChain(
            contracts=[C.CLARIFY],
            selection_method=ContractSelectionMethod.VALIDATION_FAILURE,
            primary_contract=C.CLARIFY,
            clarify_reason=reason,
        )

    logger.debug(
        "Contract chain built",
        tasks=[t.task for t in tasks],
        contracts=[c.value for c in contracts],
    )
    return ContractChain(
        contracts=contracts,
        selection_method=ContractSelectionMethod.KEYWORD,
        primary_contract=contracts[0],
    )
