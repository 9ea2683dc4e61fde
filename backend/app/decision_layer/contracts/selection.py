"""Answer Contract Selection

Order: LLM-proposed contracts -> refusal keywords -> per-intent keyword
tables -> LLM contract classification (GENERAL_RESPONSE on failure).
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from backend.app.core.errors import DecisionLayerError
from backend.app.core.logging import get_logger
from backend.app.decision_layer.llm_manager import (
    CONTRACT_SELECTION,
    LLMClient,
    get_llm_client,
    get_system_prompt,
)
from backend.app.decision_layer.models import (
    AnswerContract,
    ContractSelection,
    ContractSelectionMethod,
    Intent,
)

from .constraints import get_contract_constraints

logger = get_logger(__name__)

C = AnswerContract
KeywordTable = Tuple[Tuple[str, AnswerContract], ...]


def _table(*groups: Tuple[AnswerContract, Sequence[str]]) -> KeywordTable:
    return tuple((keyword, contract) for contract, keywords in groups for keyword in keywords)


# ============================================================
# Keyword tables (substring match on the lower-cased question)
# ============================================================

_EMAIL_DRAFT_KEYWORDS = (
    "follow up email", "follow-up email", "prepare a follow up", "prepare a follow-up",
    "draft an email", "write an email", "prepare an email", "thank you email",
    "thank-you email", "thanks email", "write a thank you", "write thank you",
)

SINGLE_MEETING_CONTRACT_KEYWORDS = _table(
    (C.DRAFT_EMAIL, _EMAIL_DRAFT_KEYWORDS),
    (C.DRAFT_RESPONSE, ("help me answer", "draft a response", "respond to")),
    (C.MEETING_SUMMARY, ("summary", "summarize", "overview")),
    (C.NEXT_STEPS, (
        "action items", "actions items", "action item", "next steps", "next step",
        "commitments", "commitment", "follow up", "follow-up", "followup", "to-do", "todo",
    )),
    (C.ATTENDEES, ("attendees", "who was on", "who attended", "participants")),
    (C.CUSTOMER_QUESTIONS, ("customer questions", "what did they ask", "questions asked", "what questions")),
)

PRODUCT_KNOWLEDGE_CONTRACT_KEYWORDS = _table(
    (C.PRODUCT_EXPLANATION, ("how does pitcrew work", "what is pitcrew", "explain pitcrew", "tell me about pitcrew")),
    (C.FEATURE_VERIFICATION, ("does it support", "does pitcrew support", "can pitcrew", "does pitcrew integrate", "integrate with")),
    (C.FAQ_ANSWER, ("how much", "pricing", "cost", "what tier", "pro tier", "advanced tier", "enterprise tier")),
    (C.VALUE_PROPOSITION, ("value prop", "why pitcrew", "benefits of")),
)

GENERAL_CONTRACT_KEYWORDS = _table(
    (C.DRAFT_EMAIL, (
        "draft an email", "write an email", "compose an email", "email template", "help me write",
        "follow up email", "follow-up email", "prepare an email", "prepare a follow up",
        "prepare a follow-up", "thank you email", "thank-you email", "thanks email",
        "write a thank you", "write thank you",
    )),
)

MULTI_MEETING_CONTRACT_KEYWORDS = _table(
    (C.PATTERN_ANALYSIS, (
        "pattern", "patterns", "recurring", "common theme", "frequently", "often",
        "always come up", "keeps coming up",
    )),
    (C.COMPARISON, ("compare", "difference", "differences", "differ", "contrast", "versus", "vs", "between meetings")),
    (C.TREND_SUMMARY, ("trend", "trends", "over time", "changing", "evolving", "growing", "declining", "progression")),
    (C.CROSS_MEETING_QUESTIONS, (
        "questions across", "common questions", "what are customers asking", "frequently asked",
        "most asked", "objections", "concerns raised", "concerns", "customer concerns",
        "bigger concerns", "main concerns", "issues", "customer issues", "problems", "feedback",
        "customer feedback", "worries", "hesitations", "reservations", "pain points",
        "challenges", "customer challenges",
    )),
)

# (keyword table, default contract) per intent
INTENT_KEYWORD_TABLES: dict[Intent, Tuple[KeywordTable, AnswerContract]] = {
    Intent.SINGLE_MEETING: (SINGLE_MEETING_CONTRACT_KEYWORDS, C.EXTRACTIVE_FACT),
    Intent.MULTI_MEETING: (MULTI_MEETING_CONTRACT_KEYWORDS, C.PATTERN_ANALYSIS),
    Intent.PRODUCT_KNOWLEDGE: (PRODUCT_KNOWLEDGE_CONTRACT_KEYWORDS, C.PRODUCT_EXPLANATION),
    Intent.GENERAL_HELP: (GENERAL_CONTRACT_KEYWORDS, C.GENERAL_RESPONSE),
}

CONTRACT_REFUSE_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(weather|forecast|temperature)\b",
        r"\b(home address|personal address|private address)\b",
        r"\b(stock price|stock market|invest)\b",
        r"\b(revenue|profit|how much money)\s+(will|would|can|could)\b",
        r"\b(what's the time|current time|what time is it)\b",
    )
)


# ============================================================
# Selection
# ============================================================

def _selection(contract: AnswerContract, method: ContractSelectionMethod) -> ContractSelection:
    return ContractSelection(
        contract=contract,
        method=method,
        constraints=get_contract_constraints(contract),
    )


def parse_contracts(values: Optional[Iterable[str]]) -> List[AnswerContract]:
    """Keep the valid contract tags, in order"""
    contracts = []
    for value in values or ():
        contract = AnswerContract.parse(value)
        if contract is not None:
            contracts.append(contract)
    return contracts


def should_refuse_contract(question: str) -> bool:
    return any(p.search(question) for p in CONTRACT_REFUSE_PATTERNS)


def select_contract_by_keyword(question: str, intent: Intent) -> Optional[ContractSelection]:
    """Deterministic selection; None when the intent has no keyword table"""
    lower = question.lower()

    if should_refuse_contract(question):
        return _selection(C.REFUSE, ContractSelectionMethod.KEYWORD)

    if intent == Intent.REFUSE:
        return _selection(C.REFUSE, ContractSelectionMethod.KEYWORD)
    if intent == Intent.CLARIFY:
        return _selection(C.CLARIFY, ContractSelectionMethod.KEYWORD)

    if intent == Intent.EXTERNAL_RESEARCH:
        if "slide" in lower or "deck" in lower or "pitch" in lower:
            return _selection(C.SALES_DOCS_PREP, ContractSelectionMethod.KEYWORD)
        if "value prop" in lower:
            return _selection(C.VALUE_PROPOSITION, ContractSelectionMethod.KEYWORD)
        return _selection(C.EXTERNAL_RESEARCH, ContractSelectionMethod.DEFAULT)

    entry = INTENT_KEYWORD_TABLES.get(intent)
    if entry is None:
        return None

    table, default = entry
    for keyword, contract in table:
        if keyword in lower:
            return _selection(contract, ContractSelectionMethod.KEYWORD)
    return _selection(default, ContractSelectionMethod.DEFAULT)


async def select_contract_by_llm(
    question: str,
    intent: Intent,
    llm_client: Optional[LLMClient] = None,
) -> ContractSelection:
    """Ask the LLM for a contract; GENERAL_RESPONSE on any failure"""
    client = llm_client or get_llm_client(CONTRACT_SELECTION)
    system_prompt = get_system_prompt(
        CONTRACT_SELECTION,
        intent=intent.value,
        contracts=", ".join(c.value for c in AnswerContract),
    )

    try:
        parsed = await client.generate_json(question, system_prompt=system_prompt)
    except DecisionLayerError as e:
        logger.warning("LLM contract selection failed", error_code=e.code.value, error=e.message)
        return _selection(C.GENERAL_RESPONSE, ContractSelectionMethod.DEFAULT)
    except Exception as e:
        logger.error("LLM contract selection error", error=str(e), error_type=type(e).__name__)
        return _selection(C.GENERAL_RESPONSE, ContractSelectionMethod.DEFAULT)

    contract = AnswerContract.parse(parsed.get("contract"))
    if contract is None:
        logger.warning("LLM proposed an unknown contract", contract=parsed.get("contract"))
        return _selection(C.GENERAL_RESPONSE, ContractSelectionMethod.DEFAULT)

    return _selection(contract, ContractSelectionMethod.LLM)


async def select_answer_contract(
    question: str,
    intent: Intent,
    llm_proposed_contracts: Optional[Sequence[str]] = None,
    llm_client: Optional[LLMClient] = None,
) -> ContractSelection:
    """Select the answer contract for a classified question

    Args:
        question: user message
        intent: classified intent
        llm_proposed_contracts: contract chain proposed by LLM interpretation
        llm_client: client for the LLM fallback

    Returns:
        ContractSelection
    """
    proposed = parse_contracts(llm_proposed_contracts)
    if proposed:
        logger.debug(
            "Contract selected",
            contract=proposed[0].value,
            method="llm_proposed",
            chain=[c.value for c in proposed],
        )
        return _selection(proposed[0], ContractSelectionMethod.LLM_PROPOSED)

    keyword_result = select_contract_by_keyword(question, intent)
    if keyword_result is not None:
        logger.debug(
            "Contract selected",
            contract=keyword_result.contract.value,
            method=keyword_result.method.value,
        )
        return keyword_result

    logger.debug("No proposal or keyword match, using LLM contract selection", intent=intent.value)
    return await select_contract_by_llm(question, intent, llm_client)
