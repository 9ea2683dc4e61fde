"""Contracts - answer contract constraints, selection, chains and execution helpers"""

from .constraints import (
    CONTRACT_CONSTRAINTS,
    DEFAULT_INTENT_CONTRACT,
    INTENT_CONTRACTS,
    PHASE_ORDER,
    get_contract_constraints,
    get_contract_phase,
    get_default_contract,
    valid_contracts_for,
)

from .selection import (
    parse_contracts,
    select_answer_contract,
    select_contract_by_keyword,
    select_contract_by_llm,
)

from .chain import (
    MIXED_AUTHORITY_REASON,
    TASK_KEYWORDS,
    TOO_MANY_TASKS_REASON,
    build_contract_chain,
    identify_tasks,
)

from .executor import CONTRACT_HEADERS, get_contract_header, get_coverage_qualification

__all__ = [
    # Constraints
    "CONTRACT_CONSTRAINTS",
    "INTENT_CONTRACTS",
    "DEFAULT_INTENT_CONTRACT",
    "PHASE_ORDER",
    "get_contract_constraints",
    "get_contract_phase",
    "get_default_contract",
    "valid_contracts_for",
    # Selection
    "parse_contracts",
    "select_answer_contract",
    "select_contract_by_keyword",
    "select_contract_by_llm",
    # Chain
    "TASK_KEYWORDS",
    "TOO_MANY_TASKS_REASON",
    "MIXED_AUTHORITY_REASON",
    "build_contract_chain",
    "identify_tasks",
    # Executor
    "CONTRACT_HEADERS",
    "get_contract_header",
    "get_coverage_qualification",
]
