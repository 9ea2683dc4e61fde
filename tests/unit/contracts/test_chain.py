"""Contract chain builder tests"""

from backend.app.decision_layer.contracts import (
    MIXED_AUTHORITY_REASON,
    TOO_MANY_TASKS_REASON,
    build_contract_chain,
    get_contract_phase,
)
from backend.app.decision_layer.models import (
    AnswerContract,
    ChainBuildScope,
    ContractSelectionMethod,
    Intent,
    ScopeFilters,
    ScopeType,
    TaskPhase,
)

C = AnswerContract


class TestBuildContractChain:
    """Task identification, ordering and validation"""

    def test_multiple_extraction_tasks(self):
        """Each matched task contributes one contract"""
        chain = build_contract_chain("Summarize the meeting and list the action items", Intent.SINGLE_MEETING)
        assert chain.contracts == [C.MEETING_SUMMARY, C.NEXT_STEPS]
        assert chain.primary_contract == C.MEETING_SUMMARY
        assert chain.selection_method == ContractSelectionMethod.KEYWORD

    def test_phase_ordering(self):
        """Extraction runs before analysis"""
        chain = build_contract_chain(
            "Research ACE and build a slide deck based on PitCrew's value",
            Intent.EXTERNAL_RESEARCH,
        )
        assert chain.contracts == [C.PRODUCT_KNOWLEDGE, C.EXTERNAL_RESEARCH, C.SALES_DOCS_PREP]
        phases = [get_contract_phase(c) for c in chain.contracts]
        assert phases == [TaskPhase.EXTRACTION, TaskPhase.ANALYSIS, TaskPhase.ANALYSIS]

    def test_extractive_and_authoritative_mix_clarifies(self):
        """Meeting extraction combined with authoritative product claims is rejected"""
        chain = build_contract_chain("Summarize the meeting based on PitCrew's value", Intent.SINGLE_MEETING)
        assert chain.contracts == [C.CLARIFY]
        assert chain.selection_method == ContractSelectionMethod.VALIDATION_FAILURE
        assert chain.clarify_reason == MIXED_AUTHORITY_REASON

    def test_too_many_tasks_clarifies(self):
        """More than three contracts is rejected"""
        chain = build_contract_chain(
            "Summarize it, list action items, tell me who attended and what questions they asked",
            Intent.SINGLE_MEETING,
        )
        assert chain.contracts == [C.CLARIFY]
        assert chain.clarify_reason == TOO_MANY_TASKS_REASON

    def test_default_contract(self):
        """No task falls back to the intent default"""
        chain = build_contract_chain("What was their budget?", Intent.SINGLE_MEETING)
        assert chain.contracts == [C.EXTRACTIVE_FACT]


class TestScopeAwareContracts:
    """Contracts adjusted for the evidence scope"""

    def test_questions_single_vs_multi(self):
        """Question extraction depends on single or multi meeting scope"""
        single = build_contract_chain(
            "What questions came up?", Intent.SINGLE_MEETING, ChainBuildScope(type=ScopeType.SINGLE_MEETING)
        )
        multi = build_contract_chain(
            "What questions came up?", Intent.MULTI_MEETING, ChainBuildScope(type=ScopeType.MULTI_MEETING)
        )
        assert single.contracts == [C.CUSTOMER_QUESTIONS]
        assert multi.contracts == [C.CROSS_MEETING_QUESTIONS]

    def test_topic_filter_gives_aggregative_list(self):
        """Pattern questions with a topic filter list matching evidence"""
        scope = ChainBuildScope(type=ScopeType.MULTI_MEETING, filters=ScopeFilters(topic="pricing"))
        chain = build_contract_chain("Any recurring pattern on pricing?", Intent.MULTI_MEETING, scope)
        assert chain.contracts == [C.AGGREGATIVE_LIST]

    def test_few_meetings_give_comparison(self):
        """Pattern questions over three or fewer meetings become a comparison"""
        scope = ChainBuildScope(type=ScopeType.MULTI_MEETING, meeting_ids=["m1", "m2"])
        chain = build_contract_chain("Any recurring pattern?", Intent.MULTI_MEETING, scope)
        assert chain.contracts == [C.COMPARISON]

    def test_multi_default_with_company_filter(self):
        """A company filter without a task defaults to AGGREGATIVE_LIST"""
        scope = ChainBuildScope(type=ScopeType.MULTI_MEETING, filters=ScopeFilters(company="ACE Hardware"))
        chain = build_contract_chain("What did we learn?", Intent.MULTI_MEETING, scope)
        assert chain.contracts == [C.AGGREGATIVE_LIST]
