"""Decision layer orchestration tests"""

import pytest

from backend.app.core.errors import LLMError
from backend.app.decision_layer.decision import (
    check_aggregate_specificity,
    generate_scope_note,
    parse_aggregate_scope,
    run_decision_layer,
    should_ask_for_time_range,
)
from backend.app.decision_layer.models import AnswerContract, ContractSelectionMethod, Intent
from backend.app.decision_layer.router import IntentRouter


# =============================================================================
# Aggregate scope helpers
# =============================================================================

class TestScopeHelpers:
    """Scope note, time-range check and scope parsing"""

    @pytest.mark.parametrize("has_time,has_scope,note", [
        (False, False, "_Searching across all customers, all time._"),
        (True, False, "_Searching across all customers._"),
        (False, True, "_Searching across all time._"),
        (True, True, ""),
    ])
    def test_scope_note(self, has_time, has_scope, note):
        """Only the missing dimensions are mentioned"""
        assert generate_scope_note(has_time, has_scope) == note

    def test_time_range_needed(self):
        """Unbounded questions over more meetings than the limit ask for a range"""
        message = should_ask_for_time_range(False, 101)
        assert message.startswith("You have 101 meetings on record.")
        assert "- Last quarter" in message

    @pytest.mark.parametrize("has_time,count", [(False, 100), (True, 500), (False, 0)])
    def test_time_range_not_needed(self, has_time, count):
        """A time range or a small corpus needs no clarification"""
        assert should_ask_for_time_range(has_time, count) == ""

    def test_custom_limit(self):
        """The limit can be overridden per call"""
        assert should_ask_for_time_range(False, 6, limit=5)

    def test_parse_scope(self):
        """Raw LLM keys map onto AggregateScope"""
        scope = parse_aggregate_scope({
            "scopeType": "specific",
            "specificCompanies": ["ACE Hardware", ""],
            "hasTimeRange": True,
            "hasCustomerScope": True,
            "meetingLimit": "3",
        })
        assert scope.scope_type == "specific"
        assert scope.all_customers is False
        assert scope.specific_companies == ["ACE Hardware"]
        assert scope.has_time_range is True
        assert scope.meeting_limit == 3

    @pytest.mark.parametrize("parsed", [
        {"scopeType": "everything", "specificCompanies": "ACE", "meetingLimit": True},
        {"specificCompanies": [], "meetingLimit": 0},
        {"meetingLimit": "several"},
    ])
    def test_parse_scope_defaults(self, parsed):
        """Unusable values fall back to an empty scope"""
        scope = parse_aggregate_scope(parsed)
        assert scope.scope_type == "none"
        assert scope.specific_companies is None
        assert scope.meeting_limit is None

    @pytest.mark.parametrize("raw,expected", [
        ("false", False),
        ("TRUE", True),
        (True, True),
        ("yes", False),
        (1, False),
    ])
    def test_parse_scope_flags(self, raw, expected):
        """Flags accept JSON booleans and "true"/"false" strings only"""
        scope = parse_aggregate_scope({"hasTimeRange": raw, "hasCustomerScope": raw})
        assert scope.has_time_range is expected
        assert scope.has_customer_scope is expected

    def test_parse_scope_field_types(self):
        """Non-string explanations and companies are dropped"""
        scope = parse_aggregate_scope({
            "scopeType": "specific",
            "specificCompanies": [5, None, "ACE"],
            "timeRangeExplanation": {"text": "Q3"},
            "customerScopeExplanation": 7,
            "meetingLimit": float("inf"),
        })
        assert scope.specific_companies == ["ACE"]
        assert scope.time_range_explanation == ""
        assert scope.customer_scope_explanation == ""
        assert scope.meeting_limit is None

    async def test_specificity_failure(self, fake_llm):
        """Specificity check failures return an empty scope"""
        fake_llm.generate_json.side_effect = LLMError("provider down")
        scope = await check_aggregate_specificity("Any patterns lately?", llm_client=fake_llm)
        assert scope.scope_type == "none"
        assert scope.has_time_range is False

    async def test_specificity_uses_thread(self, llm_factory, thread_factory):
        """Earlier thread turns are sent as history"""
        llm = llm_factory(json_response={"scopeType": "all", "hasTimeRange": True})
        thread = thread_factory(("Only look at last quarter", False), ("Got it.", True), ("Any patterns?", False))

        scope = await check_aggregate_specificity("Any patterns?", thread, llm_client=llm)

        assert scope.all_customers is True
        history = llm.generate_json.await_args.kwargs["history"]
        assert history[0] == {"role": "user", "content": "Only look at last quarter"}


# =============================================================================
# run_decision_layer
# =============================================================================

class TestRunDecisionLayer:
    """Full pipeline with in-memory stores and a fake LLM"""

    async def test_single_meeting_regex_reference(self, entity_resolver, fake_llm):
        """Single-meeting questions carry the meeting reference result"""
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=fake_llm)
        result = await run_decision_layer(
            "What did ACE Hardware say in the last meeting?", router=router, llm_client=fake_llm
        )

        assert result.intent == Intent.SINGLE_MEETING
        assert result.contract.contract == AnswerContract.EXTRACTIVE_FACT
        assert result.context_layers.enabled() == ["product_identity", "single_meeting"]
        assert result.meeting_reference.has_meeting_ref is True
        assert result.meeting_reference.llm_called is False
        assert result.contract_chain is None
        assert result.scope is None
        fake_llm.generate.assert_not_awaited()

    async def test_single_meeting_llm_reference(self, entity_resolver, llm_factory):
        """Without a regex hit the YES/NO classifier decides"""
        llm = llm_factory(text="YES")
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=llm)
        result = await run_decision_layer("What did ACE Hardware say about pricing?", router=router, llm_client=llm)

        assert result.meeting_reference.has_meeting_ref is True
        assert result.meeting_reference.llm_called is True
        llm.generate.assert_awaited_once()

    async def test_multi_meeting_specific_scope(self, entity_resolver, llm_factory, meeting_store):
        """A detected customer scope is kept and the note mentions the missing range"""
        llm = llm_factory(json_response={
            "scopeType": "specific",
            "specificCompanies": ["Les Schwab"],
            "hasCustomerScope": True,
            "hasTimeRange": False,
        })
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=llm)
        result = await run_decision_layer(
            "Find all objections from Les Schwab", router=router, meeting_store=meeting_store, llm_client=llm
        )

        assert result.intent == Intent.MULTI_MEETING
        assert result.contract.contract == AnswerContract.CROSS_MEETING_QUESTIONS
        assert result.scope.scope_type == "specific"
        assert result.scope.specific_companies == ["Les Schwab"]
        assert result.scope_note == "_Searching across all time._"
        assert result.meeting_reference is None

    async def test_multi_meeting_no_scope_means_all(self, entity_resolver, fake_llm, meeting_store):
        """No detectable scope is treated as all customers"""
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=fake_llm)
        result = await run_decision_layer(
            "Find all objections from Les Schwab", router=router, meeting_store=meeting_store, llm_client=fake_llm
        )

        assert result.scope.scope_type == "all"
        assert result.scope.all_customers is True
        assert result.scope_note == "_Searching across all customers, all time._"

    async def test_aggregate_asks_for_time_range(self, entity_resolver, fake_llm, meeting_store):
        """Unbounded aggregate questions over a large corpus ask for a time range"""
        meeting_store.extra_meeting_count = 200
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=fake_llm)
        result = await run_decision_layer(
            "Find all objections from Les Schwab", router=router, meeting_store=meeting_store, llm_client=fake_llm
        )

        assert result.intent == Intent.CLARIFY
        assert result.clarify_message.startswith("You have 205 meetings on record.")
        assert result.notes == ["aggregate_scope_check"]
        assert result.proposed_interpretation.intent == Intent.MULTI_MEETING
        assert result.proposed_interpretation.contracts == ["CROSS_MEETING_QUESTIONS"]
        assert result.scope.scope_type == "all"

    async def test_time_range_skips_clarification(self, entity_resolver, llm_factory, meeting_store):
        """A detected time range proceeds even over a large corpus"""
        meeting_store.extra_meeting_count = 200
        llm = llm_factory(json_response={"scopeType": "all", "hasTimeRange": True, "hasCustomerScope": True})
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=llm)
        result = await run_decision_layer(
            "Find all objections from Les Schwab", router=router, meeting_store=meeting_store, llm_client=llm
        )

        assert result.intent == Intent.MULTI_MEETING
        assert result.scope_note is None
        assert result.notes == []

    async def test_no_store_skips_count(self, entity_resolver, fake_llm):
        """Without a meeting store the aggregate count is skipped"""
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=fake_llm)
        result = await run_decision_layer("Find all objections from Les Schwab", router=router, llm_client=fake_llm)
        assert result.intent == Intent.MULTI_MEETING

    async def test_proposed_chain(self, entity_resolver, fake_llm):
        """Multiple proposed contracts become the contract chain"""
        fake_llm.generate_json.return_value = {
            "proposedIntent": "EXTERNAL_RESEARCH",
            "proposedContracts": ["EXTERNAL_RESEARCH", "SALES_DOCS_PREP"],
            "confidence": 0.85,
        }
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=fake_llm)
        result = await run_decision_layer("Does it work with Square?", router=router, llm_client=fake_llm)

        assert result.intent == Intent.EXTERNAL_RESEARCH
        assert result.contract.contract == AnswerContract.EXTERNAL_RESEARCH
        assert result.contract.method == ContractSelectionMethod.LLM_PROPOSED
        assert result.contract_chain == [AnswerContract.EXTERNAL_RESEARCH, AnswerContract.SALES_DOCS_PREP]

    async def test_refusal_no_llm(self, entity_resolver, fake_llm):
        """Refused questions never reach an LLM"""
        router = IntentRouter(entity_resolver=entity_resolver, llm_client=fake_llm)
        result = await run_decision_layer("What's the weather in Seattle?", router=router, llm_client=fake_llm)

        assert result.intent == Intent.REFUSE
        assert result.contract.contract == AnswerContract.REFUSE
        assert result.context_layers.enabled() == ["product_identity"]
        fake_llm.generate.assert_not_awaited()
        fake_llm.generate_json.assert_not_awaited()
