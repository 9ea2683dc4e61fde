"""LLM interpretation, validation and context layer tests"""

import pytest

from backend.app.core.errors import LLMResponseError
from backend.app.decision_layer.models import Intent, InterpretationAlternative
from backend.app.decision_layer.router import (
    build_smart_clarify_message,
    compute_context_layers,
    interpret_ambiguous_query,
    parse_interpretation,
    validate_low_confidence_intent,
)


class TestParseInterpretation:
    """Normalization of the raw interpretation JSON"""

    def test_invalid_intent_becomes_general_help(self):
        """Unknown intents fall back to GENERAL_HELP and its default contract"""
        result = parse_interpretation({"proposedIntent": "SMALL_TALK", "confidence": 0.7}, "no_intent_match")
        assert result.proposed_interpretation.intent == Intent.GENERAL_HELP
        assert result.proposed_interpretation.contracts == ["GENERAL_RESPONSE"]

    def test_contracts_filtered(self):
        """Only known contract tags survive, in order"""
        result = parse_interpretation(
            {
                "proposedIntent": "EXTERNAL_RESEARCH",
                "proposedContracts": ["EXTERNAL_RESEARCH", "MAKE_COFFEE", "SALES_DOCS_PREP"],
                "confidence": 0.8,
            },
            "no_intent_match",
        )
        assert result.proposed_interpretation.contracts == ["EXTERNAL_RESEARCH", "SALES_DOCS_PREP"]

    def test_singular_contract_accepted(self):
        """A single proposedContract is treated as a one-item chain"""
        result = parse_interpretation({"proposedIntent": "MULTI_MEETING", "proposedContract": "TREND_SUMMARY"}, "x")
        assert result.proposed_interpretation.contracts == ["TREND_SUMMARY"]

    @pytest.mark.parametrize("raw,expected", [(1.7, 1.0), (-0.2, 0.0), ("high", 0.5), (None, 0.5)])
    def test_confidence_clamped(self, raw, expected):
        """Confidence is clamped to [0, 1] with 0.5 for unusable values"""
        result = parse_interpretation({"proposedIntent": "SINGLE_MEETING", "confidence": raw}, "x")
        assert result.metadata.confidence == expected

    def test_alternatives_capped_and_deduplicated(self):
        """At most three alternatives are kept and the proposal itself is dropped"""
        alternatives = [
            {"intent": "SINGLE_MEETING", "contracts": ["EXTRACTIVE_FACT"], "description": "same as proposal"},
            {"intent": "MULTI_MEETING", "contracts": ["PATTERN_ANALYSIS"], "description": "Across meetings"},
            {"intent": "PRODUCT_KNOWLEDGE", "description": "Product pricing", "hint": "tiers"},
            {"intent": "BOGUS", "description": "Something else"},
        ]
        result = parse_interpretation(
            {
                "proposedIntent": "SINGLE_MEETING",
                "proposedContracts": ["EXTRACTIVE_FACT"],
                "confidence": 0.6,
                "alternatives": alternatives,
            },
            "x",
        )
        descriptions = [a.description for a in result.alternatives]
        assert descriptions == ["Across meetings", "Product pricing"]


class TestSmartClarifyMessage:
    """Smart clarification message layout"""

    def test_full_message(self):
        """Question, partial answer, numbered alternatives and closing line"""
        message = build_smart_clarify_message(
            "Are you asking about Pro tier pricing?",
            0.7,
            [InterpretationAlternative(intent=Intent.SINGLE_MEETING, description="Pricing discussed with ACE", hint="last call")],
            partial_answer="Pro tier is billed per location.",
        )
        assert message == (
            "Are you asking about Pro tier pricing?\n"
            "\n"
            "If so—Pro tier is billed per location.\n"
            "\n"
            "Or did you mean:\n"
            "1. Pricing discussed with ACE (last call)\n"
            "\n"
            "Reply with a number or describe what you need!"
        )

    def test_partial_answer_needs_confidence(self):
        """Partial answers are only offered above 0.5 confidence"""
        message = build_smart_clarify_message("Did you mean X?", 0.4, [], partial_answer="X is Y")
        assert "If so" not in message
        assert message.endswith("Let me know if that's right, or tell me more!")

    def test_confident_closing(self):
        """High confidence without alternatives closes briefly"""
        assert build_smart_clarify_message("Did you mean X?", 0.9, []) == "Did you mean X?\n\nLet me know!"


class TestInterpretAmbiguousQuery:
    """interpret_ambiguous_query"""

    async def test_thread_history_passed(self, llm_factory, thread_factory):
        """Prior turns are sent as assistant/user history"""
        llm = llm_factory(json_response={"proposedIntent": "SINGLE_MEETING", "confidence": 0.8})
        thread = thread_factory(("What did ACE say?", False), ("They asked about pricing.", True), ("and then?", False))

        await interpret_ambiguous_query("and then?", "no_intent_match", thread, llm_client=llm)

        history = llm.generate_json.await_args.kwargs["history"]
        assert history == [
            {"role": "user", "content": "What did ACE say?"},
            {"role": "assistant", "content": "They asked about pricing."},
        ]

    async def test_failure_raises(self, fake_llm):
        """LLM failures propagate so the router can fall back"""
        fake_llm.generate_json.side_effect = LLMResponseError("Empty LLM response")
        with pytest.raises(LLMResponseError):
            await interpret_ambiguous_query("huh?", "no_intent_match", llm_client=fake_llm)


class TestValidateLowConfidenceIntent:
    """validate_low_confidence_intent fails open"""

    async def test_error_confirms(self, fake_llm):
        """Any error is treated as confirmation"""
        fake_llm.generate_json.side_effect = RuntimeError("boom")
        result = await validate_low_confidence_intent("q", Intent.SINGLE_MEETING, "reason", llm_client=fake_llm)
        assert result.confirmed is True

    async def test_invalid_suggestion_confirms(self, llm_factory):
        """An invalid suggested intent is ignored"""
        llm = llm_factory(json_response={"confirmed": False, "suggestedIntent": "CHITCHAT"})
        result = await validate_low_confidence_intent("q", Intent.SINGLE_MEETING, "reason", llm_client=llm)
        assert result.confirmed is True
        assert result.reason == "LLM suggested invalid intent"

    async def test_prompt_carries_classification(self, llm_factory):
        """The system prompt names the intent, reason and signals"""
        llm = llm_factory(json_response={"confirmed": True})
        await validate_low_confidence_intent(
            "q", Intent.MULTI_MEETING, "entity match", ["entity:ACE Hardware"], llm_client=llm
        )
        system_prompt = llm.generate_json.await_args.kwargs["system_prompt"]
        assert "MULTI_MEETING" in system_prompt
        assert "entity match" in system_prompt
        assert "entity:ACE Hardware" in system_prompt


class TestContextLayers:
    """Intent-gated context layers"""

    @pytest.mark.parametrize("intent,layer", [
        (Intent.SINGLE_MEETING, "single_meeting"),
        (Intent.MULTI_MEETING, "multi_meeting"),
        (Intent.PRODUCT_KNOWLEDGE, "product_ssot"),
        (Intent.EXTERNAL_RESEARCH, "product_ssot"),
        (Intent.DOCUMENT_SEARCH, "document_context"),
        (Intent.SLACK_SEARCH, "slack_search"),
    ])
    def test_layer_per_intent(self, intent, layer):
        """Product identity plus the intent's layer are enabled"""
        meta = compute_context_layers(intent)
        assert meta.layers.enabled() == ["product_identity", layer]
        assert meta.reason == f"product_identity always enabled. {layer} enabled for {intent.value} intent."

    @pytest.mark.parametrize("intent", [Intent.GENERAL_HELP, Intent.CLARIFY, Intent.REFUSE])
    def test_identity_only(self, intent):
        """Other intents only get product identity"""
        assert compute_context_layers(intent).layers.enabled() == ["product_identity"]


class TestMalformedPayloads:
    """Wrongly typed JSON fields are coerced, never raised"""

    async def test_validation_field_types(self, llm_factory):
        """Non-string reason and contract fall back to defaults"""
        llm = llm_factory(json_response={
            "confirmed": "false",
            "suggestedIntent": "MULTI_MEETING",
            "suggestedContract": ["PATTERN_ANALYSIS"],
            "confidence": "high",
            "reason": 42,
        })
        result = await validate_low_confidence_intent("q", Intent.SINGLE_MEETING, "reason", llm_client=llm)

        assert result.confirmed is False
        assert result.suggested_intent == Intent.MULTI_MEETING
        assert result.suggested_contract is None
        assert result.confidence == 0.7
        assert result.reason == "No reason provided"

    async def test_non_string_suggested_intent(self, llm_factory):
        """A non-string suggested intent counts as invalid"""
        llm = llm_factory(json_response={"confirmed": False, "suggestedIntent": ["MULTI_MEETING"]})
        result = await validate_low_confidence_intent("q", Intent.SINGLE_MEETING, "reason", llm_client=llm)
        assert result.confirmed is True

    def test_interpretation_field_types(self):
        """Non-string text fields and a non-list alternatives field use defaults"""
        result = parse_interpretation(
            {
                "proposedIntent": 3,
                "proposedContracts": [1, None, "FAQ_ANSWER"],
                "interpretation": {"text": "x"},
                "questionForm": 12,
                "canPartialAnswer": "true",
                "partialAnswer": ["Pro tier"],
                "alternatives": {"intent": "MULTI_MEETING"},
            },
            "no_intent_match",
        )
        assert result.proposed_interpretation.intent == Intent.GENERAL_HELP
        assert result.proposed_interpretation.contracts == ["FAQ_ANSWER"]
        assert result.metadata.question_form.startswith("Are you asking about")
        assert result.metadata.partial_answer is None
        assert result.alternatives == []

    def test_alternative_field_types(self):
        """Alternatives with non-string descriptions are skipped, bad hints dropped"""
        result = parse_interpretation(
            {
                "proposedIntent": "SINGLE_MEETING",
                "alternatives": [
                    {"intent": "MULTI_MEETING", "description": 5},
                    {"intent": "PRODUCT_KNOWLEDGE", "description": "Product pricing", "hint": 9},
                ],
            },
            "x",
        )
        assert [a.description for a in result.alternatives] == ["Product pricing"]
        assert result.alternatives[0].hint is None
