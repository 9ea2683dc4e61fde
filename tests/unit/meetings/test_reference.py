"""Meeting Reference Resolver tests"""

import pytest

from backend.app.core.errors import LLMTimeoutError
from backend.app.decision_layer.meetings import (
    has_temporal_meeting_reference,
    has_temporal_meeting_reference_sync,
)
from backend.app.decision_layer.models import MeetingReferenceResult


class TestSyncReference:
    """Regex-only detection"""

    def test_regex_hit(self):
        """Temporal language is detected without a network call"""
        assert has_temporal_meeting_reference_sync("Summarize the last meeting") is True

    def test_regex_miss(self):
        """Pronoun questions are not detected by regex"""
        assert has_temporal_meeting_reference_sync("What is their current POS system?") is False


class TestAsyncReference:
    """Regex fast path with LLM fallback"""

    async def test_regex_hit_skips_llm(self, fake_llm):
        """A regex hit never calls the LLM"""
        result = await has_temporal_meeting_reference("What did ACE say in the last call?", fake_llm)
        assert result.has_meeting_ref is True
        assert result.regex_result is True
        assert result.llm_called is False
        assert result.llm_result is None
        fake_llm.generate.assert_not_awaited()

    async def test_llm_yes(self, llm_factory):
        """An LLM YES (any case, padded) is a meeting reference"""
        llm = llm_factory(text="  yes\n")
        result = await has_temporal_meeting_reference("What pricing did they agree to?", llm)
        assert result.has_meeting_ref is True
        assert result.regex_result is False
        assert result.llm_called is True
        assert result.llm_result is True
        assert result.llm_latency_ms is not None
        llm.generate.assert_awaited_once()

    async def test_llm_no(self, fake_llm):
        """An LLM NO is not a meeting reference"""
        result = await has_temporal_meeting_reference("What is their current POS system?", fake_llm)
        assert result.has_meeting_ref is False
        assert result.llm_called is True
        assert result.llm_result is False

    async def test_malformed_answer_is_false(self, llm_factory):
        """Anything other than YES counts as NO"""
        llm = llm_factory(text="Yes, probably")
        result = await has_temporal_meeting_reference("What did they agree to?", llm)
        assert result.llm_result is False

    @pytest.mark.parametrize("error", [LLMTimeoutError(5), RuntimeError("boom")])
    async def test_llm_failure_is_false(self, fake_llm, error):
        """Timeouts and errors resolve to False with latency recorded"""
        fake_llm.generate.side_effect = error
        result = await has_temporal_meeting_reference("What did they agree to?", fake_llm)
        assert result.has_meeting_ref is False
        assert result.llm_called is True
        assert result.llm_result is False
        assert result.llm_latency_ms is not None


class TestImplicitMeetingReference:
    """Meeting references with no temporal wording"""

    QUESTION = "What happened in our face-to-face with Ivy Lane?"

    def test_regex_misses(self):
        """No meeting word or recency word for the regex to catch"""
        assert has_temporal_meeting_reference_sync(self.QUESTION) is False

    async def test_llm_yes(self, llm_factory):
        """The LLM recognizes the meeting reference"""
        llm = llm_factory(text="YES")
        result = await has_temporal_meeting_reference(self.QUESTION, llm)
        assert result.regex_result is False
        assert result.llm_called is True
        assert result.llm_result is True
        assert result.has_meeting_ref is True

    @pytest.mark.parametrize("error", [LLMTimeoutError(5), RuntimeError("connection reset")])
    async def test_llm_failure(self, fake_llm, error):
        """A failed LLM call means no meeting reference"""
        fake_llm.generate.side_effect = error
        result = await has_temporal_meeting_reference(self.QUESTION, fake_llm)
        assert result.regex_result is False
        assert result.llm_called is True
        assert result.llm_result is False
        assert result.has_meeting_ref is False


class TestReferenceResultInvariant:
    """Regex/LLM handshake enforced by the model"""

    def test_regex_hit_with_llm_call_rejected(self):
        """A regex hit that also called the LLM is invalid"""
        with pytest.raises(ValueError):
            MeetingReferenceResult(has_meeting_ref=True, regex_result=True, llm_called=True)

    def test_regex_miss_without_llm_rejected(self):
        """A regex miss must record an LLM attempt"""
        with pytest.raises(ValueError):
            MeetingReferenceResult(has_meeting_ref=False, regex_result=False, llm_called=False)
