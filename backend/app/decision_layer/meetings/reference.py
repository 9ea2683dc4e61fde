"""Meeting Reference Resolver

Does a message refer to a specific past meeting instance? Regex first; only
on a miss, one YES/NO LLM call bounded by ``MEETING_REFERENCE_TIMEOUT_SEC``.
Any LLM failure counts as NO.
"""

import time
from typing import Optional

from backend.app.core.errors import DecisionLayerError
from backend.app.core.logging import get_logger
from backend.app.decision_layer.llm_manager import (
    MEETING_REFERENCE,
    LLMClient,
    get_llm_client,
    get_system_prompt,
)
from backend.app.decision_layer.models import MeetingReferenceResult
from backend.app.decision_layer.patterns import has_temporal_reference

logger = get_logger(__name__)


def has_temporal_meeting_reference_sync(text: str) -> bool:
    """Regex-only check, no network"""
    return has_temporal_reference(text)


async def _classify_with_llm(text: str, llm_client: LLMClient) -> bool:
    answer = await llm_client.generate(
        text,
        system_prompt=get_system_prompt(MEETING_REFERENCE),
    )
    return answer.strip().upper() == "YES"


async def has_temporal_meeting_reference(
    text: str,
    llm_client: Optional[LLMClient] = None,
) -> MeetingReferenceResult:
    """Detect a reference to a specific meeting

    Args:
        text: user message
        llm_client: client used for the fallback classifier

    Returns:
        MeetingReferenceResult with the regex/LLM handshake recorded
    """
    if has_temporal_reference(text):
        logger.debug("Meeting reference detected via regex", text=text[:40])
        return MeetingReferenceResult(
            has_meeting_ref=True,
            regex_result=True,
            llm_called=False,
        )

    client = llm_client or get_llm_client(MEETING_REFERENCE)
    start = time.perf_counter()
    try:
        llm_result = await _classify_with_llm(text, client)
    except DecisionLayerError as e:
        logger.warning(
            "Meeting reference classifier failed",
            error_code=e.code.value,
            error=e.message,
        )
        llm_result = False
    except Exception as e:
        logger.warning("Meeting reference classifier error", error=str(e))
        llm_result = False
    latency_ms = round((time.perf_counter() - start) * 1000, 2)

    logger.info(
        "Meeting reference detection",
        regex_result=False,
        llm_result=llm_result,
        llm_latency_ms=latency_ms,
    )

    return MeetingReferenceResult(
        has_meeting_ref=llm_result,
        regex_result=False,
        llm_called=True,
        llm_result=llm_result,
        llm_latency_ms=latency_ms,
    )
