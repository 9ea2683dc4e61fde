"""Intent Router

Strictly sequential classification, cheapest stage first:
1. follow-up detection
2. refusal patterns
3. multi-intent split
4. simple greetings
5. product-knowledge signal
6. entities (situation advice, company / contact)
7. LLM interpretation

Weak deterministic matches are validated by the LLM (fail-open). The whole
call is bounded by CLASSIFICATION_TIMEOUT_SEC.
"""

import asyncio
import uuid
from typing import List, Optional

from backend.app.core.config import settings
from backend.app.core.decorators import trace_log
from backend.app.core.logging import bound_log_context, get_logger
from backend.app.decision_layer.entities import EntityResolver
from backend.app.decision_layer.follow_up import FollowUpRuleConfig, detect_follow_up
from backend.app.decision_layer.llm_manager import LLMClient
from backend.app.decision_layer.models import (
    ClassificationResult,
    DecisionMetadata,
    DetectionMethod,
    EntityMatchType,
    Intent,
    ThreadContext,
)
from backend.app.decision_layer.patterns import (
    detect_multi_intent,
    has_multi_meeting_signal,
    has_product_signal,
    is_situation_advice,
    match_greeting,
    match_refusal,
)

from .interpretation import (
    FALLBACK_CLARIFY_MESSAGE,
    interpret_ambiguous_query,
    validate_low_confidence_intent,
)

logger = get_logger(__name__)

# Methods whose results are trusted without LLM validation
_TRUSTED_METHODS = frozenset({
    DetectionMethod.ENTITY,
    DetectionMethod.PRODUCT_SIGNAL,
    DetectionMethod.SITUATION_ADVICE,
    DetectionMethod.FOLLOW_UP_DETECTION,
})

# Results that already came from an LLM
_LLM_METHODS = frozenset({
    DetectionMethod.LLM_INTERPRETATION,
    DetectionMethod.LLM_VALIDATED,
    DetectionMethod.DEFAULT,
})


def needs_validation(result: ClassificationResult) -> bool:
    """Should a deterministic result be double-checked by the LLM?"""
    if result.detection_method in _LLM_METHODS or result.detection_method in _TRUSTED_METHODS:
        return False
    if result.intent in (Intent.CLARIFY, Intent.REFUSE):
        return False
    if result.detection_method == DetectionMethod.PATTERN and result.confidence >= 0.9:
        return False
    if result.detection_method == DetectionMethod.ENTITY_ACRONYM:
        return True
    return result.confidence < settings.LOW_CONFIDENCE_THRESHOLD


def fallback_result(error: str) -> ClassificationResult:
    """Conservative CLARIFY used when classification itself fails"""
    return ClassificationResult(
        intent=Intent.CLARIFY,
        confidence=0.0,
        detection_method=DetectionMethod.DEFAULT,
        reason=FALLBACK_CLARIFY_MESSAGE,
        clarify_message=FALLBACK_CLARIFY_MESSAGE,
        metadata=DecisionMetadata(classification_error=error),
    )


class IntentRouter:
    """Classifies a message into an Intent"""

    def __init__(
        self,
        entity_resolver: Optional[EntityResolver] = None,
        llm_client: Optional[LLMClient] = None,
        follow_up_rules: Optional[FollowUpRuleConfig] = None,
        timeout_sec: Optional[float] = None,
    ):
        self.entity_resolver = entity_resolver or EntityResolver()
        # None: each stage builds its own client from STAGE_CONFIGS
        self.llm_client = llm_client
        self.follow_up_rules = follow_up_rules
        self.timeout_sec = settings.CLASSIFICATION_TIMEOUT_SEC if timeout_sec is None else timeout_sec

    @trace_log(layer="intent_router", action="classify")
    async def classify(
        self,
        message: str,
        thread_context: Optional[ThreadContext] = None,
    ) -> ClassificationResult:
        """Classify a message

        Args:
            message: current user message
            thread_context: surrounding thread, last message is ``message``

        Returns:
            ClassificationResult (never raises; failures become a CLARIFY fallback)
        """
        with bound_log_context(classification_id=uuid.uuid4().hex[:12]):
            try:
                result = await asyncio.wait_for(
                    self._classify(message, thread_context),
                    timeout=self.timeout_sec,
                )
            except asyncio.TimeoutError:
                logger.warning("Classification deadline exceeded", timeout_sec=self.timeout_sec)
                result = fallback_result(f"Classification timed out after {self.timeout_sec}s")
            except Exception as e:
                logger.error("Classification failed", error=str(e), error_type=type(e).__name__)
                result = fallback_result(f"{type(e).__name__}: {e}")

            logger.info(
                "Intent classified",
                intent=result.intent.value,
                method=result.detection_method.value,
                confidence=result.confidence,
            )
        return result

    async def _classify(
        self,
        message: str,
        thread_context: Optional[ThreadContext],
    ) -> ClassificationResult:
        result = await self._classify_deterministic(message, thread_context)

        if result is None:
            return await self._classify_by_llm(message, thread_context)

        if needs_validation(result):
            return await self._validate(message, result)
        return result

    # ============================================================
    # Deterministic stages
    # ============================================================

    async def _classify_deterministic(
        self,
        message: str,
        thread_context: Optional[ThreadContext],
    ) -> Optional[ClassificationResult]:
        follow_up = detect_follow_up(message, thread_context, self.follow_up_rules)
        if follow_up is not None:
            return ClassificationResult(
                intent=follow_up.inferred_intent_key,
                confidence=follow_up.confidence,
                detection_method=DetectionMethod.FOLLOW_UP_DETECTION,
                reason=follow_up.reason,
                metadata=DecisionMetadata(
                    is_follow_up=True,
                    previous_bot_snippet=follow_up.previous_bot_snippet,
                ),
            )

        if match_refusal(message):
            return ClassificationResult(
                intent=Intent.REFUSE,
                confidence=0.95,
                detection_method=DetectionMethod.PATTERN,
                reason="Question is out of scope for this assistant",
            )

        needs_split, split_options = detect_multi_intent(message)
        if needs_split:
            return ClassificationResult(
                intent=Intent.CLARIFY,
                confidence=0.9,
                detection_method=DetectionMethod.PATTERN,
                needs_split=True,
                split_options=split_options,
                reason="Request requires multiple intents - ask user to split",
            )

        if match_greeting(message):
            return ClassificationResult(
                intent=Intent.GENERAL_HELP,
                confidence=1.0,
                detection_method=DetectionMethod.PATTERN,
                reason="Simple greeting",
            )

        if has_product_signal(message):
            return ClassificationResult(
                intent=Intent.PRODUCT_KNOWLEDGE,
                confidence=0.92,
                detection_method=DetectionMethod.PRODUCT_SIGNAL,
                reason="Strategic advice request detected",
            )

        return await self._classify_by_entity(message)

    async def _classify_by_entity(self, message: str) -> Optional[ClassificationResult]:
        company = await self.entity_resolver.find_company(message)
        contact = self.entity_resolver.find_contact(message)
        if company is None and contact is None:
            return None

        entity_name = company.company_name if company else contact
        signals: List[str] = [f"entity:{entity_name}"]

        if is_situation_advice(message):
            return ClassificationResult(
                intent=Intent.PRODUCT_KNOWLEDGE,
                confidence=0.90,
                detection_method=DetectionMethod.SITUATION_ADVICE,
                reason="Describing customer situation and asking for strategic advice",
                metadata=DecisionMetadata(matched_signals=signals, matched_entity=entity_name),
            )

        partial = company is not None and company.match_type == EntityMatchType.PARTIAL
        method = DetectionMethod.ENTITY_ACRONYM if partial else DetectionMethod.ENTITY
        confidence = 0.70 if partial else 0.85

        if has_multi_meeting_signal(message):
            signals.append("multi_meeting_signal")
            intent = Intent.MULTI_MEETING
            reason = f'Contains known entity "{entity_name}" with multi-meeting signal'
        else:
            intent = Intent.SINGLE_MEETING
            reason = f'Contains known entity "{entity_name}" - likely asking about meeting'

        return ClassificationResult(
            intent=intent,
            confidence=confidence,
            detection_method=method,
            reason=reason,
            metadata=DecisionMetadata(matched_signals=signals, matched_entity=entity_name),
        )

    # ============================================================
    # LLM stages
    # ============================================================

    async def _validate(self, message: str, result: ClassificationResult) -> ClassificationResult:
        validation = await validate_low_confidence_intent(
            message,
            result.intent,
            result.reason or "",
            result.metadata.matched_signals,
            llm_client=self.llm_client,
        )
        details = validation.model_dump(mode="json")

        if validation.confirmed or validation.suggested_intent is None:
            metadata = result.metadata.model_copy(update={"llm_validation": details})
            return result.model_copy(update={"metadata": metadata})

        logger.info(
            "LLM validation overrode deterministic intent",
            original_intent=result.intent.value,
            suggested_intent=validation.suggested_intent.value,
        )
        return ClassificationResult(
            intent=validation.suggested_intent,
            confidence=validation.confidence,
            detection_method=DetectionMethod.LLM_VALIDATED,
            reason=validation.reason,
            metadata=result.metadata.model_copy(update={
                "original_intent": result.intent,
                "original_reason": result.reason,
                "llm_validation": details,
            }),
        )

    async def _classify_by_llm(
        self,
        message: str,
        thread_context: Optional[ThreadContext],
    ) -> ClassificationResult:
        try:
            interpretation = await interpret_ambiguous_query(
                message,
                "no_intent_match",
                thread_context,
                llm_client=self.llm_client,
            )
        except Exception as e:
            logger.warning(
                "LLM interpretation failed, falling back to CLARIFY",
                error=str(e),
                error_type=type(e).__name__,
            )
            return fallback_result(str(e) or type(e).__name__)

        proposed = interpretation.proposed_interpretation
        confidence = interpretation.metadata.confidence
        metadata = DecisionMetadata(llm_interpretation=interpretation.metadata)

        if confidence >= settings.INTERPRETATION_CONFIDENCE_THRESHOLD and proposed.intent != Intent.CLARIFY:
            return ClassificationResult(
                intent=proposed.intent,
                confidence=confidence,
                detection_method=DetectionMethod.LLM_INTERPRETATION,
                reason=proposed.summary,
                proposed_interpretation=proposed,
                alternatives=interpretation.alternatives,
                metadata=metadata,
            )

        return ClassificationResult(
            intent=Intent.CLARIFY,
            confidence=confidence,
            detection_method=DetectionMethod.LLM_INTERPRETATION,
            reason=interpretation.message,
            clarify_message=interpretation.message,
            proposed_interpretation=proposed,
            alternatives=interpretation.alternatives,
            metadata=metadata,
        )


# ============================================================
# Default router
# ============================================================

_default_router: Optional[IntentRouter] = None


def get_intent_router() -> IntentRouter:
    global _default_router
    if _default_router is None:
        _default_router = IntentRouter()
    return _default_router


async def classify_intent(
    message: str,
    thread_context: Optional[ThreadContext] = None,
) -> ClassificationResult:
    """Classify with the process-wide default router"""
    return await get_intent_router().classify(message, thread_context)
