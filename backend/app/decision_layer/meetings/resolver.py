"""Meeting Resolution

Resolves which concrete meeting a SINGLE_MEETING question is about.

Resolution order:
1. Thread context (always wins)
2. Explicit meeting id ("meeting: <uuid>")
3. Company context (given, or extracted from the message)
4. "Last meeting" language
5. "Meeting on <date>"
6. "Meeting last week" / "meeting last month"
7. LLM-detected meeting reference -> most recent meeting
8. Company only -> most recent meeting, auto-selected
"""

import re
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence

from backend.app.core.decorators import trace_log
from backend.app.core.logging import get_logger
from backend.app.decision_layer.entities import extract_company_from_message
from backend.app.decision_layer.models import (
    CompanyContext,
    KnownCompany,
    MeetingClarification,
    MeetingOption,
    MeetingRecord,
    MeetingResolution,
    ResolvedMeeting,
    ThreadContext,
    UnresolvedMeeting,
)
from backend.app.decision_layer.patterns import (
    DATE_REFERENCE,
    LAST_MEETING_PATTERNS,
    LAST_MONTH,
    LAST_WEEK,
    has_temporal_reference,
)

from .dates import (
    day_bounds,
    format_date,
    last_month_range,
    last_week_range,
    parse_date_reference,
)

logger = get_logger(__name__)

EXPLICIT_MEETING_ID = re.compile(r"\bmeeting[:\s]+([a-f0-9-]{36})\b", re.IGNORECASE)

UNKNOWN_COMPANY = "Unknown Company"
ASK_FOR_COMPANY = (
    "Which company are you asking about? "
    "Please mention the company name so I can find the right meeting."
)


class MeetingStore(Protocol):
    """Read access to companies and meeting transcripts"""

    async def get_company(self, company_id: str) -> Optional[KnownCompany]:
        ...

    async def get_meeting(self, meeting_id: str) -> Optional[MeetingRecord]:
        ...

    async def get_meetings_in_range(
        self, company_id: str, start: datetime, end: datetime
    ) -> Sequence[MeetingRecord]:
        """Meetings of a company within [start, end], newest first"""
        ...

    async def get_most_recent_meeting(self, company_id: str) -> Optional[MeetingRecord]:
        ...

    async def count_meetings(self) -> int:
        ...


# ============================================================
# Helpers
# ============================================================

def _options(meetings: Sequence[MeetingRecord], company_name: str) -> List[MeetingOption]:
    return [
        MeetingOption(meeting_id=m.id, date=m.meeting_date, company_name=company_name)
        for m in meetings
    ]


def _resolved(
    meeting: MeetingRecord,
    company: CompanyContext,
    was_auto_selected: bool = False,
) -> ResolvedMeeting:
    return ResolvedMeeting(
        meeting_id=meeting.id,
        company_id=company.company_id,
        company_name=company.company_name,
        meeting_date=meeting.meeting_date,
        was_auto_selected=was_auto_selected,
    )


def _same_day_clarification(
    meetings: Sequence[MeetingRecord],
    company_name: str,
    day: datetime,
) -> MeetingClarification:
    lines = "\n".join(
        f"• {m.name or f'Meeting {i + 1}'}" for i, m in enumerate(meetings)
    )
    return MeetingClarification(
        message=(
            f"I see multiple {company_name} meetings on {format_date(day)}:\n"
            f"{lines}\nWhich one should I use?"
        ),
        options=_options(meetings, company_name),
    )


def _range_clarification(
    meetings: Sequence[MeetingRecord],
    company_name: str,
    period: str,
) -> MeetingClarification:
    lines = "\n".join(
        f"• {format_date(m.meeting_date)}{f' - {m.name}' if m.name else ''}"
        for m in meetings
    )
    return MeetingClarification(
        message=(
            f"I see {len(meetings)} {company_name} meetings from {period}:\n"
            f"{lines}\nWhich one should I use?"
        ),
        options=_options(meetings, company_name),
    )


async def _meetings_on_most_recent_date(
    store: MeetingStore, company_id: str
) -> List[MeetingRecord]:
    most_recent = await store.get_most_recent_meeting(company_id)
    if most_recent is None:
        return []
    start, end = day_bounds(most_recent.meeting_date)
    return list(await store.get_meetings_in_range(company_id, start, end))


async def _resolve_most_recent(
    store: MeetingStore,
    company: CompanyContext,
    was_auto_selected: bool = False,
) -> MeetingResolution:
    meetings = await _meetings_on_most_recent_date(store, company.company_id)
    if not meetings:
        return MeetingClarification(
            message=f"I don't see any meetings with {company.company_name} on record."
        )
    if len(meetings) == 1:
        return _resolved(meetings[0], company, was_auto_selected)
    return _same_day_clarification(meetings, company.company_name, meetings[0].meeting_date)


async def _company_name(store: MeetingStore, company_id: str) -> str:
    company = await store.get_company(company_id)
    return company.name if company else UNKNOWN_COMPANY


def _company_from_message(
    message: str, known_companies: Iterable[KnownCompany]
) -> Optional[CompanyContext]:
    match = extract_company_from_message(message, known_companies)
    if match is None or match.company_id is None:
        return None
    return CompanyContext(company_id=match.company_id, company_name=match.company_name)


# ============================================================
# Resolution
# ============================================================

@trace_log(layer="meetings", action="resolve_meeting")
async def resolve_meeting(
    message: str,
    store: MeetingStore,
    thread_context: Optional[ThreadContext] = None,
    known_companies: Iterable[KnownCompany] = (),
    company_context: Optional[CompanyContext] = None,
    llm_meeting_ref_detected: bool = False,
    now: Optional[datetime] = None,
) -> MeetingResolution:
    """Resolve the meeting a message refers to

    Args:
        message: user message
        store: meeting store
        thread_context: thread already anchored to a meeting, if any
        known_companies: companies used to extract a company from the message
        company_context: company extracted upstream (takes precedence)
        llm_meeting_ref_detected: the LLM classifier said this is a meeting reference
        now: reference time for relative dates

    Returns:
        ResolvedMeeting, MeetingClarification or UnresolvedMeeting
    """
    # 1. Thread context
    if thread_context and thread_context.meeting_id and thread_context.company_id:
        meeting = await store.get_meeting(thread_context.meeting_id)
        return ResolvedMeeting(
            meeting_id=thread_context.meeting_id,
            company_id=thread_context.company_id,
            company_name=await _company_name(store, thread_context.company_id),
            meeting_date=meeting.meeting_date if meeting else None,
        )

    # 2. Explicit meeting id
    id_match = EXPLICIT_MEETING_ID.search(message)
    if id_match:
        meeting = await store.get_meeting(id_match.group(1))
        if meeting and meeting.company_id:
            return ResolvedMeeting(
                meeting_id=meeting.id,
                company_id=meeting.company_id,
                company_name=await _company_name(store, meeting.company_id),
                meeting_date=meeting.meeting_date,
            )

    # 3. Company context
    company = company_context or _company_from_message(message, known_companies)
    if company is None:
        if has_temporal_reference(message):
            return MeetingClarification(message=ASK_FOR_COMPANY)
        return UnresolvedMeeting(reason="no_meeting_context")

    name = company.company_name

    # 4. Last meeting
    if LAST_MEETING_PATTERNS.matches(message):
        logger.debug("Last meeting pattern", company=name)
        return await _resolve_most_recent(store, company)

    # 5. Specific date
    date_match = DATE_REFERENCE.pattern.search(message)
    if date_match:
        date_text = date_match.group(2)
        target = parse_date_reference(date_text, now)
        if target is None:
            return MeetingClarification(
                message=(
                    f'I couldn\'t parse the date "{date_text}". Could you rephrase it? '
                    '(e.g., "meeting on Aug 7" or "meeting on 8/7")'
                )
            )
        start, end = day_bounds(target)
        meetings = list(await store.get_meetings_in_range(company.company_id, start, end))
        if not meetings:
            return MeetingClarification(
                message=f"I don't see any {name} meetings on {format_date(target)}."
            )
        if len(meetings) == 1:
            return _resolved(meetings[0], company)
        return _same_day_clarification(meetings, name, target)

    # 6. Relative ranges
    for rule, date_range, empty_period, many_period in (
        (LAST_WEEK, last_week_range, "last week", "last week"),
        (LAST_MONTH, last_month_range, "last month", "the last month"),
    ):
        if not rule.matches(message):
            continue
        start, end = date_range(now)
        meetings = list(await store.get_meetings_in_range(company.company_id, start, end))
        if not meetings:
            return MeetingClarification(
                message=f"I don't see any {name} meetings from {empty_period}."
            )
        if len(meetings) == 1:
            return _resolved(meetings[0], company)
        return _range_clarification(meetings, name, many_period)

    # 7. LLM said "meeting reference" without temporal words
    if llm_meeting_ref_detected:
        logger.debug("LLM meeting reference, using most recent meeting", company=name)
        return await _resolve_most_recent(store, company)

    # 8. Company only
    logger.debug("Auto-selecting most recent meeting", company=name)
    return await _resolve_most_recent(store, company, was_auto_selected=True)
