"""Meetings - meeting reference detection and resolution"""

from .dates import format_date, last_month_range, last_week_range, parse_date_reference

from .reference import has_temporal_meeting_reference, has_temporal_meeting_reference_sync

from .resolver import (
    ASK_FOR_COMPANY,
    EXPLICIT_MEETING_ID,
    MeetingStore,
    resolve_meeting,
)

__all__ = [
    # Reference
    "has_temporal_meeting_reference",
    "has_temporal_meeting_reference_sync",
    # Resolution
    "MeetingStore",
    "resolve_meeting",
    "ASK_FOR_COMPANY",
    "EXPLICIT_MEETING_ID",
    # Dates
    "parse_date_reference",
    "last_week_range",
    "last_month_range",
    "format_date",
]
