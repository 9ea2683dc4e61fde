"""Test configuration and shared fixtures"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from unittest.mock import AsyncMock

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from backend.app.decision_layer.entities import EntityResolver, StaticEntityStore  # noqa: E402
from backend.app.decision_layer.follow_up import reset_to_defaults  # noqa: E402
from backend.app.decision_layer.models import (  # noqa: E402
    KnownCompany,
    MeetingRecord,
    ThreadContext,
    ThreadMessage,
)


# ============================================================
# Fakes
# ============================================================

class FakeLLMClient:
    """LLMClient stand-in; responses and failures are set per test"""

    def __init__(self, text: str = "NO", json_response: Optional[Dict[str, Any]] = None):
        self.generate = AsyncMock(return_value=text)
        self.generate_json = AsyncMock(return_value=json_response or {})


class FailingEntityStore:
    async def list_known_companies(self) -> Sequence[KnownCompany]:
        raise ConnectionError("entity store down")


class InMemoryMeetingStore:
    """MeetingStore over plain lists"""

    def __init__(self, companies: Sequence[KnownCompany], meetings: Sequence[MeetingRecord] = ()):
        self.companies = {c.id: c for c in companies}
        self.meetings: List[MeetingRecord] = list(meetings)
        self.extra_meeting_count = 0

    async def get_company(self, company_id: str) -> Optional[KnownCompany]:
        return self.companies.get(company_id)

    async def get_meeting(self, meeting_id: str) -> Optional[MeetingRecord]:
        return next((m for m in self.meetings if m.id == meeting_id), None)

    async def get_meetings_in_range(
        self, company_id: str, start: datetime, end: datetime
    ) -> Sequence[MeetingRecord]:
        found = [
            m for m in self.meetings
            if m.company_id == company_id and start <= m.meeting_date <= end
        ]
        return sorted(found, key=lambda m: m.meeting_date, reverse=True)

    async def get_most_recent_meeting(self, company_id: str) -> Optional[MeetingRecord]:
        found = [m for m in self.meetings if m.company_id == company_id]
        return max(found, key=lambda m: m.meeting_date) if found else None

    async def count_meetings(self) -> int:
        return len(self.meetings) + self.extra_meeting_count


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture(autouse=True)
def reset_follow_up_rules():
    """Every test starts from the default follow-up rules"""
    reset_to_defaults()
    yield
    reset_to_defaults()


@pytest.fixture
def known_companies():
    return [
        KnownCompany(id="c-ace", name="ACE Hardware"),
        KnownCompany(id="c-schwab", name="Les Schwab"),
        KnownCompany(id="c-discount", name="Discount Tire"),
        KnownCompany(id="c-ivy", name="Ivy Lane (Valvoline)"),
    ]


@pytest.fixture
def entity_store(known_companies):
    return StaticEntityStore(known_companies)


@pytest.fixture
def entity_resolver(entity_store):
    return EntityResolver(store=entity_store, contacts=["randy hentschke", "randy"])


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def llm_factory():
    return FakeLLMClient


@pytest.fixture
def failing_entity_store():
    return FailingEntityStore()


@pytest.fixture
def now():
    return datetime(2025, 8, 20, 12, 0)


@pytest.fixture
def meetings():
    return [
        MeetingRecord(id="m-ace-1", company_id="c-ace", meeting_date=datetime(2025, 8, 7, 10), name="Pilot kickoff"),
        MeetingRecord(id="m-ace-2", company_id="c-ace", meeting_date=datetime(2025, 8, 7, 15), name="Pricing review"),
        MeetingRecord(id="m-ace-0", company_id="c-ace", meeting_date=datetime(2025, 7, 1, 9)),
        MeetingRecord(id="m-schwab-1", company_id="c-schwab", meeting_date=datetime(2025, 8, 15, 11), name="Weekly sync"),
        MeetingRecord(id="m-schwab-0", company_id="c-schwab", meeting_date=datetime(2025, 6, 2, 11)),
    ]


@pytest.fixture
def meeting_store(known_companies, meetings):
    return InMemoryMeetingStore(known_companies, meetings)


def make_thread(*messages, meeting_id=None, company_id=None) -> ThreadContext:
    """Build a ThreadContext from (text, is_bot) tuples"""
    return ThreadContext(
        messages=tuple(ThreadMessage(text=text, is_bot=is_bot) for text, is_bot in messages),
        meeting_id=meeting_id,
        company_id=company_id,
    )


@pytest.fixture
def thread_factory():
    return make_thread
