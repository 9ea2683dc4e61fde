"""Meeting Models

MeetingReferenceResult records the regex/LLM handshake; the resolution
models describe which concrete meeting (if any) a message points at.
"""

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class MeetingReferenceResult(BaseModel):
    """Whether a message refers to a specific past meeting"""
    has_meeting_ref: bool
    regex_result: bool
    llm_called: bool
    llm_result: Optional[bool] = None
    llm_latency_ms: Optional[float] = None

    @model_validator(mode="after")
    def check_handshake(self) -> "MeetingReferenceResult":
        # regex hit short-circuits the LLM; regex miss always attempts it
        if self.regex_result and (self.llm_called or self.llm_result is not None):
            raise ValueError("regex match must not call the LLM")
        if not self.regex_result and not self.llm_called:
            raise ValueError("regex miss must record an LLM attempt")
        return self


class MeetingRecord(BaseModel):
    """A meeting (transcript) as returned by the meeting store"""
    id: str
    company_id: str
    meeting_date: datetime
    name: Optional[str] = None


class CompanyContext(BaseModel):
    company_id: str
    company_name: str


class MeetingOption(BaseModel):
    meeting_id: str
    date: datetime
    company_name: str


class ResolvedMeeting(BaseModel):
    status: Literal["resolved"] = "resolved"
    meeting_id: str
    company_id: str
    company_name: str
    meeting_date: Optional[datetime] = None
    was_auto_selected: bool = False


class MeetingClarification(BaseModel):
    status: Literal["needs_clarification"] = "needs_clarification"
    message: str
    options: List[MeetingOption] = Field(default_factory=list)


class UnresolvedMeeting(BaseModel):
    status: Literal["unresolved"] = "unresolved"
    reason: str


MeetingResolution = Union[ResolvedMeeting, MeetingClarification, UnresolvedMeeting]
