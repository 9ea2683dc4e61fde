"""Entity Models"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .enums import EntityMatchType


class KnownCompany(BaseModel):
    """A company from the entity store"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    aliases: List[str] = Field(default_factory=list)


class EntityMatch(BaseModel):
    """A known company found inside a message"""
    company_name: str
    matched_variant: str
    company_id: Optional[str] = None
    match_type: EntityMatchType = EntityMatchType.FULL


class EntitySnapshot(BaseModel):
    """Read-only set of known entities fetched for classification"""
    model_config = ConfigDict(frozen=True)

    companies: Tuple[KnownCompany, ...] = ()
    fetched_at: float = 0.0
    from_store: bool = True
