"""Entity Resolver

Finds known companies and contacts inside a message. Known companies come
from an ``EntityStore`` and are cached as an immutable snapshot with a TTL.
A failing store yields zero entities and is never cached.
"""

import asyncio
import time
from functools import lru_cache
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from backend.app.core.config import settings
from backend.app.core.logging import get_logger
from backend.app.decision_layer.models import (
    EntityMatch,
    EntityMatchType,
    EntitySnapshot,
    KnownCompany,
)

from .normalization import NameVariant, build_name_variants, contains_variant, tokenize

logger = get_logger(__name__)


class EntityStore(Protocol):
    """Source of known companies"""

    async def list_known_companies(self) -> Sequence[KnownCompany]:
        ...


# ============================================================
# Matching
# ============================================================

@lru_cache(maxsize=2048)
def _variants_for(name: str, aliases: Tuple[str, ...]) -> Tuple[NameVariant, ...]:
    return tuple(build_name_variants(name, aliases))


def _rank(variant: NameVariant) -> Tuple[int, int, int]:
    # more tokens, then full over partial, then more characters
    return (
        len(variant.tokens),
        1 if variant.match_type == EntityMatchType.FULL else 0,
        len(variant.text),
    )


def extract_company_from_message(
    text: str,
    known_companies: Iterable[KnownCompany],
) -> Optional[EntityMatch]:
    """Find the known company mentioned in a message

    All variants of all companies are scanned and the longest matching
    variant wins, so "Discount Tire" beats a bare "tire" elsewhere.

    Args:
        text: user message
        known_companies: companies to look for

    Returns:
        EntityMatch for the best match, or None
    """
    message_tokens = tokenize(text)
    if not message_tokens:
        return None

    best: Optional[Tuple[Tuple[int, int, int], KnownCompany, NameVariant]] = None

    for company in known_companies:
        for variant in _variants_for(company.name, tuple(company.aliases)):
            if not contains_variant(message_tokens, variant.tokens):
                continue
            rank = _rank(variant)
            if best is None or rank > best[0]:
                best = (rank, company, variant)

    if best is None:
        return None

    _, company, variant = best
    return EntityMatch(
        company_name=company.name,
        matched_variant=variant.text,
        company_id=company.id,
        match_type=variant.match_type,
    )


def extract_contact_from_message(
    text: str,
    contacts: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """Find a known contact name in a message (longest match wins)"""
    message_tokens = tokenize(text)
    if not message_tokens:
        return None

    best: Optional[Tuple[int, str]] = None
    for contact in contacts if contacts is not None else settings.KNOWN_CONTACTS:
        contact_tokens = tokenize(contact)
        if contains_variant(message_tokens, contact_tokens):
            if best is None or len(contact_tokens) > best[0]:
                best = (len(contact_tokens), contact)

    return best[1] if best else None


# ============================================================
# Resolver with snapshot cache
# ============================================================

class EntityResolver:
    """Known-entity lookup backed by a TTL-cached store snapshot"""

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        ttl_sec: Optional[float] = None,
        contacts: Optional[Sequence[str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl_sec = settings.ENTITY_CACHE_TTL_SEC if ttl_sec is None else ttl_sec
        self.contacts: Tuple[str, ...] = tuple(
            settings.KNOWN_CONTACTS if contacts is None else contacts
        )
        self._clock = clock
        self._snapshot: Optional[EntitySnapshot] = None
        self._lock = asyncio.Lock()

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next lookup refetches"""
        self._snapshot = None
        logger.debug("Entity snapshot invalidated")

    def _is_fresh(self, snapshot: Optional[EntitySnapshot]) -> bool:
        return (
            snapshot is not None
            and self._clock() - snapshot.fetched_at < self.ttl_sec
        )

    async def get_snapshot(self) -> EntitySnapshot:
        """Return the cached snapshot, refreshing it when stale"""
        snapshot = self._snapshot
        if self._is_fresh(snapshot):
            return snapshot  # type: ignore[return-value]

        async with self._lock:
            # another task may have refreshed while we waited
            if self._is_fresh(self._snapshot):
                return self._snapshot  # type: ignore[return-value]
            return await self._refresh()

    async def _refresh(self) -> EntitySnapshot:
        if self.store is None:
            return EntitySnapshot(fetched_at=self._clock(), from_store=False)

        try:
            companies = await self.store.list_known_companies()
        except Exception as e:
            logger.warning(
                "Entity store unavailable, continuing with zero entities",
                error=str(e),
                error_type=type(e).__name__,
            )
            return EntitySnapshot(fetched_at=self._clock(), from_store=False)

        snapshot = EntitySnapshot(
            companies=tuple(companies),
            fetched_at=self._clock(),
            from_store=True,
        )
        self._snapshot = snapshot
        logger.info("Loaded known companies", count=len(snapshot.companies))
        return snapshot

    async def known_companies(self) -> Tuple[KnownCompany, ...]:
        return (await self.get_snapshot()).companies

    async def find_company(self, text: str) -> Optional[EntityMatch]:
        return extract_company_from_message(text, await self.known_companies())

    def find_contact(self, text: str) -> Optional[str]:
        return extract_contact_from_message(text, self.contacts)


class StaticEntityStore:
    """EntityStore over a fixed list of companies"""

    def __init__(self, companies: Iterable[KnownCompany] = ()):
        self._companies: List[KnownCompany] = list(companies)

    async def list_known_companies(self) -> Sequence[KnownCompany]:
        return list(self._companies)
