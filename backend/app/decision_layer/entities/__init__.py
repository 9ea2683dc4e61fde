"""Entities - known company / contact detection"""

from .normalization import (
    MIN_TOKEN_LENGTH,
    STOP_WORDS,
    NameVariant,
    build_name_variants,
    contains_variant,
    normalize,
    tokenize,
)

from .resolver import (
    EntityResolver,
    EntityStore,
    StaticEntityStore,
    extract_company_from_message,
    extract_contact_from_message,
)

__all__ = [
    # Normalization
    "MIN_TOKEN_LENGTH",
    "STOP_WORDS",
    "NameVariant",
    "normalize",
    "tokenize",
    "build_name_variants",
    "contains_variant",
    # Resolver
    "EntityStore",
    "StaticEntityStore",
    "EntityResolver",
    "extract_company_from_message",
    "extract_contact_from_message",
]
