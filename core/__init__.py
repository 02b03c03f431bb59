# Config Baskets v1.0.0
"""
Core package for the Config Baskets engine.
Contains the object type table, document canonicalization and error kinds.
"""
from core.exceptions import (
    BasketError,
    NotFoundError,
    ValidationError,
    MalformedDocumentError,
    IneligibleTypeError,
    RefusedEmptyPurgeError
)
from core.object_types import (
    DATAFIELD,
    BASKET,
    OBJECT_TYPES,
    PURGE_ELIGIBLE_TYPES,
    DEFAULT_BASKET_COVERAGE,
    ObjectClass,
    is_known_type,
    resolve_type,
    restore_order,
    assert_valid_coverage_type,
    assert_types_eligible_for_purge
)
from core.document import (
    canonical_json,
    compute_checksum,
    checksum_hex,
    short_checksum,
    parse_document,
    validate_document,
    summarize
)

__all__ = [
    "BasketError",
    "NotFoundError",
    "ValidationError",
    "MalformedDocumentError",
    "IneligibleTypeError",
    "RefusedEmptyPurgeError",
    "DATAFIELD",
    "BASKET",
    "OBJECT_TYPES",
    "PURGE_ELIGIBLE_TYPES",
    "DEFAULT_BASKET_COVERAGE",
    "ObjectClass",
    "is_known_type",
    "resolve_type",
    "restore_order",
    "assert_valid_coverage_type",
    "assert_types_eligible_for_purge",
    "canonical_json",
    "compute_checksum",
    "checksum_hex",
    "short_checksum",
    "parse_document",
    "validate_document",
    "summarize"
]
