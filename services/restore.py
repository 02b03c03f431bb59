"""
Restore engine for the Config Baskets engine.

Applies a basket document to the live configuration store. Types are
processed in object type table order (datafields first), objects within a
type in document order. The first rejected object aborts the restore; the
caller is expected to roll back its session in that case.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from core import BASKET, parse_document, resolve_type, restore_order
from services.baskets import restore_basket
from services.repository import ObjectRepository

logger = logging.getLogger(__name__)


@dataclass
class RestoreResult:
    """Objects applied per type."""
    document: dict
    applied: dict[str, int] = field(default_factory=dict)

    @property
    def object_count(self) -> int:
        return sum(self.applied.values())


def restore_json(db: Session, json_str, repository: ObjectRepository) -> RestoreResult:
    """
    Create or update every object described by a basket document.

    Raises:
        MalformedDocumentError: if the document is not type -> name -> payload
        ValidationError: on unknown types or a rejected object
    """
    document = parse_document(json_str)
    return restore_document(db, document, repository)


def restore_document(db: Session, document: dict, repository: ObjectRepository) -> RestoreResult:
    """Same as restore_json, for an already parsed and validated document."""
    # Unknown types fail here, before anything is written
    ordered_types = restore_order(document.keys())
    result = RestoreResult(document=document)

    for type_name in ordered_types:
        objects = document[type_name]
        if type_name == BASKET:
            for name, payload in objects.items():
                restore_basket(db, name, payload)
        else:
            object_class = resolve_type(type_name)
            for name, payload in objects.items():
                repository.upsert(object_class.class_name, name, payload, object_class.type_filter)

        result.applied[type_name] = len(objects)
        logger.info(f"Restored {len(objects)} {type_name} object(s)")

    return result
