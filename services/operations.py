"""
Basket operations offered to the CLI and the API.

Each function performs one complete operation inside the given session.
Callers commit on success and roll back on any BasketError.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from core import (
    BASKET, DEFAULT_BASKET_COVERAGE, RefusedEmptyPurgeError,
    assert_types_eligible_for_purge, parse_document, restore_order
)
from database import BasketSnapshot
from services import baskets, snapshots
from services.purge import purge_object_types
from services.repository import ObjectRepository
from services.restore import restore_document

logger = logging.getLogger(__name__)


@dataclass
class RestoreOutcome:
    """What a restore changed."""
    restored: dict[str, int] = field(default_factory=dict)
    purged: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class UploadOutcome:
    """Result of an upload: whether the basket was created, and the new snapshot."""
    created: bool
    snapshot: BasketSnapshot

    @property
    def checksum(self) -> str:
        return self.snapshot.checksum_hex


def list_basket_names(db: Session) -> list[str]:
    return baskets.list_basket_names(db)


def dump(db: Session, basket_name: str, repository: ObjectRepository) -> str:
    """JSON document of the objects currently covered by a basket."""
    basket = baskets.load_basket(db, basket_name)
    return snapshots.get_json_dump(snapshots.create_for_basket(db, basket, repository))


def take_snapshot(db: Session, basket_name: str, repository: ObjectRepository) -> BasketSnapshot:
    """Export a basket and store the result as a new snapshot."""
    basket = baskets.load_basket(db, basket_name)
    draft = snapshots.create_for_basket(db, basket, repository)
    return snapshots.store_snapshot(db, draft)


def restore(
    db: Session,
    json_str,
    repository: ObjectRepository,
    purge_types: Optional[Iterable[str]] = None,
    force: bool = False
) -> RestoreOutcome:
    """
    Restore a document and optionally purge objects it does not ship.

    Purge types and the empty keep set check are validated before the
    first object is written.
    """
    purge_types = list(purge_types or [])
    if purge_types:
        assert_types_eligible_for_purge(purge_types)

    document = parse_document(json_str)

    if purge_types and not force:
        for type_name in purge_types:
            if not document.get(type_name):
                raise RefusedEmptyPurgeError(type_name)

    result = restore_document(db, document, repository)
    outcome = RestoreOutcome(restored=result.applied)
    if purge_types:
        outcome.purged = purge_object_types(repository, document, purge_types, force=force)
    return outcome


def upload(db: Session, basket_name: str, json_str) -> UploadOutcome:
    """
    Store an uploaded document as a new snapshot of a basket.

    A missing basket is created first, from its own definition when the
    document carries one under Basket, otherwise covering every type.
    A new snapshot is stored on every upload: the document holds no basket
    identity, so checksums alone cannot tell an existing snapshot apart.
    """
    document = parse_document(json_str)
    restore_order(document.keys())

    definition = (document.get(BASKET) or {}).get(basket_name) or {}
    if definition.get("basket_name"):
        basket, created = baskets.ensure_basket_exists(
            db,
            basket_name,
            definition.get("objects", {}),
            owner_type=definition.get("owner_type"),
            owner_value=definition.get("owner_value")
        )
    else:
        basket, created = baskets.ensure_basket_exists(db, basket_name, DEFAULT_BASKET_COVERAGE)

    if created:
        logger.info(f"Created basket '{basket_name}' for upload")

    draft = snapshots.for_basket_from_json(basket, json_str)
    snapshot = snapshots.store_snapshot(db, draft)
    return UploadOutcome(created=created, snapshot=snapshot)
