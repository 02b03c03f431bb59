"""
Snapshot engine for the Config Baskets engine.

Builds the canonical document for a basket from the live objects it
covers, and stores immutable, checksummed snapshots of such documents.

Document layout (no envelope, no basket identity):

    {
        "<ObjectType>": {
            "<object name>": { ...object state... }
        },
        "Datafield": { ... }   # only when covered objects reference datafields
    }
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from config import settings
from core import (
    BASKET, DATAFIELD, NotFoundError, ValidationError,
    canonical_json, compute_checksum, parse_document, resolve_type, summarize
)
from database import Basket, BasketContent, BasketSnapshot
from services.repository import ObjectRepository

logger = logging.getLogger(__name__)


@dataclass
class SnapshotDraft:
    """A snapshot document for a basket, not yet stored."""
    basket: Basket
    content: dict

    @property
    def json_dump(self) -> str:
        return canonical_json(self.content)

    @property
    def checksum(self) -> bytes:
        return compute_checksum(self.content)

    @property
    def summary(self) -> dict[str, int]:
        return summarize(self.content)


def create_for_basket(db: Session, basket: Basket, repository: ObjectRepository) -> SnapshotDraft:
    """
    Export the live objects covered by a basket.

    Every covered type shows up in the document, an empty mapping when
    nothing matches. Read-only against the repository.
    """
    content = {}
    for type_name, rule in basket.coverage.items():
        if type_name == DATAFIELD:
            continue
        if type_name == BASKET:
            content[type_name] = _export_baskets(db, rule)
        else:
            content[type_name] = _export_objects(repository, type_name, rule)

    datafields = _export_linked_datafields(repository, content)
    if datafields:
        content[DATAFIELD] = datafields

    logger.info(
        f"Exported basket '{basket.basket_name}': "
        + ", ".join(f"{t}={n}" for t, n in summarize(content).items())
    )
    return SnapshotDraft(basket=basket, content=content)


def _export_objects(repository: ObjectRepository, type_name: str, rule) -> dict:
    object_class = resolve_type(type_name)
    wanted = None if rule is True else list(rule)
    names = repository.list_names(object_class.class_name, object_class.type_filter, wanted)

    if wanted is not None:
        missing = sorted(set(wanted) - set(names))
        if missing:
            logger.warning(f"Skipping missing {type_name} objects: {', '.join(missing)}")

    return {
        name: repository.get(object_class.class_name, name, object_class.type_filter)
        for name in names
    }


def _export_baskets(db: Session, rule) -> dict:
    query = db.query(Basket)
    if rule is not True:
        query = query.filter(Basket.basket_name.in_(list(rule)))
    return {b.basket_name: b.export() for b in query.order_by(Basket.basket_name).all()}


def _export_linked_datafields(repository: ObjectRepository, content: dict) -> dict:
    """Datafields referenced by the "fields" of exported objects."""
    datafield = resolve_type(DATAFIELD)
    referenced = set()
    for objects in content.values():
        for state in objects.values():
            fields = state.get("fields")
            if not isinstance(fields, list):
                continue
            for field in fields:
                if isinstance(field, dict) and field.get("datafield_id") is not None:
                    referenced.add(str(field["datafield_id"]))

    result = {}
    for name in sorted(referenced):
        try:
            result[name] = repository.get(datafield.class_name, name, datafield.type_filter)
        except NotFoundError:
            logger.warning(f"Referenced datafield '{name}' does not exist")
    return result


def get_json_dump(draft: SnapshotDraft) -> str:
    """Canonical JSON of a snapshot, as handed out to external consumers."""
    return draft.json_dump


def for_basket_from_json(basket: Basket, json_str) -> SnapshotDraft:
    """
    Build a snapshot for a basket from an uploaded document.

    All object names found in the document are added to the basket's
    coverage first, so the basket keeps describing what its snapshots hold.

    Raises:
        MalformedDocumentError: if the document cannot be parsed
        ValidationError: if it references unknown object types
    """
    document = parse_document(json_str)
    for type_name, objects in document.items():
        if type_name != DATAFIELD:
            basket.add_object_names(type_name, objects.keys())
    return SnapshotDraft(basket=basket, content=document)


def store_snapshot(db: Session, draft: SnapshotDraft) -> BasketSnapshot:
    """
    Persist a new snapshot row for the draft.

    Content is stored once per checksum, but a new snapshot row is appended
    on every call, even when an identical snapshot already exists.
    """
    checksum = draft.checksum
    content = db.query(BasketContent).filter(BasketContent.checksum == checksum).first()
    if content is None:
        content = BasketContent(
            checksum=checksum,
            summary_json=canonical_json(draft.summary),
            content=draft.json_dump
        )
        db.add(content)

    snapshot = BasketSnapshot(
        basket=draft.basket,
        ts_create=int(time.time() * 1000),
        content_checksum=checksum,
        content=content
    )
    db.add(snapshot)
    db.flush()

    logger.info(f"Stored snapshot {checksum.hex()[:7]} for basket '{draft.basket.basket_name}'")
    return snapshot


def list_snapshots(db: Session, basket: Basket, limit: Optional[int] = None) -> list[BasketSnapshot]:
    """Snapshots of a basket, newest first."""
    query = db.query(BasketSnapshot).filter(
        BasketSnapshot.basket_id == basket.id
    ).order_by(BasketSnapshot.ts_create.desc(), BasketSnapshot.id.desc())
    return query.limit(limit or settings.SNAPSHOT_LIST_LIMIT).all()


def get_snapshot(db: Session, basket: Basket, checksum: str) -> BasketSnapshot:
    """
    Find the newest snapshot of a basket by hex checksum or checksum prefix.

    Raises:
        NotFoundError: if no snapshot matches
        ValidationError: if the prefix matches different checksums
    """
    checksum = checksum.lower()
    snapshots = db.query(BasketSnapshot).filter(
        BasketSnapshot.basket_id == basket.id
    ).order_by(BasketSnapshot.ts_create.desc(), BasketSnapshot.id.desc()).all()

    matches = [s for s in snapshots if s.checksum_hex.startswith(checksum)]
    if not checksum or not matches:
        raise NotFoundError(f"Basket '{basket.basket_name}' has no snapshot '{checksum}'")
    if len({s.checksum_hex for s in matches}) > 1:
        raise ValidationError(f"Checksum prefix '{checksum}' is ambiguous")
    return matches[0]


def snapshot_content(snapshot: BasketSnapshot) -> str:
    """The stored canonical document of a snapshot."""
    return snapshot.content.content
