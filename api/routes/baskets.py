"""
Basket routes for the Config Baskets API.

Provides listing, dumps, snapshots, restore and upload of baskets.
"""
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from core import (
    BasketError, NotFoundError, ValidationError, MalformedDocumentError,
    IneligibleTypeError, RefusedEmptyPurgeError
)
from database import get_db, BasketSnapshot
from services import operations, baskets, snapshots, SqlObjectRepository
from api.schemas import RestoreRequest, RestoreResponse, SnapshotResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_CODES = {
    NotFoundError: 404,
    ValidationError: 422,
    MalformedDocumentError: 400,
    IneligibleTypeError: 400,
    RefusedEmptyPurgeError: 409,
}


def _http_error(db: Session, error: BasketError) -> HTTPException:
    """Roll back and translate a basket error into an HTTP error."""
    db.rollback()
    status_code = STATUS_CODES.get(type(error), 400)
    logger.warning(f"{type(error).__name__}: {error}")
    return HTTPException(status_code=status_code, detail=str(error))


def _snapshot_response(snapshot: BasketSnapshot) -> SnapshotResponse:
    return SnapshotResponse(
        basket_name=snapshot.basket.basket_name,
        checksum=snapshot.checksum_hex,
        created_at=snapshot.created_at,
        summary=snapshot.content.summary
    )


@router.get("")
async def list_baskets(db: Session = Depends(get_db)):
    """List all basket names."""
    return operations.list_basket_names(db)


@router.get("/{basket_name}/dump")
async def dump_basket(basket_name: str, db: Session = Depends(get_db)):
    """JSON dump of the objects currently covered by a basket."""
    try:
        content = operations.dump(db, basket_name, SqlObjectRepository(db))
    except BasketError as e:
        raise _http_error(db, e)
    return Response(content=content, media_type="application/json")


@router.post("/{basket_name}/snapshots", response_model=SnapshotResponse, status_code=201)
async def take_snapshot(basket_name: str, db: Session = Depends(get_db)):
    """Take a snapshot of a basket."""
    try:
        snapshot = operations.take_snapshot(db, basket_name, SqlObjectRepository(db))
    except BasketError as e:
        raise _http_error(db, e)
    db.commit()
    return _snapshot_response(snapshot)


@router.get("/{basket_name}/snapshots", response_model=list[SnapshotResponse])
async def list_basket_snapshots(basket_name: str, db: Session = Depends(get_db)):
    """Snapshots of a basket, newest first."""
    try:
        basket = baskets.load_basket(db, basket_name)
    except BasketError as e:
        raise _http_error(db, e)
    return [_snapshot_response(s) for s in snapshots.list_snapshots(db, basket)]


@router.get("/{basket_name}/snapshots/{checksum}")
async def download_snapshot(basket_name: str, checksum: str, db: Session = Depends(get_db)):
    """Stored document of a snapshot, by checksum or checksum prefix."""
    try:
        basket = baskets.load_basket(db, basket_name)
        snapshot = snapshots.get_snapshot(db, basket, checksum)
    except BasketError as e:
        raise _http_error(db, e)

    return Response(
        content=snapshots.snapshot_content(snapshot),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{basket_name}-{snapshot.checksum_hex[:7]}.json"'
        }
    )


@router.post("/restore", response_model=RestoreResponse)
async def restore_document(request: RestoreRequest, db: Session = Depends(get_db)):
    """
    Restore the objects of a basket document.

    WARNING: purge_types removes ALL objects of those types that are not
    shipped with the document.
    """
    try:
        outcome = operations.restore(
            db,
            json.dumps(request.document),
            SqlObjectRepository(db),
            purge_types=request.purge_types,
            force=request.force
        )
    except BasketError as e:
        raise _http_error(db, e)
    db.commit()
    return RestoreResponse(restored=outcome.restored, purged=outcome.purged)


@router.post("/{basket_name}/upload", response_model=UploadResponse, status_code=201)
async def upload_snapshot(basket_name: str, request: Request, db: Session = Depends(get_db)):
    """Upload a raw JSON basket dump as a new snapshot."""
    body = await request.body()
    try:
        outcome = operations.upload(db, basket_name, body)
    except BasketError as e:
        raise _http_error(db, e)
    db.commit()
    return UploadResponse(basket_name=basket_name, created=outcome.created, checksum=outcome.checksum)
