"""
Basket registry for the Config Baskets engine.

Baskets are looked up by their unique name. Loading or creating a basket
never touches its snapshots, and this module never deletes a basket.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from config import settings
from core import NotFoundError, ValidationError
from database import Basket, OwnerType

logger = logging.getLogger(__name__)


def load_basket(db: Session, name: str) -> Basket:
    """
    Load a basket by name.

    Raises:
        NotFoundError: if no basket with that name exists
    """
    basket = _find_basket(db, name)
    if basket is None:
        raise NotFoundError(f"Basket '{name}' not found")
    return basket


def _find_basket(db: Session, name: str) -> Optional[Basket]:
    return db.query(Basket).filter(Basket.basket_name == name).first()


def _owner_type(value) -> OwnerType:
    try:
        return OwnerType(value)
    except ValueError:
        raise ValidationError(f"Unknown basket owner type: {value}") from None


def create_basket(
    db: Session,
    name: str,
    owner_type,
    owner_value: str,
    coverage: dict
) -> Basket:
    """
    Create a new basket.

    Args:
        db: Database session
        name: Unique basket name
        owner_type: An OwnerType or its value ("user", ...)
        owner_value: Owning principal
        coverage: object type -> True or list of object names

    Raises:
        ValidationError: if the name is taken or the coverage is invalid
    """
    if not name or not isinstance(name, str):
        raise ValidationError("A basket needs a name")
    if _find_basket(db, name) is not None:
        raise ValidationError(f"Basket '{name}' already exists")

    basket = Basket(
        basket_name=name,
        owner_type=_owner_type(owner_type),
        owner_value=owner_value
    )
    basket.set_coverage(coverage)
    db.add(basket)
    db.flush()

    logger.info(f"Created basket '{name}' covering {', '.join(sorted(basket.coverage)) or 'nothing'}")
    return basket


def list_basket_names(db: Session) -> list[str]:
    """All basket names, sorted."""
    rows = db.query(Basket.basket_name).order_by(Basket.basket_name).all()
    return [row[0] for row in rows]


def ensure_basket_exists(
    db: Session,
    name: str,
    fallback_coverage: dict,
    owner_type=None,
    owner_value: Optional[str] = None
) -> Tuple[Basket, bool]:
    """
    Load a basket, creating it from the fallback coverage when missing.
    New baskets are owned by the configured default owner unless given.

    Returns:
        (basket, created)
    """
    basket = _find_basket(db, name)
    if basket is not None:
        return basket, False

    basket = create_basket(
        db,
        name,
        owner_type or settings.DEFAULT_OWNER_TYPE,
        owner_value or settings.DEFAULT_OWNER_VALUE,
        fallback_coverage
    )
    return basket, True


def restore_basket(db: Session, name: str, payload: dict) -> Basket:
    """
    Create or update a basket from its entry under the Basket type of a
    document, e.g. {"basket_name": ..., "owner_type": ..., "owner_value": ...,
    "objects": {...}}.
    """
    payload_name = payload.get("basket_name", name)
    if payload_name != name:
        raise ValidationError(f"Basket '{name}' carries a different basket_name '{payload_name}'")

    coverage = payload.get("objects", {})
    owner_type = payload.get("owner_type", settings.DEFAULT_OWNER_TYPE)
    owner_value = payload.get("owner_value", settings.DEFAULT_OWNER_VALUE)

    basket = _find_basket(db, name)
    if basket is None:
        return create_basket(db, name, owner_type, owner_value, coverage)

    basket.owner_type = _owner_type(owner_type)
    basket.owner_value = owner_value
    basket.set_coverage(coverage)
    db.flush()
    logger.info(f"Updated basket '{name}'")
    return basket
