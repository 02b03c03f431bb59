"""
Purge engine for the Config Baskets engine.

Removes live objects of selected types that are not part of a restored
document. A purge with nothing to keep would wipe every object of a type,
which usually means an empty or broken document; it is refused unless
force is passed explicitly.
"""
import logging
from typing import Iterable

from core import (
    NotFoundError, RefusedEmptyPurgeError,
    assert_types_eligible_for_purge, resolve_type
)
from services.repository import ObjectRepository

logger = logging.getLogger(__name__)


def purge(
    repository: ObjectRepository,
    keep_names: Iterable[str],
    type_name: str,
    force: bool = False
) -> list[str]:
    """
    Delete all live objects of a type whose names are not in keep_names.

    Args:
        repository: Object repository
        keep_names: Names to keep, usually the type's entries in a document
        type_name: A purge-eligible object type
        force: Allow purging with an empty keep set

    Returns:
        Names of the deleted objects

    Raises:
        IneligibleTypeError: if the type cannot be purged
        RefusedEmptyPurgeError: if keep_names is empty and force is not set
    """
    assert_types_eligible_for_purge([type_name])
    keep = set(keep_names)
    if not keep and not force:
        raise RefusedEmptyPurgeError(type_name)

    object_class = resolve_type(type_name)
    live_names = repository.list_names(object_class.class_name, object_class.type_filter)
    to_delete = [name for name in live_names if name not in keep]

    deleted = []
    for name in to_delete:
        try:
            repository.delete(object_class.class_name, name, object_class.type_filter)
        except NotFoundError:
            logger.debug(f"{type_name} '{name}' vanished before it could be purged")
            continue
        deleted.append(name)

    if deleted:
        logger.info(f"Purged {len(deleted)} {type_name} object(s): {', '.join(deleted)}")
    return deleted


def purge_object_types(
    repository: ObjectRepository,
    document: dict,
    types: Iterable[str],
    force: bool = False
) -> dict[str, list[str]]:
    """
    Purge several types, keeping what the given document ships.

    All types are validated, and the empty keep set check is applied to
    all of them, before the first object is deleted.

    Returns:
        type -> deleted names
    """
    types = list(types)
    assert_types_eligible_for_purge(types)

    keep_sets = {type_name: set(document.get(type_name) or {}) for type_name in types}
    if not force:
        for type_name in types:
            if not keep_sets[type_name]:
                raise RefusedEmptyPurgeError(type_name)

    return {
        type_name: purge(repository, keep_sets[type_name], type_name, force=force)
        for type_name in types
    }
