"""
Object repository adapters.

The basket core never touches the configuration store directly. Every read
and write of a concrete configuration object goes through an
ObjectRepository, addressed by object class, object name and an optional
type filter (template, object, apply, ...).

Object state is a plain dict. object_name is always part of it, and
object_type is part of it whenever a type filter applies, so that a state
read with get() can be written back with upsert() unchanged.
"""
import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from core import NotFoundError, ValidationError
from database import ConfigObject

logger = logging.getLogger(__name__)


class ObjectRepository(ABC):
    """Abstract read/write access to typed, named configuration objects."""

    @abstractmethod
    def list_names(
        self,
        object_class: str,
        type_filter: Optional[str] = None,
        names: Optional[Iterable[str]] = None
    ) -> list[str]:
        """Lists the names of live objects of a class, sorted.

        Args:
            object_class: Repository class, e.g. "command".
            type_filter: Restrict to one object_type variant.
            names: Restrict to these names (missing ones are left out).

        Returns:
            Sorted list of object names.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, object_class: str, name: str, type_filter: Optional[str] = None) -> dict:
        """Returns the state of a single object.

        Raises:
            NotFoundError: if there is no such object.
        """
        pass  # pragma: no cover

    @abstractmethod
    def upsert(
        self,
        object_class: str,
        name: str,
        state: dict,
        type_filter: Optional[str] = None
    ) -> None:
        """Creates or replaces an object.

        Raises:
            ValidationError: if the state is rejected.
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, object_class: str, name: str, type_filter: Optional[str] = None) -> None:
        """Deletes an object.

        Raises:
            NotFoundError: if there is no such object.
        """
        pass  # pragma: no cover


def split_state(object_class: str, name: str, state, type_filter: Optional[str]) -> dict:
    """
    Validate an incoming object state and strip the key properties.

    Returns the remaining properties to be stored.
    """
    if not isinstance(state, dict):
        raise ValidationError(f"State of {object_class} '{name}' must be an object")
    if not name:
        raise ValidationError(f"Objects of class {object_class} need a name")

    properties = copy.deepcopy(state)
    object_name = properties.pop("object_name", name)
    if object_name != name:
        raise ValidationError(
            f"{object_class} '{name}' carries a different object_name '{object_name}'"
        )

    if type_filter is not None:
        object_type = properties.pop("object_type", type_filter)
        if object_type != type_filter:
            raise ValidationError(
                f"{object_class} '{name}' has object_type '{object_type}', expected '{type_filter}'"
            )

    return properties


def join_state(name: str, properties: dict, object_type: Optional[str]) -> dict:
    """Inverse of split_state."""
    state = copy.deepcopy(properties)
    state["object_name"] = name
    if object_type is not None:
        state["object_type"] = object_type
    return state


class SqlObjectRepository(ObjectRepository):
    """
    Repository backed by ConfigObject rows.

    Works inside the caller's session and never commits, so a CLI command
    or API request decides whether a whole restore or purge is kept.
    """

    def __init__(self, db: Session):
        self.db = db

    def _query(self, object_class: str, type_filter: Optional[str] = None):
        query = self.db.query(ConfigObject).filter(ConfigObject.object_class == object_class)
        if type_filter is not None:
            query = query.filter(ConfigObject.object_type == type_filter)
        return query

    def _find(self, object_class: str, name: str) -> Optional[ConfigObject]:
        return self.db.query(ConfigObject).filter(
            ConfigObject.object_class == object_class,
            ConfigObject.object_name == name
        ).first()

    def _require(self, object_class: str, name: str, type_filter: Optional[str]) -> ConfigObject:
        row = self._find(object_class, name)
        if row is None or (type_filter is not None and row.object_type != type_filter):
            raise NotFoundError(f"{object_class} '{name}' not found")
        return row

    def list_names(self, object_class, type_filter=None, names=None):
        query = self._query(object_class, type_filter)
        if names is not None:
            names = list(names)
            if not names:
                return []
            query = query.filter(ConfigObject.object_name.in_(names))
        rows = query.with_entities(ConfigObject.object_name).all()
        return sorted(row[0] for row in rows)

    def get(self, object_class, name, type_filter=None):
        row = self._require(object_class, name, type_filter)
        return join_state(row.object_name, row.properties, row.object_type if type_filter else None)

    def upsert(self, object_class, name, state, type_filter=None):
        properties = split_state(object_class, name, state, type_filter)
        row = self._find(object_class, name)

        if row is None:
            row = ConfigObject(
                object_class=object_class,
                object_name=name,
                object_type=type_filter
            )
            self.db.add(row)
            logger.debug(f"Creating {object_class} '{name}'")
        elif type_filter is not None and row.object_type != type_filter:
            raise ValidationError(
                f"{object_class} '{name}' already exists as '{row.object_type}', "
                f"cannot store it as '{type_filter}'"
            )
        else:
            logger.debug(f"Updating {object_class} '{name}'")

        row.properties_json = json.dumps(properties, sort_keys=True)
        self.db.flush()

    def delete(self, object_class, name, type_filter=None):
        row = self._require(object_class, name, type_filter)
        self.db.delete(row)
        self.db.flush()


class InMemoryObjectRepository(ObjectRepository):
    """Dictionary-backed repository for tests and ephemeral use."""

    def __init__(self):
        # (object_class, object_name) -> (object_type, properties)
        self._objects: dict[tuple[str, str], tuple[Optional[str], dict]] = {}

    def _require(self, object_class, name, type_filter):
        entry = self._objects.get((object_class, name))
        if entry is None or (type_filter is not None and entry[0] != type_filter):
            raise NotFoundError(f"{object_class} '{name}' not found")
        return entry

    def list_names(self, object_class, type_filter=None, names=None):
        wanted = set(names) if names is not None else None
        return sorted(
            name for (cls, name), (object_type, _) in self._objects.items()
            if cls == object_class
            and (type_filter is None or object_type == type_filter)
            and (wanted is None or name in wanted)
        )

    def get(self, object_class, name, type_filter=None):
        object_type, properties = self._require(object_class, name, type_filter)
        return join_state(name, properties, object_type if type_filter else None)

    def upsert(self, object_class, name, state, type_filter=None):
        properties = split_state(object_class, name, state, type_filter)
        existing = self._objects.get((object_class, name))
        if existing is not None and type_filter is not None and existing[0] != type_filter:
            raise ValidationError(
                f"{object_class} '{name}' already exists as '{existing[0]}', "
                f"cannot store it as '{type_filter}'"
            )
        self._objects[(object_class, name)] = (type_filter, properties)

    def delete(self, object_class, name, type_filter=None):
        self._require(object_class, name, type_filter)
        del self._objects[(object_class, name)]
