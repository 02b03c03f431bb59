"""
Error kinds raised by the basket core.

Callers (CLI, API routes) translate these into messages and status codes.
"""
from typing import Iterable


class BasketError(Exception):
    """Base class for all basket, snapshot, restore and purge errors."""


class NotFoundError(BasketError):
    """A referenced basket, snapshot or object does not exist."""


class ValidationError(BasketError):
    """Unknown object type, invalid coverage or a rejected object payload."""


class MalformedDocumentError(BasketError):
    """Input is not JSON, or not shaped as type -> name -> payload."""


class IneligibleTypeError(BasketError):
    """One or more requested purge types have no purge mapping."""

    def __init__(self, types: Iterable[str]):
        self.types = list(types)
        super().__init__(
            "Object types are not eligible for purge: " + ", ".join(self.types)
        )


class RefusedEmptyPurgeError(BasketError):
    """Purge would wipe every object of a type because nothing is kept."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(
            f"Refusing to purge all {type_name} objects, the provided basket "
            f"has no {type_name} objects (use force to override)"
        )
