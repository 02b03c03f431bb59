"""
Object type resolution table.

Maps every type name that may appear in a basket document to the repository
object class backing it, plus an optional type filter for classes whose
table holds several variants (templates, objects, apply rules).

The table order is the restore order: datafields first, so that objects
referencing them find them, and basket definitions last.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from core.exceptions import IneligibleTypeError, ValidationError


DATAFIELD = "Datafield"
BASKET = "Basket"


@dataclass(frozen=True)
class ObjectClass:
    """Repository class plus optional object_type filter."""
    class_name: str
    type_filter: Optional[str] = None


OBJECT_TYPES: dict[str, ObjectClass] = {
    DATAFIELD: ObjectClass("datafield"),
    "TimePeriod": ObjectClass("timeperiod"),
    "CommandTemplate": ObjectClass("command", "template"),
    "ExternalCommand": ObjectClass("command", "external_object"),
    "Command": ObjectClass("command", "object"),
    "HostGroup": ObjectClass("hostgroup"),
    "IcingaTemplateChoiceHost": ObjectClass("template_choice_host"),
    "HostTemplate": ObjectClass("host", "template"),
    "ServiceGroup": ObjectClass("servicegroup"),
    "IcingaTemplateChoiceService": ObjectClass("template_choice_service"),
    "ServiceTemplate": ObjectClass("service", "template"),
    "ServiceSet": ObjectClass("service_set"),
    "UserGroup": ObjectClass("usergroup"),
    "UserTemplate": ObjectClass("user", "template"),
    "User": ObjectClass("user", "object"),
    "NotificationTemplate": ObjectClass("notification", "template"),
    "Notification": ObjectClass("notification", "apply"),
    "Dependency": ObjectClass("dependency", "apply"),
    "DependencyTemplate": ObjectClass("dependency", "template"),
    "DataList": ObjectClass("datalist"),
    "ImportSource": ObjectClass("import_source"),
    "SyncRule": ObjectClass("sync_rule"),
    "DirectorJob": ObjectClass("job"),
    BASKET: ObjectClass("basket"),
}

_TYPE_POSITIONS = {name: i for i, name in enumerate(OBJECT_TYPES)}

# Datafields are auxiliary and baskets are never deleted by this core
PURGE_ELIGIBLE_TYPES: tuple[str, ...] = tuple(
    name for name in OBJECT_TYPES if name not in (DATAFIELD, BASKET)
)

# Coverage of a basket bootstrapped by an upload to an unknown name
DEFAULT_BASKET_COVERAGE: dict[str, bool] = {
    "Command": True,
    "ExternalCommand": True,
    "CommandTemplate": True,
    "HostGroup": True,
    "IcingaTemplateChoiceHost": True,
    "HostTemplate": True,
    "ServiceGroup": True,
    "IcingaTemplateChoiceService": True,
    "ServiceTemplate": True,
    "ServiceSet": True,
    "UserGroup": True,
    "UserTemplate": True,
    "User": True,
    "NotificationTemplate": True,
    "Notification": True,
    "TimePeriod": True,
    "Dependency": True,
    "DataList": True,
    "ImportSource": True,
    "SyncRule": True,
    "DirectorJob": True,
    "Basket": True,
}


def is_known_type(type_name: str) -> bool:
    return type_name in OBJECT_TYPES


def resolve_type(type_name: str) -> ObjectClass:
    """Return the repository class for a type, or raise ValidationError."""
    try:
        return OBJECT_TYPES[type_name]
    except KeyError:
        raise ValidationError(f"Unknown object type: {type_name}") from None


def assert_valid_coverage_type(type_name: str) -> None:
    """Coverage keys must be known types other than the Datafield pseudo-type."""
    if type_name == DATAFIELD:
        raise ValidationError(f"{DATAFIELD} cannot be part of a basket's coverage")
    resolve_type(type_name)


def restore_order(type_names: Iterable[str]) -> list[str]:
    """Sort type names into table order. Unknown names raise ValidationError."""
    names = list(type_names)
    for name in names:
        resolve_type(name)
    return sorted(names, key=_TYPE_POSITIONS.__getitem__)


def assert_types_eligible_for_purge(types: Iterable[str]) -> None:
    """
    Validate every requested purge type before anything is deleted.

    Raises a single IneligibleTypeError naming all offending types.
    """
    invalid = [t for t in types if t not in PURGE_ELIGIBLE_TYPES]
    if invalid:
        raise IneligibleTypeError(invalid)
