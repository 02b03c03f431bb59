"""
Config Baskets Database Models

Baskets, their immutable snapshots and the live configuration objects
the snapshots are taken from.
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Iterable
import json

from sqlalchemy import (
    Column, Integer, BigInteger, String, Text, DateTime, LargeBinary,
    ForeignKey, Enum, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship
from core import ValidationError, assert_valid_coverage_type
from database.connection import Base


class OwnerType(str, PyEnum):
    """Kinds of principals owning a basket."""
    USER = "user"
    USERGROUP = "usergroup"
    ROLE = "role"


# ============================================================
# BASKETS
# ============================================================

class Basket(Base):
    """
    A named selection of configuration objects.

    objects_json holds the coverage: object type -> true (all objects of
    that type) or a sorted list of object names.
    """
    __tablename__ = "baskets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    basket_name = Column(String(64), unique=True, nullable=False, index=True)
    owner_type = Column(Enum(OwnerType), nullable=False, default=OwnerType.USER)
    owner_value = Column(String(255), nullable=False)
    objects_json = Column(Text, nullable=False, default="{}")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    snapshots = relationship(
        "BasketSnapshot",
        back_populates="basket",
        order_by="BasketSnapshot.ts_create"
    )

    @property
    def coverage(self) -> dict:
        """Current coverage mapping (a copy, mutate via set_coverage)."""
        return json.loads(self.objects_json) if self.objects_json else {}

    def set_coverage(self, coverage: dict) -> None:
        """Validate and store a full coverage mapping."""
        if not isinstance(coverage, dict):
            raise ValidationError("Basket objects must be a mapping of object type to names")

        normalized = {}
        for type_name, rule in coverage.items():
            normalized[type_name] = self._normalize_rule(type_name, rule)
        self.objects_json = json.dumps(normalized, sort_keys=True)

    def covers_all(self, type_name: str) -> bool:
        return self.coverage.get(type_name) is True

    def add_object_names(self, type_name: str, names: Iterable[str]) -> None:
        """
        Extend the coverage of a type with explicit object names.

        The result is the union of the existing and the new names. A type
        already covering all of its objects is left untouched.
        """
        assert_valid_coverage_type(type_name)
        coverage = self.coverage
        current = coverage.get(type_name)
        if current is True:
            return

        merged = set(current or [])
        merged.update(str(name) for name in names)
        coverage[type_name] = sorted(merged)
        self.objects_json = json.dumps(coverage, sort_keys=True)

    def export(self) -> dict:
        """Plain representation, as found under the Basket type of a document."""
        return {
            "basket_name": self.basket_name,
            "owner_type": self.owner_type.value if hasattr(self.owner_type, "value") else self.owner_type,
            "owner_value": self.owner_value,
            "objects": self.coverage,
        }

    @staticmethod
    def _normalize_rule(type_name: str, rule):
        assert_valid_coverage_type(type_name)
        if rule is True:
            return True
        if isinstance(rule, (list, tuple)) and all(isinstance(n, str) for n in rule):
            return sorted(set(rule))
        raise ValidationError(
            f"Coverage of {type_name} must be true or a list of object names"
        )


# ============================================================
# SNAPSHOTS (Immutable, content addressed)
# ============================================================

class BasketContent(Base):
    """
    Canonical snapshot content, stored once per checksum.
    Several snapshots may point to the same content.
    """
    __tablename__ = "basket_contents"

    checksum = Column(LargeBinary(20), primary_key=True)  # SHA-1 of content
    summary_json = Column(Text, nullable=False)  # Object count per type
    content = Column(Text, nullable=False)  # Canonical JSON document
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def summary(self) -> dict:
        return json.loads(self.summary_json)


class BasketSnapshot(Base):
    """
    Point-in-time capture of a basket.
    Snapshots are never updated, every store appends a new row.
    """
    __tablename__ = "basket_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    basket_id = Column(Integer, ForeignKey("baskets.id"), nullable=False)
    ts_create = Column(BigInteger, nullable=False)  # Milliseconds since epoch
    content_checksum = Column(
        LargeBinary(20), ForeignKey("basket_contents.checksum"), nullable=False, index=True
    )

    # Relationships
    basket = relationship("Basket", back_populates="snapshots")
    content = relationship("BasketContent")

    __table_args__ = (
        Index("idx_snapshot_basket_time", "basket_id", "ts_create"),
    )

    @property
    def checksum_hex(self) -> str:
        return self.content_checksum.hex()

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.ts_create / 1000, tz=timezone.utc)


# ============================================================
# LIVE CONFIGURATION OBJECTS
# ============================================================

class ConfigObject(Base):
    """
    A live configuration object as seen by the SQL repository adapter.

    Variants sharing one class (templates, objects, apply rules) are told
    apart by object_type. Names are unique per class.
    """
    __tablename__ = "config_objects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    object_class = Column(String(64), nullable=False)  # e.g. command, host, user
    object_name = Column(String(255), nullable=False)
    object_type = Column(String(32), nullable=True)  # object, template, apply, external_object
    properties_json = Column(Text, nullable=False, default="{}")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("object_class", "object_name", name="uq_object_class_name"),
        Index("idx_object_class_type", "object_class", "object_type"),
    )

    @property
    def properties(self) -> dict:
        return json.loads(self.properties_json) if self.properties_json else {}
