from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from utils.logging_utils import get_logger

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Missing:
    """Marker for a field that is absent from a document."""

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


class ChangeKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    NOOP = "noop"


@dataclass(frozen=True)
class Change:
    kind: ChangeKind
    previous: Optional[Dict[str, Any]] = None
    current: Optional[Dict[str, Any]] = None

    @property
    def is_created(self) -> bool:
        return self.kind == ChangeKind.CREATED

    @property
    def is_updated(self) -> bool:
        return self.kind == ChangeKind.UPDATED

    @property
    def is_deleted(self) -> bool:
        return self.kind == ChangeKind.DELETED

    @property
    def latest(self) -> Optional[Dict[str, Any]]:
        """The current document, or the previous one for a deletion."""
        return self.current if self.current is not None else self.previous

    def changed(self, field_name: str) -> bool:
        """
        Whether a field differs between the previous and current document.

        An absent field is its own value: it differs from None, "" and False.
        For creations and deletions every field present on either side counts
        as changed.
        """
        if self.kind == ChangeKind.NOOP:
            return False
        before = (self.previous or {}).get(field_name, MISSING)
        after = (self.current or {}).get(field_name, MISSING)
        if before is MISSING or after is MISSING:
            return before is not after
        return before != after

    def changed_any(self, *field_names: str) -> bool:
        return any(self.changed(field_name) for field_name in field_names)


def classify(
    previous: Optional[Dict[str, Any]], current: Optional[Dict[str, Any]]
) -> Change:
    """
    Classify a before/after pair of document states.

    Args:
        previous: Document data before the write, None if it did not exist
        current: Document data after the write, None if it no longer exists

    Returns:
        Change tagged CREATED, UPDATED, DELETED, or NOOP when neither exists
    """
    if previous is None and current is None:
        return Change(ChangeKind.NOOP)
    if previous is None:
        return Change(ChangeKind.CREATED, current=current)
    if current is None:
        return Change(ChangeKind.DELETED, previous=previous)
    return Change(ChangeKind.UPDATED, previous=previous, current=current)


def snapshot_to_dict(snapshot) -> Optional[Dict[str, Any]]:
    """Turn a platform DocumentSnapshot into its data, None if there is no document."""
    if snapshot is None or not getattr(snapshot, "exists", True):
        return None
    return snapshot.to_dict() or {}


def classify_snapshots(before, after) -> Change:
    return classify(snapshot_to_dict(before), snapshot_to_dict(after))


def parse_document(
    model: Type[ModelT], data: Optional[Dict[str, Any]], path: str = ""
) -> Optional[ModelT]:
    """
    Validate raw document data against its schema.

    A document that fails validation is handled like one with missing fields:
    the caller gets None and skips its recomputation.
    """
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger = get_logger(__name__)
        logger.warning(
            f"Skipping {model.__name__} at {path or 'unknown path'}: "
            f"{e.error_count()} invalid or missing fields"
        )
        return None
