from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from firebase_admin import firestore
from models.constants import DEFAULT_QUIESCENCE_WINDOW

Timestamp = Union[datetime, int, float]


def to_datetime(value: Optional[Timestamp]) -> Optional[datetime]:
    """
    Normalise a stored timestamp.

    Firestore returns DatetimeWithNanoseconds (a datetime subclass); numbers
    are epoch milliseconds. Naive datetimes are taken to be UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return None


def within_quiescence_window(
    previous: Optional[Timestamp],
    proposed: Timestamp,
    window: timedelta = DEFAULT_QUIESCENCE_WINDOW,
) -> bool:
    """
    Whether a timestamp write should be skipped.

    Args:
        previous: The value currently stored, None if absent
        proposed: The value the recomputation wants to write
        window: Writes closer than this to the stored value are suppressed

    Returns:
        True when |proposed - previous| < window
    """
    previous_dt = to_datetime(previous)
    proposed_dt = to_datetime(proposed)
    if previous_dt is None or proposed_dt is None:
        return False
    return abs(proposed_dt - previous_dt) < window


def exclude_path(snapshots: Iterable[Any], path: str) -> List[Any]:
    """Drop the document at path from query results before fanning a write out."""
    return [snapshot for snapshot in snapshots if snapshot.reference.path != path]


def fields_to_write(
    current: Optional[Dict[str, Any]], proposed: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Keep only the proposed fields whose value differs from the stored one.

    An empty result means the write would not change the document and must be
    skipped, which stops a trigger from re-firing on its own output.
    """
    current = current or {}
    writes = {}
    for field_name, value in proposed.items():
        if value is firestore.DELETE_FIELD:
            if field_name in current:
                writes[field_name] = value
        elif field_name not in current or current[field_name] != value:
            writes[field_name] = value
    return writes
