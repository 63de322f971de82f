from datetime import timedelta

from firebase_functions import params
from models.constants import DEFAULT_QUIESCENCE_WINDOW

QUIESCENCE_WINDOW_MINUTES = params.IntParam(
    "QUIESCENCE_WINDOW_MINUTES",
    default=int(DEFAULT_QUIESCENCE_WINDOW.total_seconds() // 60),
    description="Timestamp writes closer than this to the stored value are skipped",
)

DELETE_HEADER_ON_SOURCE_DELETE = params.BoolParam(
    "DELETE_HEADER_ON_SOURCE_DELETE",
    default=False,
    description="Delete a resource's header when the resource is deleted",
)


def quiescence_window() -> timedelta:
    """Read at invocation time, params have no value while deploying."""
    return timedelta(minutes=QUIESCENCE_WINDOW_MINUTES.value)


def delete_header_on_source_delete() -> bool:
    return DELETE_HEADER_ON_SOURCE_DELETE.value
