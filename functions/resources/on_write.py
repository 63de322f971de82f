from typing import Dict, List

from consistency.change_classifier import Change, ChangeKind
from firebase_admin import firestore
from headers.mirror_header import mirror_header
from models.constants import PathParams, ResourceFields
from models.data_models import PendingWrite
from resources.cascade_delete import cascade_resource_delete
from resources.featured_lesson import enforce_single_featured, promote_successor
from resources.lesson_count import recompute_lesson_counts
from resources.review_flag import recompute_review_flag
from resources.status_transition import apply_status_transition
from utils.logging_utils import get_logger

# Fields that decide whether a resource counts as a featured/published lesson
LESSON_MEMBERSHIP_FIELDS = (
    ResourceFields.RESOURCE_TYPE,
    ResourceFields.STATUS,
    ResourceFields.IS_FEATURED,
    ResourceFields.SUBTOPIC,
)


def on_resource_written(
    db: firestore.Client,
    change: Change,
    params: Dict[str, str],
    delete_header_on_source_delete: bool = False,
) -> List[PendingWrite]:
    """
    Recompute everything derived from a resource document.

    Writes that only touch derived fields (counts, the review flag) change
    none of the interesting fields, so they never start another round of
    recomputation.

    Args:
        db: Firestore client
        change: The classified write to resources/{resourceId}
        params: Path parameters, must contain resourceId
        delete_header_on_source_delete: Remove the mirrored header when the
            resource is deleted instead of keeping it

    Returns:
        Every pending write, cascade deletions first
    """
    logger = get_logger(__name__)

    if change.kind == ChangeKind.NOOP:
        return []

    resource_id = params[PathParams.RESOURCE_ID]
    logger.info(f"Processing {change.kind} of resource {resource_id}")

    writes = []
    writes.extend(cascade_resource_delete(db, change, params))

    if change.kind != ChangeKind.UPDATED or change.changed_any(
        *LESSON_MEMBERSHIP_FIELDS
    ):
        writes.extend(enforce_single_featured(db, change, params))
        writes.extend(promote_successor(db, change, params))
        writes.extend(recompute_lesson_counts(db, change, params))

    if change.changed(ResourceFields.STATUS):
        writes.extend(recompute_review_flag(db, change, params))
        writes.extend(apply_status_transition(db, change, params))

    writes.extend(
        mirror_header(
            db,
            change,
            params,
            delete_on_source_delete=delete_header_on_source_delete,
        )
    )
    return writes
