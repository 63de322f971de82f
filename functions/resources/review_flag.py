from typing import Dict, List

from consistency.change_classifier import Change, parse_document
from consistency.self_write_guard import fields_to_write
from firebase_admin import firestore
from models.constants import REVIEW_STATUSES, PathParams, ResourceFields
from models.data_models import PendingWrite, UpdateDocument
from models.pydantic_models import ResourceDocument
from utils.path_utils import resource_path


def is_awaiting_review_or_has_changes_requested(status: str) -> bool:
    return status in REVIEW_STATUSES


def recompute_review_flag(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Persist isAwaitingReviewOrHasChangesRequested for the written resource.

    Firestore queries cannot OR two equality filters on status, so clients
    filter on this single boolean instead.
    """
    path = resource_path(params[PathParams.RESOURCE_ID])

    resource = parse_document(ResourceDocument, change.current, path)
    if resource is None:
        return []

    flag = is_awaiting_review_or_has_changes_requested(resource.status)
    fields = fields_to_write(
        change.current,
        {ResourceFields.IS_AWAITING_REVIEW_OR_HAS_CHANGES_REQUESTED: flag},
    )
    if not fields:
        return []
    return [UpdateDocument(path, fields)]
