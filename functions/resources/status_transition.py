from typing import Dict, List

from consistency.change_classifier import Change, parse_document
from consistency.self_write_guard import fields_to_write
from firebase_admin import firestore
from models.constants import (
    PREVIEW_CLEARING_STATUSES,
    CardFields,
    Collections,
    FeedbackFields,
    PathParams,
    ResourceFields,
)
from models.data_models import PendingWrite, UpdateDocument
from models.pydantic_models import ResourceDocument
from utils.logging_utils import get_logger
from utils.path_utils import resource_path


def apply_status_transition(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Side effects of a resource changing status.

    Every feedback document under every card of the resource is locked. The
    lock is one way: nothing here ever unlocks feedback. When the new status
    is awaiting_review or published the feedback preview of every card is
    cleared as well.

    Args:
        db: Firestore client
        change: The classified write to the resource
        params: Path parameters, must contain resourceId

    Returns:
        Pending writes for the feedback and card documents that need them
    """
    logger = get_logger(__name__)

    if not change.is_updated or not change.changed(ResourceFields.STATUS):
        return []

    resource_id = params[PathParams.RESOURCE_ID]
    path = resource_path(resource_id)

    resource = parse_document(ResourceDocument, change.current, path)
    if resource is None:
        return []

    clear_previews = resource.status in PREVIEW_CLEARING_STATUSES

    writes = []
    locked = 0
    cards = db.collection(Collections.RESOURCES).document(resource_id).collection(
        Collections.CARDS
    )
    for card in cards.stream():
        for feedback in card.reference.collection(Collections.FEEDBACK).stream():
            if feedback.to_dict().get(FeedbackFields.LOCKED) is True:
                continue
            writes.append(
                UpdateDocument(feedback.reference.path, {FeedbackFields.LOCKED: True})
            )
            locked += 1

        if clear_previews:
            fields = fields_to_write(
                card.to_dict(),
                {
                    CardFields.FEEDBACK_PREVIEW_COMMENT: firestore.DELETE_FIELD,
                    CardFields.FEEDBACK_PREVIEW_COMMENT_PATH: firestore.DELETE_FIELD,
                },
            )
            if fields:
                writes.append(UpdateDocument(card.reference.path, fields))

    logger.info(
        f"Resource {resource_id} moved to {resource.status}: locking {locked} "
        f"feedback documents, clearing previews: {clear_previews}"
    )
    return writes
