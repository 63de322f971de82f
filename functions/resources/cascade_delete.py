from typing import Dict, List

from consistency.change_classifier import Change
from firebase_admin import firestore
from models.constants import Collections, PathParams, ResourceFields
from models.data_models import DeleteDocument, DeleteStoragePrefix, PendingWrite
from utils.logging_utils import get_logger
from utils.path_utils import attachment_prefix


def cascade_resource_delete(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Delete everything a resource owns once the resource itself is gone.

    For each card the attachment files under
    user_uploads/{authorId}/{resourceId}/{cardId}/ are removed before the card
    and its feedback documents. The author comes from the pre-delete document
    since the resource can no longer be read.

    Args:
        db: Firestore client
        change: The classified write, only deletions are handled
        params: Path parameters, must contain resourceId

    Returns:
        Storage and document deletions for every card of the resource
    """
    logger = get_logger(__name__)

    if not change.is_deleted:
        return []

    resource_id = params[PathParams.RESOURCE_ID]
    author_id = change.previous.get(ResourceFields.AUTHOR_ID)
    if not author_id:
        logger.warning(
            f"Deleted resource {resource_id} has no author, attachments cannot be located"
        )

    writes = []
    card_count = 0
    cards = db.collection(Collections.RESOURCES).document(resource_id).collection(
        Collections.CARDS
    )
    for card in cards.stream():
        if author_id:
            writes.append(
                DeleteStoragePrefix(attachment_prefix(author_id, resource_id, card.id))
            )
        for feedback in card.reference.collection(Collections.FEEDBACK).stream():
            writes.append(DeleteDocument(feedback.reference.path))
        writes.append(DeleteDocument(card.reference.path))
        card_count += 1

    logger.info(f"Cascading delete of resource {resource_id} to {card_count} cards")
    return writes
