from typing import List

from consistency.change_classifier import snapshot_to_dict
from consistency.self_write_guard import fields_to_write
from firebase_admin import firestore
from models.constants import CardFields, ResourceFields
from models.data_models import DeleteStorageObject, PendingWrite, UpdateDocument
from utils.logging_utils import get_logger
from utils.path_utils import card_path, parse_attachment_object_path, resource_path


def record_attachment_metadata(
    db: firestore.Client, bucket, object_name: str
) -> List[PendingWrite]:
    """
    Handle a finished upload under user_uploads/.

    The object's metadata is fetched by path and its content type and size are
    recorded on the owning card once the card points at the file. An upload
    for a resource that no longer exists, or under another user's prefix than
    the resource author's, can never be cleaned up by the resource cascade, so
    it is deleted here.

    Args:
        db: Firestore client
        bucket: Cloud Storage bucket the object was written to
        object_name: Full object name

    Returns:
        Pending writes
    """
    logger = get_logger(__name__)

    parsed = parse_attachment_object_path(object_name)
    if parsed is None:
        logger.info(f"Object {object_name} is not a card attachment, ignoring")
        return []
    author_id, resource_id, card_id, file_name = parsed

    blob = bucket.get_blob(object_name)
    if blob is None:
        logger.info(f"Object {object_name} was deleted before it could be processed")
        return []

    resource_snapshot = db.document(resource_path(resource_id)).get()
    if not resource_snapshot.exists:
        logger.warning(f"Resource {resource_id} not found, deleting orphan {object_name}")
        return [DeleteStorageObject(object_name)]

    owner = resource_snapshot.to_dict().get(ResourceFields.AUTHOR_ID)
    if owner != author_id:
        # The resource cascade only clears its own author's prefix
        logger.warning(
            f"Upload {object_name} is not under the author {owner} of {resource_id}, "
            f"deleting it"
        )
        return [DeleteStorageObject(object_name)]

    path = card_path(resource_id, card_id)
    card_data = snapshot_to_dict(db.document(path).get())
    if card_data is None or card_data.get(CardFields.ATTACHMENT_PATH) != file_name:
        # The client points the card at the file after the upload finishes
        logger.info(f"Card {path} does not reference {file_name} yet")
        return []

    fields = fields_to_write(
        card_data,
        {
            CardFields.ATTACHMENT_CONTENT_TYPE: blob.content_type,
            CardFields.ATTACHMENT_SIZE: blob.size,
        },
    )
    if not fields:
        return []
    return [UpdateDocument(path, fields)]
