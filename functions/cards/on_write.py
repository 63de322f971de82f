from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from consistency.change_classifier import (
    Change,
    ChangeKind,
    parse_document,
    snapshot_to_dict,
)
from consistency.self_write_guard import fields_to_write, within_quiescence_window
from firebase_admin import firestore, storage
from models.constants import (
    DEFAULT_QUIESCENCE_WINDOW,
    CardFields,
    Collections,
    PathParams,
    ResourceFields,
)
from models.data_models import (
    DeleteDocument,
    DeleteStorageObject,
    DeleteStoragePrefix,
    PendingWrite,
    UpdateDocument,
)
from models.pydantic_models import ResourceDocument
from utils.logging_utils import get_logger
from utils.path_utils import (
    attachment_object_path,
    attachment_prefix,
    card_path,
    resource_path,
)

# Card fields written by triggers rather than by the author
DERIVED_CARD_FIELDS = (
    CardFields.FEEDBACK_PREVIEW_COMMENT,
    CardFields.FEEDBACK_PREVIEW_COMMENT_PATH,
    CardFields.ATTACHMENT_CONTENT_TYPE,
    CardFields.ATTACHMENT_SIZE,
)


def _authored_fields_changed(change: Change) -> bool:
    if change.kind != ChangeKind.UPDATED:
        return True
    field_names = set(change.previous) | set(change.current)
    return any(
        change.changed(field_name)
        for field_name in field_names
        if field_name not in DERIVED_CARD_FIELDS
    )


def _sync_attachment_metadata(
    bucket, change: Change, object_path: Optional[str]
) -> Dict[str, object]:
    blob = bucket.get_blob(object_path) if object_path else None
    if blob is None:
        # Nothing to describe yet, the upload trigger records it once it lands
        proposed = {
            CardFields.ATTACHMENT_CONTENT_TYPE: firestore.DELETE_FIELD,
            CardFields.ATTACHMENT_SIZE: firestore.DELETE_FIELD,
        }
    else:
        proposed = {
            CardFields.ATTACHMENT_CONTENT_TYPE: blob.content_type,
            CardFields.ATTACHMENT_SIZE: blob.size,
        }
    return fields_to_write(change.current, proposed)


def _delete_feedback(db: firestore.Client, resource_id: str, card_id: str):
    feedback = (
        db.document(card_path(resource_id, card_id))
        .collection(Collections.FEEDBACK)
        .stream()
    )
    return [DeleteDocument(snapshot.reference.path) for snapshot in feedback]


def on_card_written(
    db: firestore.Client,
    change: Change,
    params: Dict[str, str],
    quiescence_window: timedelta = DEFAULT_QUIESCENCE_WINDOW,
    now: Optional[datetime] = None,
    bucket=None,
) -> List[PendingWrite]:
    """
    Keep attachments, feedback and the parent resource in line with a card.

    - A deleted card loses its feedback documents and every file under its
      attachment prefix.
    - A replaced or removed attachmentPath deletes the previous file.
    - A new attachmentPath takes its content type and size from the stored
      object, or drops them until the upload trigger records them.
    - An authored change bumps the parent's dateEdited, unless the stored
      value is within the quiescence window.

    Storage cleanup needs the parent's authorId. When the parent is already
    gone (it was deleted and its cascade removed this card) the cleanup is
    skipped, the cascade has done it.

    Args:
        db: Firestore client
        change: The classified write to resources/{resourceId}/cards/{cardId}
        params: Path parameters, must contain resourceId and cardId
        quiescence_window: Minimum distance between two dateEdited bumps
        now: Current time, defaults to the wall clock
        bucket: Cloud Storage bucket, defaults to the project's default bucket

    Returns:
        Pending writes
    """
    logger = get_logger(__name__)

    if change.kind == ChangeKind.NOOP:
        return []

    resource_id = params[PathParams.RESOURCE_ID]
    card_id = params[PathParams.CARD_ID]
    path = card_path(resource_id, card_id)
    parent_path = resource_path(resource_id)

    writes = []
    if change.is_deleted:
        writes.extend(_delete_feedback(db, resource_id, card_id))

    parent_data = snapshot_to_dict(db.document(parent_path).get())
    if parent_data is None:
        logger.warning(f"Parent {parent_path} of card {card_id} is gone, skipping")
        return writes

    parent = parse_document(ResourceDocument, parent_data, parent_path)
    if parent is None:
        return writes

    attachment_changed = not change.is_deleted and change.changed(
        CardFields.ATTACHMENT_PATH
    )
    if parent.author_id is None:
        if change.is_deleted or attachment_changed:
            logger.warning(f"Resource {parent_path} has no author, skipping attachments")
    elif change.is_deleted:
        writes.append(
            DeleteStoragePrefix(attachment_prefix(parent.author_id, resource_id, card_id))
        )
    elif attachment_changed:
        old_file = change.previous.get(CardFields.ATTACHMENT_PATH)
        if old_file:
            writes.append(
                DeleteStorageObject(
                    attachment_object_path(
                        parent.author_id, resource_id, card_id, old_file
                    )
                )
            )

        new_file = change.current.get(CardFields.ATTACHMENT_PATH)
        new_object = None
        if new_file:
            new_object = attachment_object_path(
                parent.author_id, resource_id, card_id, new_file
            )
        if bucket is None:
            bucket = storage.bucket()
        fields = _sync_attachment_metadata(bucket, change, new_object)
        if fields:
            logger.info(f"Updating attachment metadata of card {path}")
            writes.append(UpdateDocument(path, fields))

    if _authored_fields_changed(change):
        now = now or datetime.now(timezone.utc)
        if within_quiescence_window(parent.date_edited, now, quiescence_window):
            logger.info(f"{parent_path} edited recently, not bumping dateEdited")
        else:
            writes.append(UpdateDocument(parent_path, {ResourceFields.DATE_EDITED: now}))

    return writes
