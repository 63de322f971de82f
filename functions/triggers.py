from attachments.on_upload import record_attachment_metadata
from cards.on_write import on_card_written
from config import delete_header_on_source_delete, quiescence_window
from consistency.change_classifier import ChangeKind, classify_snapshots
from consistency.pending_writes import commit_pending_writes
from feedback.on_write import on_feedback_written
from firebase_admin import firestore, storage
from firebase_functions import firestore_fn, identity_fn, storage_fn
from headers.featured_header import sync_featured_header
from headers.featured_subtopic_count import on_featured_header_written, on_topic_written
from models.constants import Collections
from resources.on_write import on_resource_written
from users.on_create import mirror_new_user
from utils.logging_utils import get_logger

RESOURCE_DOCUMENT = f"{Collections.RESOURCES}/{{resourceId}}"
CARD_DOCUMENT = f"{RESOURCE_DOCUMENT}/{Collections.CARDS}/{{cardId}}"
FEEDBACK_DOCUMENT = f"{CARD_DOCUMENT}/{Collections.FEEDBACK}/{{feedbackId}}"
TOPIC_DOCUMENT = f"{Collections.LANGUAGES}/{{languageCode}}/{Collections.TOPICS}/{{topicId}}"
HEADER_DOCUMENT = (
    f"{TOPIC_DOCUMENT}/{Collections.SUBTOPICS}/{{subtopicId}}"
    f"/{Collections.RESOURCE_HEADERS}/{{resourceId}}"
)
FEATURED_HEADER_DOCUMENT = (
    f"{TOPIC_DOCUMENT}/{Collections.FEATURED_LESSON_HEADERS}/{{subtopicId}}"
)


def _run_recomputation(name, handler, event, **kwargs) -> None:
    """
    Classify a document write, run its recomputation and commit the result.

    Failures are logged and re-raised so the platform decides about retries.
    """
    logger = get_logger(__name__)

    params = dict(event.params)
    change = classify_snapshots(event.data.before, event.data.after)
    if change.kind == ChangeKind.NOOP:
        logger.warning(f"{name}: event for {params} has neither before nor after")
        return

    db = firestore.client()
    try:
        writes = handler(db, change, params, **kwargs)
        commit_pending_writes(db, writes)
        logger.info(f"{name}: applied {len(writes)} writes for {change.kind} {params}")
    except Exception as e:
        logger.error(f"{name}: error processing {change.kind} {params}: {str(e)}")
        raise


# Firestore trigger for every write to a resource
@firestore_fn.on_document_written(document=RESOURCE_DOCUMENT)
def process_resource_write(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    """
    Featured lesson, lesson counts, review flag, status side effects,
    cascading delete and header mirroring for a resource.
    """
    _run_recomputation(
        "process_resource_write",
        on_resource_written,
        event,
        delete_header_on_source_delete=delete_header_on_source_delete(),
    )


@firestore_fn.on_document_written(document=CARD_DOCUMENT)
def process_card_write(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    _run_recomputation(
        "process_card_write",
        on_card_written,
        event,
        quiescence_window=quiescence_window(),
    )


@firestore_fn.on_document_written(document=FEEDBACK_DOCUMENT)
def process_feedback_write(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    _run_recomputation(
        "process_feedback_write",
        on_feedback_written,
        event,
        quiescence_window=quiescence_window(),
    )


@firestore_fn.on_document_written(document=HEADER_DOCUMENT)
def process_header_write(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    _run_recomputation("process_header_write", sync_featured_header, event)


@firestore_fn.on_document_written(document=FEATURED_HEADER_DOCUMENT)
def process_featured_header_write(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    _run_recomputation(
        "process_featured_header_write", on_featured_header_written, event
    )


@firestore_fn.on_document_written(document=TOPIC_DOCUMENT)
def process_topic_write(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    _run_recomputation("process_topic_write", on_topic_written, event)


# Storage trigger for finished uploads
@storage_fn.on_object_finalized()
def process_attachment_upload(
    event: storage_fn.CloudEvent[storage_fn.StorageObjectData],
) -> None:
    logger = get_logger(__name__)
    object_name = event.data.name

    db = firestore.client()
    bucket = storage.bucket(event.data.bucket)
    try:
        writes = record_attachment_metadata(db, bucket, object_name)
        commit_pending_writes(db, writes, bucket=bucket)
    except Exception as e:
        logger.error(f"Error processing upload {object_name}: {str(e)}")
        raise


# Identity trigger for new accounts
@identity_fn.before_user_created()
def process_user_creation(
    event: identity_fn.AuthBlockingEvent,
) -> identity_fn.BeforeCreateResponse | None:
    user = event.data
    mirror_new_user(
        firestore.client(),
        user.uid,
        display_name=user.display_name,
        email=user.email,
        phone_number=user.phone_number,
    )
    return None
