from typing import Dict, List

from consistency.change_classifier import Change, ChangeKind, parse_document
from consistency.self_write_guard import fields_to_write
from firebase_admin import firestore
from models.constants import Collections, PathParams, TopicFields
from models.data_models import PendingWrite, UpdateDocument
from models.pydantic_models import TopicDocument
from utils.logging_utils import get_logger
from utils.path_utils import topic_path


def recount_featured_subtopics(
    db: firestore.Client, language_code: str, topic_id: str
) -> List[PendingWrite]:
    """
    Recompute featuredSubtopicCount of a topic.

    Counts the featured header slots of the topic whose subtopic belongs to
    the topic's subtopics membership map. A topic without a map counts every
    slot. A topic that does not exist (yet, or any more) is skipped.

    Args:
        db: Firestore client
        language_code: Language of the topic
        topic_id: The topic to recount

    Returns:
        The count update, empty when the stored count is already right
    """
    logger = get_logger(__name__)

    path = topic_path(language_code, topic_id)
    topic_ref = db.document(path)
    topic_snapshot = topic_ref.get()
    if not topic_snapshot.exists:
        logger.warning(f"Topic {path} not found, skipping featured subtopic count")
        return []

    topic_data = topic_snapshot.to_dict() or {}
    topic = parse_document(TopicDocument, topic_data, path)
    if topic is None:
        return []

    slots = topic_ref.collection(Collections.FEATURED_LESSON_HEADERS).stream()
    if topic.subtopics is None:
        count = len(list(slots))
    else:
        count = sum(1 for slot in slots if topic.subtopics.get(slot.id))

    fields = fields_to_write(topic_data, {TopicFields.FEATURED_SUBTOPIC_COUNT: count})
    if not fields:
        return []

    logger.info(f"Topic {path} now has {count} featured subtopics")
    return [UpdateDocument(path, fields)]


def on_featured_header_written(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    if change.kind == ChangeKind.NOOP:
        return []
    return recount_featured_subtopics(
        db, params[PathParams.LANGUAGE_CODE], params[PathParams.TOPIC_ID]
    )


def on_topic_written(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """Recount when the topic's subtopic membership changes."""
    if change.kind in (ChangeKind.NOOP, ChangeKind.DELETED):
        return []
    if not (change.is_created or change.changed(TopicFields.SUBTOPICS)):
        return []
    return recount_featured_subtopics(
        db, params[PathParams.LANGUAGE_CODE], params[PathParams.TOPIC_ID]
    )
