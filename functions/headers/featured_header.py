from typing import Dict, List

from consistency.change_classifier import Change, parse_document, snapshot_to_dict
from firebase_admin import firestore
from models.constants import (
    HeaderFields,
    PathParams,
    ResourceStatus,
    ResourceType,
)
from models.data_models import DeleteDocument, PendingWrite, SetDocument
from models.pydantic_models import HeaderDocument
from utils.logging_utils import get_logger
from utils.path_utils import featured_header_path


def _is_featured_lesson_header(data) -> bool:
    return (
        data.get(HeaderFields.IS_FEATURED) is True
        and data.get(HeaderFields.RESOURCE_TYPE) == ResourceType.LESSON
        and data.get(HeaderFields.STATUS) == ResourceStatus.PUBLISHED
    )


def sync_featured_header(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Keep the featured header slot of a subtopic in line with its headers.

    A featured published lesson header is copied to
    languages/{languageCode}/topics/{topicId}/featured_lesson_headers/{subtopicId}.
    When the header currently in the slot stops being featured, or is deleted,
    the slot is cleared. A header that does not own the slot never clears it.
    """
    logger = get_logger(__name__)

    language_code = params[PathParams.LANGUAGE_CODE]
    topic_id = params[PathParams.TOPIC_ID]
    subtopic_id = params[PathParams.SUBTOPIC_ID]
    resource_id = params[PathParams.RESOURCE_ID]

    slot_path = featured_header_path(language_code, topic_id, subtopic_id)
    slot = snapshot_to_dict(db.document(slot_path).get())

    header = parse_document(HeaderDocument, change.current, slot_path)
    if header is not None and _is_featured_lesson_header(change.current):
        if slot == change.current:
            return []
        logger.info(f"Featuring lesson {resource_id} in {slot_path}")
        return [SetDocument(slot_path, dict(change.current))]

    if slot is not None and slot.get(HeaderFields.RESOURCE) == resource_id:
        logger.info(f"Lesson {resource_id} is no longer featured, clearing {slot_path}")
        return [DeleteDocument(slot_path)]

    return []
