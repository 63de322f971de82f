from typing import Dict, List

from consistency.change_classifier import Change, parse_document
from consistency.self_write_guard import fields_to_write
from firebase_admin import firestore
from models.constants import PathParams, ResourceFields, ResourceType
from models.data_models import PendingWrite, UpdateDocument
from models.pydantic_models import ResourceDocument
from resources.lesson_queries import published_lessons_query
from utils.logging_utils import get_logger
from utils.path_utils import resource_path


def recount_subtopic(db: firestore.Client, subtopic_id: str) -> List[PendingWrite]:
    """
    Recompute the published lesson count of a subtopic.

    The count is taken from a fresh query every time rather than patched,
    and stored on every featured lesson of the subtopic.

    Args:
        db: Firestore client
        subtopic_id: The subtopic to count

    Returns:
        Updates for the featured lessons whose stored count is stale
    """
    logger = get_logger(__name__)

    lessons = list(published_lessons_query(db, subtopic_id).stream())
    count = len(lessons)

    writes = []
    for lesson in lessons:
        data = lesson.to_dict()
        if data.get(ResourceFields.IS_FEATURED) is not True:
            continue
        fields = fields_to_write(data, {ResourceFields.PUBLISHED_LESSON_COUNT: count})
        if fields:
            writes.append(UpdateDocument(lesson.reference.path, fields))

    logger.info(
        f"Subtopic {subtopic_id} has {count} published lessons, "
        f"{len(writes)} featured lessons to update"
    )
    return writes


def recompute_lesson_counts(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """Recount every subtopic the written lesson was or is listed under."""
    path = resource_path(params[PathParams.RESOURCE_ID])

    subtopics = []
    for data in (change.previous, change.current):
        resource = parse_document(ResourceDocument, data, path)
        if resource is None or resource.resource_type != ResourceType.LESSON:
            continue
        if resource.subtopic and resource.subtopic not in subtopics:
            subtopics.append(resource.subtopic)

    writes = []
    for subtopic_id in subtopics:
        writes.extend(recount_subtopic(db, subtopic_id))
    return writes
