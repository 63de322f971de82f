from datetime import datetime, timezone
from typing import Dict, List

from consistency.change_classifier import Change, parse_document
from consistency.self_write_guard import exclude_path, to_datetime
from firebase_admin import firestore
from models.constants import PathParams, ResourceFields
from models.data_models import PendingWrite, UpdateDocument
from models.pydantic_models import ResourceDocument
from resources.lesson_queries import featured_lessons_query, published_lessons_query
from utils.logging_utils import get_logger
from utils.path_utils import resource_path

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def enforce_single_featured(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Keep at most one featured published lesson per subtopic.

    When the written lesson is featured, every other featured lesson of its
    subtopic is unfeatured. When it is not featured and no other lesson of the
    subtopic is, the written lesson becomes the featured one.

    This is best effort: two concurrent invocations can both see an empty
    sibling set. The loser's next write converges the subtopic again.

    Args:
        db: Firestore client
        change: The classified write to the resource
        params: Path parameters, must contain resourceId

    Returns:
        Pending writes, empty when the resource is not a published lesson
    """
    logger = get_logger(__name__)
    path = resource_path(params[PathParams.RESOURCE_ID])

    lesson = parse_document(ResourceDocument, change.current, path)
    if lesson is None or not lesson.is_published_lesson:
        return []
    if lesson.subtopic is None:
        logger.warning(f"Published lesson {path} has no subtopic")
        return []

    # The triggering lesson shows up in its own query results
    featured_siblings = exclude_path(
        featured_lessons_query(db, lesson.subtopic).stream(), path
    )

    if lesson.is_featured:
        if featured_siblings:
            logger.info(
                f"Unfeaturing {len(featured_siblings)} lessons in subtopic "
                f"{lesson.subtopic} in favour of {path}"
            )
        return [
            UpdateDocument(sibling.reference.path, {ResourceFields.IS_FEATURED: False})
            for sibling in featured_siblings
        ]

    if not featured_siblings:
        logger.info(f"No featured lesson in subtopic {lesson.subtopic}, featuring {path}")
        return [UpdateDocument(path, {ResourceFields.IS_FEATURED: True})]

    return []


def _edited_sort_key(snapshot):
    edited = to_datetime(snapshot.to_dict().get(ResourceFields.DATE_EDITED))
    return (edited or _OLDEST, snapshot.id)


def promote_successor(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Feature another lesson when the featured one leaves its subtopic.

    A featured published lesson that is deleted, unpublished or moved away
    leaves the subtopic without a featured lesson and no further write would
    fix that. The most recently edited remaining published lesson is featured.
    """
    logger = get_logger(__name__)
    path = resource_path(params[PathParams.RESOURCE_ID])

    before = parse_document(ResourceDocument, change.previous, path)
    if before is None or not before.is_featured_published_lesson:
        return []
    if before.subtopic is None:
        return []

    after = parse_document(ResourceDocument, change.current, path)
    if (
        after is not None
        and after.is_published_lesson
        and after.subtopic == before.subtopic
    ):
        # Still listed in the same subtopic, enforce_single_featured handles it
        return []

    candidates = exclude_path(published_lessons_query(db, before.subtopic).stream(), path)
    if not candidates:
        return []
    if any(c.to_dict().get(ResourceFields.IS_FEATURED) is True for c in candidates):
        return []

    successor = max(candidates, key=_edited_sort_key)
    logger.info(
        f"Featured lesson {path} left subtopic {before.subtopic}, "
        f"promoting {successor.reference.path}"
    )
    return [UpdateDocument(successor.reference.path, {ResourceFields.IS_FEATURED: True})]
