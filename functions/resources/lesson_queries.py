from firebase_admin import firestore
from models.constants import (
    Collections,
    QueryOperators,
    ResourceFields,
    ResourceStatus,
    ResourceType,
)


def published_lessons_query(db: firestore.Client, subtopic_id: str):
    """Every published lesson listed under a subtopic."""
    return (
        db.collection(Collections.RESOURCES)
        .where(ResourceFields.SUBTOPIC, QueryOperators.EQUALS, subtopic_id)
        .where(ResourceFields.RESOURCE_TYPE, QueryOperators.EQUALS, ResourceType.LESSON)
        .where(ResourceFields.STATUS, QueryOperators.EQUALS, ResourceStatus.PUBLISHED)
    )


def featured_lessons_query(db: firestore.Client, subtopic_id: str):
    return published_lessons_query(db, subtopic_id).where(
        ResourceFields.IS_FEATURED, QueryOperators.EQUALS, True
    )
