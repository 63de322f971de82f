from typing import Any, Dict, List, Optional

from consistency.change_classifier import Change, parse_document
from firebase_admin import firestore
from models.constants import (
    MIRRORED_RESOURCE_FIELDS,
    HeaderFields,
    PathParams,
    ResourceFields,
)
from models.data_models import DeleteDocument, PendingWrite, SetDocument
from models.pydantic_models import ResourceDocument
from utils.logging_utils import get_logger
from utils.path_utils import header_path, resource_path

# Fields that decide where the header lives
HEADER_KEY_FIELDS = (
    ResourceFields.LANGUAGE,
    ResourceFields.TOPIC,
    ResourceFields.SUBTOPIC,
)


def build_header(resource_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    header = {field: data.get(field) for field in MIRRORED_RESOURCE_FIELDS}
    header[HeaderFields.RESOURCE] = resource_id
    header[HeaderFields.SUBTOPIC] = data.get(ResourceFields.SUBTOPIC)
    return header


def _header_location(resource_id: str, data: Optional[Dict[str, Any]]) -> Optional[str]:
    resource = parse_document(ResourceDocument, data, resource_path(resource_id))
    if resource is None:
        return None
    if not (resource.language and resource.topic and resource.subtopic):
        return None
    return header_path(resource.language, resource.topic, resource.subtopic, resource_id)


def mirror_header(
    db: firestore.Client,
    change: Change,
    params: Dict[str, str],
    delete_on_source_delete: bool = False,
) -> List[PendingWrite]:
    """
    Copy the listed subset of a resource into its header document.

    The header lives at
    languages/{languageCode}/topics/{topicId}/subtopics/{subtopicId}/resource_headers/{resourceId}
    so a resource moved to another topic or subtopic leaves a stale header
    behind, which is deleted. A deleted resource keeps its header unless
    delete_on_source_delete is set.

    Args:
        db: Firestore client
        change: The classified write to the resource
        params: Path parameters, must contain resourceId
        delete_on_source_delete: Also delete the header of a deleted resource

    Returns:
        Pending header writes
    """
    logger = get_logger(__name__)
    resource_id = params[PathParams.RESOURCE_ID]

    old_location = _header_location(resource_id, change.previous)
    new_location = _header_location(resource_id, change.current)

    if change.is_deleted:
        if delete_on_source_delete and old_location:
            logger.info(f"Deleting header {old_location} of deleted resource")
            return [DeleteDocument(old_location)]
        return []

    writes = []
    if old_location and old_location != new_location:
        logger.info(f"Resource {resource_id} moved, deleting header {old_location}")
        writes.append(DeleteDocument(old_location))

    if new_location is None:
        logger.warning(
            f"Resource {resource_id} has no language, topic or subtopic, not mirroring"
        )
        return writes

    if (
        old_location != new_location
        or change.is_created
        or change.changed_any(*MIRRORED_RESOURCE_FIELDS)
    ):
        writes.append(SetDocument(new_location, build_header(resource_id, change.current)))
        logger.info(f"Mirroring resource {resource_id} into {new_location}")

    return writes
