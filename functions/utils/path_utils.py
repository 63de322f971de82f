from models.constants import UPLOADS_ROOT, Collections


def resource_path(resource_id: str) -> str:
    return f"{Collections.RESOURCES}/{resource_id}"


def card_path(resource_id: str, card_id: str) -> str:
    return f"{resource_path(resource_id)}/{Collections.CARDS}/{card_id}"


def feedback_path(resource_id: str, card_id: str, feedback_id: str) -> str:
    return f"{card_path(resource_id, card_id)}/{Collections.FEEDBACK}/{feedback_id}"


def topic_path(language_code: str, topic_id: str) -> str:
    return f"{Collections.LANGUAGES}/{language_code}/{Collections.TOPICS}/{topic_id}"


def header_path(
    language_code: str, topic_id: str, subtopic_id: str, resource_id: str
) -> str:
    """Location of the header mirroring a resource, keyed by where it is listed."""
    return (
        f"{topic_path(language_code, topic_id)}/{Collections.SUBTOPICS}/{subtopic_id}"
        f"/{Collections.RESOURCE_HEADERS}/{resource_id}"
    )


def featured_header_path(language_code: str, topic_id: str, subtopic_id: str) -> str:
    return (
        f"{topic_path(language_code, topic_id)}"
        f"/{Collections.FEATURED_LESSON_HEADERS}/{subtopic_id}"
    )


def user_path(uid: str) -> str:
    return f"{Collections.USERS}/{uid}"


def attachment_prefix(author_id: str, resource_id: str, card_id: str) -> str:
    """Storage prefix holding every attachment of a card, with trailing slash."""
    return f"{UPLOADS_ROOT}/{author_id}/{resource_id}/{card_id}/"


def attachment_object_path(
    author_id: str, resource_id: str, card_id: str, file_name: str
) -> str:
    return f"{attachment_prefix(author_id, resource_id, card_id)}{file_name}"


def parse_attachment_object_path(name: str):
    """
    Split an uploaded object name into its owning ids.

    Args:
        name: Full object name, e.g. user_uploads/{authorId}/{resourceId}/{cardId}/x.png

    Returns:
        (author_id, resource_id, card_id, file_name), or None when the object
        does not live under the attachments layout
    """
    parts = name.split("/")
    if len(parts) != 5 or parts[0] != UPLOADS_ROOT or not all(parts[1:]):
        return None
    _, author_id, resource_id, card_id, file_name = parts
    return author_id, resource_id, card_id, file_name
