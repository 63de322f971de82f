from datetime import timedelta
from enum import StrEnum

# Firestore allows at most 500 operations in a single write batch
MAX_BATCH_SIZE = 500

# Derived timestamp writes closer than this to the stored value are skipped
DEFAULT_QUIESCENCE_WINDOW = timedelta(minutes=5)

# Attachments live under user_uploads/{authorId}/{resourceId}/{cardId}/
UPLOADS_ROOT = "user_uploads"


# Collection names
class Collections(StrEnum):
    RESOURCES = "resources"
    CARDS = "cards"
    FEEDBACK = "feedback"
    LANGUAGES = "languages"
    TOPICS = "topics"
    SUBTOPICS = "subtopics"
    RESOURCE_HEADERS = "resource_headers"
    FEATURED_LESSON_HEADERS = "featured_lesson_headers"
    USERS = "users"


class ResourceType(StrEnum):
    LESSON = "lesson"
    OTHER = "other"


class ResourceStatus(StrEnum):
    DRAFT = "draft"
    AWAITING_REVIEW = "awaiting_review"
    CHANGES_REQUESTED = "changes_requested"
    PUBLISHED = "published"


# Statuses that mean a reviewer is involved
REVIEW_STATUSES = (ResourceStatus.AWAITING_REVIEW, ResourceStatus.CHANGES_REQUESTED)

# Statuses that hide the feedback preview on every card
PREVIEW_CLEARING_STATUSES = (ResourceStatus.AWAITING_REVIEW, ResourceStatus.PUBLISHED)


# Field names for Resource documents
class ResourceFields(StrEnum):
    RESOURCE_TYPE = "resourceType"
    STATUS = "status"
    IS_FEATURED = "isFeatured"
    LANGUAGE = "language"
    TOPIC = "topic"
    SUBTOPIC = "subtopic"
    AUTHOR_ID = "authorId"
    AUTHOR_NAME = "authorName"
    AUTHOR_EMAIL = "authorEmail"
    AUTHOR_INSTITUTION = "authorInstitution"
    AUTHOR_LOCATION = "authorLocation"
    NAME = "name"
    DATE_EDITED = "dateEdited"
    IS_AWAITING_REVIEW_OR_HAS_CHANGES_REQUESTED = "isAwaitingReviewOrHasChangesRequested"
    PUBLISHED_LESSON_COUNT = "publishedLessonCount"


# Field names for Card documents
class CardFields(StrEnum):
    ATTACHMENT_PATH = "attachmentPath"
    ATTACHMENT_CONTENT_TYPE = "attachmentContentType"
    ATTACHMENT_SIZE = "attachmentSize"
    FEEDBACK_PREVIEW_COMMENT = "feedbackPreviewComment"
    FEEDBACK_PREVIEW_COMMENT_PATH = "feedbackPreviewCommentPath"


# Field names for Feedback documents
class FeedbackFields(StrEnum):
    REVIEWER_COMMENT = "reviewerComment"
    LOCKED = "locked"
    DATE_UPDATED = "dateUpdated"
    COMMENT_TEXT = "commentText"


# Field names for Header documents
class HeaderFields(StrEnum):
    RESOURCE = "resource"
    RESOURCE_TYPE = "resourceType"
    STATUS = "status"
    IS_FEATURED = "isFeatured"
    SUBTOPIC = "subtopic"
    AUTHOR_NAME = "authorName"
    AUTHOR_EMAIL = "authorEmail"
    AUTHOR_INSTITUTION = "authorInstitution"
    AUTHOR_LOCATION = "authorLocation"
    NAME = "name"
    DATE_EDITED = "dateEdited"


# Resource fields copied verbatim into the header
MIRRORED_RESOURCE_FIELDS = (
    ResourceFields.RESOURCE_TYPE,
    ResourceFields.STATUS,
    ResourceFields.IS_FEATURED,
    ResourceFields.AUTHOR_NAME,
    ResourceFields.AUTHOR_EMAIL,
    ResourceFields.AUTHOR_INSTITUTION,
    ResourceFields.AUTHOR_LOCATION,
    ResourceFields.NAME,
    ResourceFields.DATE_EDITED,
)


# Field names for Topic documents
class TopicFields(StrEnum):
    SUBTOPICS = "subtopics"
    FEATURED_SUBTOPIC_COUNT = "featuredSubtopicCount"


# Field names for User documents
class UserFields(StrEnum):
    UID = "uid"
    DISPLAY_NAME = "displayName"
    EMAIL = "email"
    PHONE_NUMBER = "phoneNumber"
    CREATED_AT = "createdAt"


class QueryOperators(StrEnum):
    EQUALS = "=="
    IN = "in"


# Path parameter names used in trigger document patterns
class PathParams(StrEnum):
    LANGUAGE_CODE = "languageCode"
    TOPIC_ID = "topicId"
    SUBTOPIC_ID = "subtopicId"
    RESOURCE_ID = "resourceId"
    CARD_ID = "cardId"
    FEEDBACK_ID = "feedbackId"
