from datetime import datetime
from typing import Dict, Optional, Union

from models.constants import ResourceStatus, ResourceType
from pydantic import BaseModel, Field, field_validator

# Firestore timestamps arrive as datetimes, older clients wrote epoch millis
Timestamp = Union[datetime, int, float]


class ResourceDocument(BaseModel):
    resource_type: ResourceType = Field(alias="resourceType")
    status: ResourceStatus
    is_featured: bool = Field(default=False, alias="isFeatured")
    language: Optional[str] = None
    topic: Optional[str] = None
    subtopic: Optional[str] = None
    author_id: Optional[str] = Field(default=None, alias="authorId")
    date_edited: Optional[Timestamp] = Field(default=None, alias="dateEdited")

    @field_validator("language", "topic", "subtopic", "author_id")
    @classmethod
    def validate_reference(cls, v):
        # Empty references are treated the same as absent ones
        if v == "":
            return None
        return v

    @property
    def is_published_lesson(self) -> bool:
        return (
            self.resource_type == ResourceType.LESSON
            and self.status == ResourceStatus.PUBLISHED
        )

    @property
    def is_featured_published_lesson(self) -> bool:
        return self.is_published_lesson and self.is_featured

    class Config:
        extra = "ignore"
        populate_by_name = True


class FeedbackDocument(BaseModel):
    reviewer_comment: bool = Field(default=False, alias="reviewerComment")
    locked: bool = False
    date_updated: Optional[Timestamp] = Field(default=None, alias="dateUpdated")
    comment_text: Optional[str] = Field(default=None, alias="commentText")

    class Config:
        extra = "ignore"
        populate_by_name = True


class TopicDocument(BaseModel):
    subtopics: Optional[Dict[str, bool]] = None
    featured_subtopic_count: Optional[int] = Field(
        default=None, alias="featuredSubtopicCount"
    )

    class Config:
        extra = "ignore"
        populate_by_name = True


class HeaderDocument(BaseModel):
    resource: str
    subtopic: str
    is_featured: bool = Field(default=False, alias="isFeatured")

    class Config:
        extra = "ignore"
        populate_by_name = True
