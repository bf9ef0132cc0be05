"""
Course schemas for the course reader.

Defines Pydantic models for course content:
- Topic: an ordered run of page images
- Course: ordered topics plus catalog metadata

Field aliases match the catalog wire format (`_id`, `images`,
`userHasAccess`) so payloads validate directly.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class Topic(BaseModel):
    """A topic (chapter) of a course. Its page count is fixed once loaded."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="_id", min_length=1)
    title: str = ""
    pages: tuple[str, ...] = Field(default=(), alias="images")  # image urls / public paths

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def last_page_index(self) -> int:
        """Index of the final page (-1 for an empty topic)."""
        return len(self.pages) - 1

    def page_range(self) -> set[int]:
        """All valid page indices for this topic."""
        return set(range(len(self.pages)))

    def contains_page(self, page_index: int) -> bool:
        return 0 <= page_index < len(self.pages)


class Course(BaseModel):
    """A course as seen by the reader. Immutable for the whole session."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="_id")
    title: str = ""
    topics: tuple[Topic, ...] = ()
    price: Optional[float] = None
    user_has_access: Optional[bool] = Field(default=None, alias="userHasAccess")

    @property
    def total_pages(self) -> int:
        return sum(topic.page_count for topic in self.topics)

    def topic_index(self, topic_id: str) -> Optional[int]:
        """Position of a topic in the course, or None if it is not part of it."""
        for idx, topic in enumerate(self.topics):
            if topic.id == topic_id:
                return idx
        return None

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        idx = self.topic_index(topic_id)
        return self.topics[idx] if idx is not None else None

    def page_counts(self) -> dict[str, int]:
        """Map of topic id -> page count."""
        return {topic.id: topic.page_count for topic in self.topics}
