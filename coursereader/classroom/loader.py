"""
ContentResolver - Resolve a course's topic/page structure.

Prefers the remote catalog. When the catalog is unreachable, does not know
the course, or returns a course without topics, the fixed fallback
structure below is substituted so the reader can always render.

The fallback topic ids (t1..t8) and page ranges key persisted viewed pages
and bookmarks; changing them orphans existing reading state.
"""

import logging
from typing import Optional

from coursereader.clients import Catalog, RemoteError
from coursereader.schemas import Course, Topic

logger = logging.getLogger(__name__)


FALLBACK_COURSE_TITLE = "Option Analysis Strategy by A. Bhattacharjee"
FALLBACK_COURSE_PRICE = 1499

# (topic id, title, first page number, last page number) - inclusive
FALLBACK_TOPIC_RANGES: tuple[tuple[str, str, int, int], ...] = (
    ("t1", "Introduction", 2, 18),
    ("t2", "Understanding Doji Candles", 19, 22),
    ("t3", 'The "Dicy Reversal" Setup', 23, 29),
    ("t4", "Entry & Exit Rules", 30, 34),
    ("t5", "Risk Management", 35, 47),
    ("t6", "Practical Examples", 48, 52),
    ("t7", "Final Thoughts", 53, 56),
    ("t8", "Author's Message", 57, 58),
)


def page_url(page_number: int) -> str:
    """Public path of a bundled course page image."""
    return f"/course/{page_number}.jpeg"


def build_fallback_topics() -> tuple[Topic, ...]:
    """The hardcoded 8-topic structure of the bundled course."""
    return tuple(
        Topic(
            id=topic_id,
            title=title,
            pages=tuple(page_url(n) for n in range(first, last + 1)),
        )
        for topic_id, title, first, last in FALLBACK_TOPIC_RANGES
    )


def build_fallback_course(course_id: str) -> Course:
    return Course(
        id=course_id,
        title=FALLBACK_COURSE_TITLE,
        topics=build_fallback_topics(),
        price=FALLBACK_COURSE_PRICE,
        user_has_access=True,
    )


class ContentResolver:
    """
    Resolve courses for the reader.

    Never raises to the caller: every failure degrades to the fallback
    structure.
    """

    def __init__(self, catalog: Optional[Catalog] = None):
        """
        Initialize resolver.

        Args:
            catalog: Remote catalog; None means offline (always fall back)
        """
        self.catalog = catalog

    def load_course(self, course_id: str) -> Course:
        """Return the course with a non-empty topic list."""
        if self.catalog is None:
            return build_fallback_course(course_id)

        try:
            course = self.catalog.get_course(course_id)
        except RemoteError as e:
            logger.warning(f"Catalog unavailable for course {course_id}, using fallback topics: {e}")
            return build_fallback_course(course_id)

        if course is None:
            logger.info(f"Course {course_id} not in catalog, using fallback course")
            return build_fallback_course(course_id)

        if not course.topics:
            logger.info(f"Course {course_id} has no topics, using fallback topics")
            return course.model_copy(update={"topics": build_fallback_topics()})

        return course
