"""
Progress schemas for the course reader.

Defines the per-user, per-course view state and its persisted forms:
- ViewState: viewed pages, completed topics, notes, bookmark
- Bookmark / ProgressPayload: Pydantic models for stored and remote payloads
- Codecs between in-memory sets and the ordered-array form used on disk/wire
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Bookmark(BaseModel):
    """Last reading position. `imageIndex` is the page index within the topic."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    topic_id: str = Field(..., alias="topicId", min_length=1)
    page_index: int = Field(default=0, alias="imageIndex", ge=0)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ProgressPayload(BaseModel):
    """Body of a progress sync: weighted overall percent and per-topic percents."""
    model_config = ConfigDict(populate_by_name=True)

    overall: int = Field(default=0, ge=0, le=100)
    per_topic: dict[str, int] = Field(default_factory=dict, alias="perTopic")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class ViewState:
    """
    Mutable reading state owned by a single ReaderSession.

    `viewed_pages` uses real sets; conversion to arrays only happens at the
    persistence boundary (see encode_viewed_pages / decode_viewed_pages).
    """
    viewed_pages: dict[str, set[int]] = field(default_factory=dict)
    completed_topics: dict[str, bool] = field(default_factory=dict)
    topic_progress: dict[str, int] = field(default_factory=dict)  # recorded percents
    notes: dict[str, dict[int, str]] = field(default_factory=dict)
    bookmark: Optional[Bookmark] = None

    def viewed_count(self, topic_id: str) -> int:
        return len(self.viewed_pages.get(topic_id, ()))

    def is_completed(self, topic_id: str) -> bool:
        return bool(self.completed_topics.get(topic_id))

    def get_note(self, topic_id: str, page_index: int) -> str:
        return self.notes.get(topic_id, {}).get(page_index, "")


# -----------------------------------------------------------------------------
# Persistence codecs
# -----------------------------------------------------------------------------

def encode_viewed_pages(viewed: Mapping[str, set[int]]) -> dict[str, list[int]]:
    """Convert page sets to sorted index arrays."""
    return {topic_id: sorted(pages) for topic_id, pages in viewed.items()}


def decode_viewed_pages(
    data: Any,
    page_counts: Optional[Mapping[str, int]] = None,
) -> dict[str, set[int]]:
    """
    Convert stored index arrays back to sets.

    Non-integer and negative entries are dropped. When `page_counts` is
    given, entries for unknown topics and indices past the topic's last page
    are dropped too.
    """
    if not isinstance(data, dict):
        return {}

    result: dict[str, set[int]] = {}
    for topic_id, indices in data.items():
        if not isinstance(indices, (list, tuple)):
            continue
        if page_counts is not None and topic_id not in page_counts:
            continue
        limit = page_counts[topic_id] if page_counts is not None else None
        pages = {
            idx for idx in indices
            if isinstance(idx, int) and not isinstance(idx, bool)
            and idx >= 0 and (limit is None or idx < limit)
        }
        result[str(topic_id)] = pages
    return result


def decode_completed_topics(data: Any) -> dict[str, bool]:
    if not isinstance(data, dict):
        return {}
    return {str(k): bool(v) for k, v in data.items()}


def encode_notes(notes: Mapping[str, Mapping[int, str]]) -> dict[str, dict[str, str]]:
    """JSON objects only have string keys; page indices are stringified."""
    return {
        topic_id: {str(idx): text for idx, text in sorted(pages.items())}
        for topic_id, pages in notes.items()
    }


def decode_notes(data: Any) -> dict[str, dict[int, str]]:
    if not isinstance(data, dict):
        return {}

    result: dict[str, dict[int, str]] = {}
    for topic_id, pages in data.items():
        if not isinstance(pages, dict):
            continue
        cells: dict[int, str] = {}
        for raw_idx, text in pages.items():
            try:
                idx = int(raw_idx)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring note with invalid page index {raw_idx!r} in topic {topic_id}")
                continue
            if idx < 0 or not isinstance(text, str):
                continue
            cells[idx] = text
        result[str(topic_id)] = cells
    return result
