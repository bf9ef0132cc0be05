"""
Course reader schemas - Pydantic models and state containers.

This module exports all schema classes for:
- Course: topics and page references
- Progress: view state, bookmark, progress payload and their codecs
- Remote: API envelope and per-endpoint payloads
"""

# Course schemas
from .course import (
    Topic,
    Course,
)

# Progress schemas
from .progress import (
    Bookmark,
    ProgressPayload,
    ViewState,
    encode_viewed_pages,
    decode_viewed_pages,
    decode_completed_topics,
    encode_notes,
    decode_notes,
)

# Remote schemas
from .remote import (
    ApiResponse,
    User,
    AuthData,
    CourseData,
    ProgressData,
    BookmarkData,
    NotesData,
)

__all__ = [
    # Course
    'Topic',
    'Course',
    # Progress
    'Bookmark',
    'ProgressPayload',
    'ViewState',
    'encode_viewed_pages',
    'decode_viewed_pages',
    'decode_completed_topics',
    'encode_notes',
    'decode_notes',
    # Remote
    'ApiResponse',
    'User',
    'AuthData',
    'CourseData',
    'ProgressData',
    'BookmarkData',
    'NotesData',
]
