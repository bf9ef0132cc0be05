"""
Course reader viewer - Rendering components for the reader display.

This module provides:
- Progress bar rendering
- Topic list entries with status indicators
- Page counter and course status banners
"""

from .reader import (
    get_reader_css,
    render_progress_bar,
    get_topic_indicator,
    render_topic_entry,
    render_page_counter,
    render_course_complete,
    render_locked_notice,
    TOPIC_INDICATORS,
)

__all__ = [
    "get_reader_css",
    "render_progress_bar",
    "get_topic_indicator",
    "render_topic_entry",
    "render_page_counter",
    "render_course_complete",
    "render_locked_notice",
    "TOPIC_INDICATORS",
]
