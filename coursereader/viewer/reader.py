"""
Reader renderer - HTML fragments for the course reader.

Provides:
- Progress bars (overall and per topic)
- Topic list entries with status indicators
- Page counter, completion banner and locked-course notice
"""

import html

from coursereader.schemas import Course, Topic


# Status indicator per topic state
TOPIC_INDICATORS = {
    "completed": "✅",
    "active": "▶️",
    "started": "🔵",
    "new": "⚪",
}


def get_reader_css() -> str:
    """Get CSS styles for reader display."""
    return """
    <style>
    .progress-track {
        background: #eeeeee;
        border-radius: 6px;
        height: 10px;
        overflow: hidden;
        margin: 0.3em 0 0.8em 0;
    }
    .progress-fill {
        background: linear-gradient(90deg, #43A047, #66BB6A);
        height: 100%;
        transition: width 0.3s;
    }
    .progress-label {
        display: flex;
        justify-content: space-between;
        font-size: 0.9em;
        color: #555;
    }
    .topic-entry {
        display: flex;
        align-items: center;
        gap: 0.5em;
        padding: 0.3em 0.4em;
        border-radius: 6px;
    }
    .topic-entry.active {
        background: #e3f2fd;
        font-weight: 600;
    }
    .topic-entry.completed .topic-title {
        color: #388E3C;
    }
    .topic-percent {
        margin-left: auto;
        color: #777;
        font-size: 0.85em;
    }
    .page-counter {
        text-align: center;
        color: #555;
    }
    .course-complete {
        background: #e8f5e9;
        border-left: 4px solid #43A047;
        padding: 1em;
        border-radius: 4px;
        margin: 1em 0;
    }
    .course-locked {
        background: #fff3e0;
        border-left: 4px solid #F57C00;
        padding: 1em;
        border-radius: 4px;
        margin: 1em 0;
    }
    </style>
    """


def render_progress_bar(percent: int, label: str = "Progress") -> str:
    """Render a labelled progress bar. The width is clamped to 0-100."""
    width = max(0, min(100, percent))
    return f"""
    <div class="progress-label"><span>{html.escape(label)}</span><span>{width}%</span></div>
    <div class="progress-track"><div class="progress-fill" style="width: {width}%"></div></div>
    """


def get_topic_indicator(percent: int, is_completed: bool, is_active: bool) -> str:
    if is_completed:
        return TOPIC_INDICATORS["completed"]
    if is_active:
        return TOPIC_INDICATORS["active"]
    if percent > 0:
        return TOPIC_INDICATORS["started"]
    return TOPIC_INDICATORS["new"]


def render_topic_entry(topic: Topic, percent: int, is_completed: bool = False, is_active: bool = False) -> str:
    """Render one row of the topic list."""
    classes = ["topic-entry"]
    if is_active:
        classes.append("active")
    if is_completed:
        classes.append("completed")

    indicator = get_topic_indicator(percent, is_completed, is_active)
    title = html.escape(topic.title or topic.id)
    return (
        f'<div class="{" ".join(classes)}">'
        f'<span>{indicator}</span>'
        f'<span class="topic-title">{title}</span>'
        f'<span class="topic-percent">{percent}%</span>'
        f'</div>'
    )


def render_page_counter(page_index: int, page_count: int) -> str:
    """1-based "Page x of y" label."""
    if page_count <= 0:
        return '<div class="page-counter">No pages</div>'
    return f'<div class="page-counter">Page {page_index + 1} of {page_count}</div>'


def render_course_complete(course: Course) -> str:
    return (
        '<div class="course-complete">'
        f'<strong>Course completed!</strong><br>You have finished every topic of '
        f'{html.escape(course.title or course.id)}.'
        '</div>'
    )


def render_locked_notice(course: Course) -> str:
    """Shown instead of the pages when the user has not purchased the course."""
    price = f" for ₹{course.price:g}" if course.price is not None else ""
    return (
        '<div class="course-locked">'
        f'<strong>{html.escape(course.title or course.id)}</strong> is locked. '
        f'Purchase the course{price} to continue reading.'
        '</div>'
    )
