"""
Course Reader - Paginated e-learning course viewer

Streamlit application for reading image-based courses with per-page
progress tracking, auto-completion of topics, bookmarks and page notes.

Usage:
    streamlit run app.py
    # open a specific course: http://localhost:8501/?course=<course id>
"""

import logging

import streamlit as st

from coursereader.classroom import (
    ContentResolver,
    LoginRequired,
    ReaderSession,
    SQLiteCache,
    SyncCoordinator,
)
from coursereader.clients import (
    ApiClient,
    AuthClient,
    CatalogClient,
    ProgressStoreClient,
    RemoteError,
)
from coursereader.config import load_settings
from coursereader.viewer import (
    get_reader_css,
    render_course_complete,
    render_locked_notice,
    render_page_counter,
    render_progress_bar,
    render_topic_entry,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("coursereader.app")

st.set_page_config(
    page_title="Course Reader",
    page_icon="📘",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "reader" not in st.session_state:
        api = ApiClient(settings.api_base_url, timeout=settings.request_timeout)
        cache = SQLiteCache(settings.cache_path)
        st.session_state.auth = AuthClient(api)
        st.session_state.coordinator = SyncCoordinator(cache, max_workers=settings.sync_workers)
        st.session_state.reader = ReaderSession(
            auth=st.session_state.auth,
            resolver=ContentResolver(CatalogClient(api)),
            store=ProgressStoreClient(api),
            cache=cache,
            coordinator=st.session_state.coordinator,
        )

    if "course_id" not in st.session_state:
        st.session_state.course_id = st.query_params.get("course", settings.course_id)


def open_course() -> bool:
    """Open the requested course once per browser session."""
    reader = st.session_state.reader
    if reader.course is not None and reader.course.id == st.session_state.course_id:
        return True

    try:
        reader.open(st.session_state.course_id)
    except LoginRequired:
        return False

    if not reader.is_locked:
        reader.begin_reading()
    return True


def image_src(page: str) -> str:
    """Absolute URL for a page reference (catalog urls are used as-is)."""
    if page.startswith(("http://", "https://")):
        return page
    return f"{settings.asset_base_url}/{page.lstrip('/')}"


# -----------------------------------------------------------------------------
# Login
# -----------------------------------------------------------------------------

def render_login():
    """Render the sign-in form shown when no session is active."""
    st.title("📘 Course Reader")
    st.info("Please sign in to continue reading.")

    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        try:
            st.session_state.auth.login(email, password)
        except RemoteError as e:
            logger.info(f"Sign-in failed for {email}: {e}")
            st.error("Sign-in failed. Check your email and password.")
            return
        st.rerun()


# -----------------------------------------------------------------------------
# Sidebar: Topic List
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with overall progress and the topic list."""
    reader = st.session_state.reader
    course = reader.course

    st.sidebar.title(f"📘 {course.title or course.id}")
    st.sidebar.markdown(get_reader_css(), unsafe_allow_html=True)
    st.sidebar.markdown(
        render_progress_bar(reader.weighted_progress(), "Course progress"),
        unsafe_allow_html=True,
    )

    st.sidebar.divider()
    st.sidebar.subheader("Topics")

    percents = reader.topic_percents()
    for idx, topic in enumerate(course.topics):
        col1, col2 = st.sidebar.columns([7, 3])
        with col1:
            st.markdown(
                render_topic_entry(
                    topic,
                    percents.get(topic.id, 0),
                    is_completed=reader.tracker.is_topic_complete(topic.id),
                    is_active=idx == reader.active_topic_index,
                ),
                unsafe_allow_html=True,
            )
        with col2:
            if st.button("Open", key=f"topic_{topic.id}", disabled=reader.is_locked, use_container_width=True):
                reader.select_topic(idx)
                st.rerun()

    st.sidebar.divider()
    if st.sidebar.button("Sign out"):
        st.session_state.auth.logout()
        st.session_state.coordinator.close(wait=False)
        st.session_state.clear()
        st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Page View
# -----------------------------------------------------------------------------

def render_page_view():
    """Render the current page with navigation, completion and notes."""
    reader = st.session_state.reader
    course = reader.course
    topic = reader.active_topic

    st.markdown(get_reader_css(), unsafe_allow_html=True)

    if reader.is_locked:
        st.markdown(render_locked_notice(course), unsafe_allow_html=True)
        return

    if reader.course_completed:
        st.markdown(render_course_complete(course), unsafe_allow_html=True)

    st.header(topic.title or topic.id)
    render_navigation_bar()

    url = reader.current_page_url
    if url:
        st.image(image_src(url), use_container_width=True)

    render_completion_section()
    render_notes_section()


def render_navigation_bar():
    """Render navigation bar with prev/next buttons."""
    reader = st.session_state.reader

    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        if st.button("← Previous", disabled=reader.current_page == 0, use_container_width=True):
            reader.previous_page()
            st.rerun()

    with col2:
        st.markdown(render_page_counter(reader.current_page, reader.page_count), unsafe_allow_html=True)

    with col3:
        if reader.can_go_next_topic:
            if st.button("Next topic →", use_container_width=True):
                reader.next_topic()
                st.rerun()
        elif st.button("Next →", disabled=reader.is_last_page, use_container_width=True):
            reader.next_page()
            st.rerun()


def render_completion_section():
    """Render topic completion section."""
    reader = st.session_state.reader
    topic = reader.active_topic

    st.divider()

    if reader.tracker.is_topic_complete(topic.id):
        st.success("Topic completed!")
    if st.button("Mark topic as complete", type="primary", use_container_width=True):
        reader.mark_topic_complete()
        st.rerun()


def render_notes_section():
    """Render the note editor for the current page."""
    reader = st.session_state.reader
    topic = reader.active_topic
    key = f"note_{topic.id}_{reader.current_page}"

    st.subheader("Notes")
    text = st.text_area(
        "Notes for this page",
        value=reader.current_note(),
        key=key,
        label_visibility="collapsed",
        placeholder="Write a note for this page...",
    )
    if text != reader.current_note():
        reader.update_note(text)

    if st.button("Save note"):
        reader.save_note()
        st.toast("Saving note...")


def show_notices():
    """Surface pending reader notices as toasts."""
    for notice in st.session_state.reader.drain_notices():
        st.toast(f"**{notice.title}** - {notice.message}")


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()

    if not open_course():
        render_login()
        return

    render_sidebar()
    render_page_view()
    show_notices()


if __name__ == "__main__":
    main()
