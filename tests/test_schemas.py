"""
Schema validation tests for the course reader.

Tests the Pydantic models and persistence codecs.
"""

import pytest
from pydantic import ValidationError

from coursereader.schemas import (
    # Course
    Topic,
    Course,
    # Progress
    Bookmark,
    ProgressPayload,
    ViewState,
    encode_viewed_pages,
    decode_viewed_pages,
    decode_completed_topics,
    encode_notes,
    decode_notes,
    # Remote
    ApiResponse,
    User,
    AuthData,
    CourseData,
    ProgressData,
    BookmarkData,
    NotesData,
)


class TestCourseSchemas:
    """Test course structure models."""

    def test_topic_from_wire(self):
        topic = Topic.model_validate({"_id": "t1", "title": "Intro", "images": ["/p/1.jpeg", "/p/2.jpeg"]})
        assert topic.id == "t1"
        assert topic.page_count == 2
        assert topic.last_page_index == 1
        assert topic.page_range() == {0, 1}

    def test_topic_contains_page(self):
        topic = Topic(id="t1", pages=("a", "b", "c"))
        assert topic.contains_page(0)
        assert topic.contains_page(2)
        assert not topic.contains_page(3)
        assert not topic.contains_page(-1)

    def test_empty_topic(self):
        topic = Topic(id="t1")
        assert topic.page_count == 0
        assert topic.last_page_index == -1
        assert topic.page_range() == set()

    def test_topic_requires_id(self):
        with pytest.raises(ValidationError):
            Topic(id="")

    def test_course_lookup(self, sample_course):
        assert sample_course.total_pages == 9
        assert sample_course.topic_index("b") == 1
        assert sample_course.topic_index("missing") is None
        assert sample_course.get_topic("c").page_count == 4
        assert sample_course.get_topic("missing") is None
        assert sample_course.page_counts() == {"a": 3, "b": 2, "c": 4}

    def test_course_from_wire(self):
        course = Course.model_validate({
            "_id": "c9",
            "title": "Charts",
            "price": 1499,
            "userHasAccess": False,
            "topics": [{"_id": "t1", "images": ["x"]}],
        })
        assert course.user_has_access is False
        assert course.price == 1499
        assert course.topics[0].pages == ("x",)

    def test_course_is_frozen(self, sample_course):
        with pytest.raises(ValidationError):
            sample_course.title = "Changed"


class TestProgressSchemas:
    """Test bookmark, progress payload and view state."""

    def test_bookmark_wire_format(self):
        bookmark = Bookmark.model_validate({"topicId": "t3", "imageIndex": 4})
        assert bookmark.topic_id == "t3"
        assert bookmark.page_index == 4
        assert bookmark.to_wire() == {"topicId": "t3", "imageIndex": 4}

    def test_bookmark_rejects_negative_page(self):
        with pytest.raises(ValidationError):
            Bookmark(topic_id="t1", page_index=-1)

    def test_bookmark_rejects_empty_topic(self):
        with pytest.raises(ValidationError):
            Bookmark(topic_id="", page_index=0)

    def test_progress_payload_wire_format(self):
        payload = ProgressPayload(overall=30, per_topic={"t1": 100})
        assert payload.to_wire() == {"overall": 30, "perTopic": {"t1": 100}}

    def test_progress_payload_range(self):
        with pytest.raises(ValidationError):
            ProgressPayload(overall=101)

    def test_view_state_defaults(self):
        state = ViewState()
        assert state.viewed_count("t1") == 0
        assert not state.is_completed("t1")
        assert state.get_note("t1", 0) == ""
        assert state.bookmark is None

    def test_view_state_queries(self):
        state = ViewState(
            viewed_pages={"t1": {0, 2}},
            completed_topics={"t1": True},
            notes={"t1": {2: "remember"}},
        )
        assert state.viewed_count("t1") == 2
        assert state.is_completed("t1")
        assert state.get_note("t1", 2) == "remember"


class TestCodecs:
    """Test conversion between page sets and persisted arrays."""

    def test_encode_viewed_pages_sorted(self):
        assert encode_viewed_pages({"t1": {5, 0, 2}}) == {"t1": [0, 2, 5]}

    def test_decode_viewed_pages(self):
        assert decode_viewed_pages({"t1": [2, 0, 2]}) == {"t1": {0, 2}}

    def test_decode_viewed_pages_drops_invalid_entries(self):
        data = {"t1": [0, -1, "3", True, 1.5, 1], "t2": "nope"}
        assert decode_viewed_pages(data) == {"t1": {0, 1}}

    def test_decode_viewed_pages_with_page_counts(self):
        data = {"t1": [0, 1, 7], "gone": [0]}
        assert decode_viewed_pages(data, {"t1": 2}) == {"t1": {0, 1}}

    def test_decode_viewed_pages_non_dict(self):
        assert decode_viewed_pages(None) == {}
        assert decode_viewed_pages([1, 2]) == {}

    def test_decode_completed_topics(self):
        assert decode_completed_topics({"t1": True, "t2": 0}) == {"t1": True, "t2": False}
        assert decode_completed_topics("bad") == {}

    def test_encode_notes_stringifies_indices(self):
        assert encode_notes({"t1": {3: "c", 1: "a"}}) == {"t1": {"1": "a", "3": "c"}}

    def test_decode_notes(self):
        data = {"t1": {"1": "a", "x": "bad", "-2": "neg", "4": 5}, "t2": "nope"}
        assert decode_notes(data) == {"t1": {1: "a"}}


class TestRemoteSchemas:
    """Test API envelope and per-endpoint payloads."""

    def test_envelope_defaults(self):
        envelope = ApiResponse.model_validate({"success": True})
        assert envelope.data is None
        assert envelope.message == ""

    def test_user_aliases(self):
        user = User.model_validate({"_id": "u1", "email": "a@b.c", "profileCompleted": True})
        assert user.id == "u1"
        assert user.profile_completed
        assert user.role == "student"

    def test_auth_data(self):
        auth = AuthData.model_validate({"user": {"_id": "u1"}, "token": "abc"})
        assert auth.user.id == "u1"
        assert auth.token == "abc"

    def test_course_data_null_course(self):
        assert CourseData.model_validate({"course": None}).course is None

    def test_progress_data(self):
        data = ProgressData.model_validate({"progress": {"t1": 42.5}})
        assert data.progress == {"t1": 42.5}

    def test_progress_data_rejects_non_finite(self):
        with pytest.raises(ValidationError):
            ProgressData.model_validate({"progress": {"t1": float("nan")}})
        with pytest.raises(ValidationError):
            ProgressData.model_validate({"progress": {"t1": float("inf")}})

    def test_bookmark_data(self):
        data = BookmarkData.model_validate({"bookmark": {"topicId": "t2", "imageIndex": 1}})
        assert data.bookmark == Bookmark(topic_id="t2", page_index=1)
        assert BookmarkData.model_validate({}).bookmark is None

    def test_notes_data_page_keys(self):
        data = NotesData.model_validate({"notes": {"t1": {"2": "hello"}}})
        assert data.notes == {"t1": {2: "hello"}}
