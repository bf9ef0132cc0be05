"""
ReaderSession tests: navigation, completion, notes and restoring state.
"""

import threading

import pytest

from conftest import FakeCatalog

from coursereader.classroom import LoginRequired, SyncOutcome, percent, read_json, write_json
from coursereader.schemas import Bookmark, Course


class TestScenarios:
    """End-to-end reading scenarios."""

    def test_fresh_course_without_network(self, make_reader, offline_store):
        reader = make_reader(offline_store)
        course = reader.open("fresh-course")

        assert len(course.topics) == 8
        assert reader.weighted_progress() == 0

        first = reader.active_topic
        reader.go_to_page(first.page_count - 1)

        assert reader.tracker.is_topic_complete(first.id)
        assert reader.weighted_progress() == percent(first.page_count, course.total_pages) == 30
        assert reader.active_topic_index == 0
        assert reader.current_page == first.page_count - 1
        assert not reader.course_completed

    def test_explicit_completion_advances(self, make_reader, offline_store):
        reader = make_reader(offline_store)
        reader.open("fresh-course")
        reader.begin_reading()

        result = reader.mark_topic_complete(reader.active_topic.id)

        assert result.next_topic_index == 1
        assert reader.active_topic_index == 1
        assert reader.active_topic.id == "t2"
        assert reader.current_page == 0
        assert reader.state.bookmark == Bookmark(topic_id="t2", page_index=0)

    def test_last_topic_completion(self, make_reader, offline_store):
        reader = make_reader(offline_store)
        reader.open("fresh-course")
        reader.select_topic(7)

        result = reader.mark_topic_complete()

        assert result.course_completed
        assert reader.course_completed
        assert reader.active_topic_index == 7
        titles = [notice.title for notice in reader.drain_notices()]
        assert "Course Completed" in titles


class TestOpen:
    """Test opening a course."""

    def test_requires_login(self, make_reader, store):
        reader = make_reader(store, user=None)
        with pytest.raises(LoginRequired):
            reader.open("c1")

    def test_queries_before_open(self, make_reader, store):
        reader = make_reader(store)
        assert reader.active_topic is None
        with pytest.raises(RuntimeError):
            reader.next_page()

    def test_restores_bookmark_without_recording_view(self, make_reader, offline_store, cache):
        write_json(cache, "bookmark_fresh-course", {"topicId": "t3", "imageIndex": 4})
        reader = make_reader(offline_store)
        reader.open("fresh-course")

        assert reader.active_topic_index == 2
        assert reader.current_page == 4
        assert reader.state.viewed_pages == {}

        reader.begin_reading()
        assert reader.state.viewed_pages == {"t3": {4}}

    def test_reopen_restores_offline_state(self, make_reader, offline_store, coordinator):
        reader = make_reader(offline_store)
        reader.open("fresh-course")
        reader.begin_reading()
        coordinator.wait(timeout=5)
        reader.next_page()
        coordinator.wait(timeout=5)

        reopened = make_reader(offline_store)
        reopened.open("fresh-course")

        assert reopened.state.viewed_pages == {"t1": {0, 1}}
        assert reopened.current_page == 1
        assert reopened.weighted_progress() == percent(2, 57)

    def test_locked_course(self, make_reader, store, sample_course):
        locked = sample_course.model_copy(update={"user_has_access": False})
        reader = make_reader(store, catalog=FakeCatalog(course=locked))
        reader.open("c1")
        assert reader.is_locked

    def test_unknown_access_is_not_locked(self, make_reader, store, sample_course):
        course = Course(id="c1", topics=sample_course.topics)
        reader = make_reader(store, catalog=FakeCatalog(course=course))
        reader.open("c1")
        assert not reader.is_locked


class TestNavigation:
    """Test page and topic navigation."""

    @pytest.fixture
    def reader(self, make_reader, store, sample_course):
        reader = make_reader(store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        reader.begin_reading()
        return reader

    def test_next_and_previous(self, reader):
        assert reader.next_page() == 1
        assert reader.previous_page() == 0
        assert reader.previous_page() == 0

    def test_go_to_page_clamped(self, reader):
        assert reader.go_to_page(100) == 2
        assert reader.go_to_page(-5) == 0

    def test_page_change_saves_bookmark(self, reader, store, coordinator):
        reader.next_page()
        coordinator.wait(timeout=5)
        assert reader.state.bookmark == Bookmark(topic_id="a", page_index=1)
        assert "post_bookmark" in store.calls

    def test_last_page_auto_completes(self, reader):
        reader.go_to_page(2)
        assert reader.tracker.is_topic_complete("a")
        assert reader.active_topic_index == 0
        titles = [notice.title for notice in reader.drain_notices()]
        assert titles == ["Topic Completed"]
        assert reader.drain_notices() == []

    def test_next_topic_only_from_last_page(self, reader):
        assert not reader.can_go_next_topic
        assert not reader.next_topic()
        reader.go_to_page(2)
        assert reader.can_go_next_topic
        assert reader.next_topic()
        assert reader.active_topic.id == "b"
        assert reader.current_page == 0

    def test_no_next_topic_after_last(self, reader):
        reader.select_topic(2)
        reader.go_to_page(3)
        assert not reader.can_go_next_topic
        assert not reader.next_topic()

    def test_select_topic(self, reader):
        assert reader.select_topic(2)
        assert reader.current_page_url == "c0"
        assert not reader.select_topic(3)
        assert not reader.select_topic(-1)
        assert reader.active_topic.id == "c"

    def test_complete_other_topic(self, reader):
        result = reader.mark_topic_complete("b")
        assert result.next_topic_index == 2
        assert reader.active_topic.id == "c"
        assert reader.tracker.is_topic_complete("b")

    def test_complete_unknown_topic(self, reader):
        assert reader.mark_topic_complete("zzz") is None
        assert reader.active_topic_index == 0

    def test_topic_percents(self, reader):
        reader.next_page()
        assert reader.topic_percents() == {"a": 67, "b": 0, "c": 0}
        assert reader.weighted_progress() == 22


class TestNotes:
    """Test page notes."""

    def test_loads_remote_notes(self, make_reader, store, sample_course):
        store.notes = {"a": {1: "hi", 9: "out of range"}, "gone": {0: "stale"}}
        reader = make_reader(store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        assert reader.state.notes == {"a": {1: "hi"}}

    def test_loads_cached_notes_offline(self, make_reader, offline_store, cache, sample_course):
        write_json(cache, "notes_c1", {"b": {"0": "cached"}})
        reader = make_reader(offline_store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        reader.select_topic(1)
        assert reader.current_note() == "cached"

    def test_update_note_writes_through(self, make_reader, store, cache, sample_course):
        reader = make_reader(store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        assert reader.update_note("first page")
        assert reader.current_note() == "first page"
        assert read_json(cache, "notes_c1") == {"a": {"0": "first page"}}

    def test_update_note_invalid_page(self, make_reader, store, sample_course):
        reader = make_reader(store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        assert not reader.update_note("x", topic_id="a", page_index=7)
        assert not reader.update_note("x", topic_id="zzz", page_index=0)
        assert reader.state.notes == {}

    def test_save_note_remote(self, make_reader, store, sample_course):
        reader = make_reader(store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        reader.update_note("remember this")
        assert reader.save_note().result(timeout=5) is SyncOutcome.REMOTE
        assert store.notes == {"a": {0: "remember this"}}

    def test_save_note_offline(self, make_reader, offline_store, cache, coordinator, sample_course):
        reader = make_reader(offline_store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        reader.update_note("offline note", page_index=2)

        assert reader.save_note(page_index=2).result(timeout=5) is SyncOutcome.LOCAL
        coordinator.close()

        assert read_json(cache, "notes_c1") == {"a": {"2": "offline note"}}
        assert [notice.title for notice in reader.drain_notices()] == ["Saved locally"]

    def test_late_save_failure_keeps_newer_notes(self, make_reader, offline_store, cache, sample_course):
        reader = make_reader(offline_store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        reader.update_note("first", topic_id="a", page_index=0)

        offline_store.gate = threading.Event()
        future = reader.save_note(topic_id="a", page_index=0)
        reader.update_note("second", topic_id="b", page_index=1)
        offline_store.gate.set()

        assert future.result(timeout=5) is SyncOutcome.LOCAL
        assert read_json(cache, "notes_c1") == {"a": {"0": "first"}, "b": {"1": "second"}}

    def test_save_note_does_not_wait_for_remote(self, make_reader, store, sample_course):
        reader = make_reader(store, catalog=FakeCatalog(course=sample_course))
        reader.open("c1")
        reader.update_note("slow network")

        store.gate = threading.Event()
        future = reader.save_note()
        assert not future.done()

        store.gate.set()
        assert future.result(timeout=5) is SyncOutcome.REMOTE
