"""Tests for outline.workflow.metadata module."""

from datetime import date, datetime

import pytest


@pytest.fixture
def session(make_session):
    return make_session(
        [{"id": "x", "text": "Pay rent", "status": "TODO", "tags": ["home"]}],
        current_user="sam",
    )


class TestDates:

    def test_set_due_from_string(self, session):
        outcome = session.metadata.set_due("x", "2026-05-01")
        assert outcome.applied
        assert session.get("x").due == date(2026, 5, 1)
        event = session.channel.last()
        assert event.name == "item:due"
        assert event.payload == {"id": "x", "timestamp": "2026-05-01"}

    def test_clear_due(self, session):
        session.metadata.set_due("x", date(2026, 5, 1))
        session.metadata.set_due("x", None)
        assert session.get("x").due is None
        assert session.channel.last().payload == {"id": "x", "timestamp": None}

    def test_schedule_now(self, session):
        session.metadata.schedule_now("x")
        scheduled = session.get("x").schedule
        assert isinstance(scheduled, datetime)
        assert scheduled.second == 0
        assert session.channel.last().name == "item:schedule"


class TestAssigneeAndTags:

    def test_assignee(self, session):
        session.metadata.set_assignee("x", " alex ")
        assert session.get("x").assignee == "alex"
        session.metadata.set_assignee("x", "")
        assert session.get("x").assignee is None
        assert session.channel.last().payload == {"id": "x", "assignee": None}

    def test_set_tags_dedupes(self, session):
        session.metadata.set_tags("x", ["#work", "work", " urgent ", ""])
        assert session.get("x").tags == ["work", "urgent"]
        assert session.channel.last().payload == {"id": "x", "tags": ["work", "urgent"]}

    def test_toggle_tag(self, session):
        session.metadata.toggle_tag("x", "errand", True)
        assert session.get("x").tags == ["home", "errand"]
        session.metadata.toggle_tag("x", "home", False)
        assert session.get("x").tags == ["errand"]

    def test_set_tags_from_comma_string(self, session):
        session.dispatch("set_tags", "x", tags="work, #urgent,,work")
        assert session.get("x").tags == ["work", "urgent"]

    def test_toggle_tag_normalizes_input(self, session):
        session.metadata.toggle_tag("x", " #errand ", True)
        assert session.get("x").tags == ["home", "errand"]
        session.metadata.toggle_tag("x", "#home", False)
        assert session.get("x").tags == ["errand"]

    def test_toggle_blank_tag_is_noop(self, session):
        outcome = session.metadata.toggle_tag("x", " # ", True)
        assert not outcome.applied
        assert outcome.reason == "empty-text"
        assert session.get("x").tags == ["home"]
        assert session.channel.log == []

    def test_add_existing_tag_is_noop(self, session):
        outcome = session.metadata.add_tag("x", "#home")
        assert not outcome.applied
        assert session.channel.log == []


class TestFlags:

    def test_toggle_priority(self, session):
        session.metadata.toggle_priority("x")
        assert session.get("x").priority is True
        assert session.channel.last().payload == {"id": "x", "priority": True}
        session.metadata.toggle_priority("x")
        assert session.get("x").priority is False

    def test_toggle_blocked(self, session):
        session.metadata.toggle_blocked("x")
        assert session.get("x").blocked is True
        assert session.channel.last().name == "item:blocked"

    def test_flags_do_not_touch_status(self, session):
        session.metadata.toggle_blocked("x")
        assert not session.tree.is_completed("x")
        assert session.check()["stale_progress"] == []


class TestEntries:

    def test_comment_author_is_current_user(self, session):
        outcome = session.metadata.add_comment("x", "  Paid by transfer ")
        entry = outcome.details["entry"]
        assert entry.text == "Paid by transfer"
        assert entry.author == "sam"
        assert session.get("x").comments == [entry]
        event = session.channel.last()
        assert event.name == "item:comment"
        assert event.payload["comment"]["id"] == entry.id

    def test_worklog_is_append_only(self, session):
        session.metadata.add_worklog("x", "30m")
        session.metadata.add_worklog("x", "1h")
        assert [e.text for e in session.get("x").worklog] == ["30m", "1h"]
        assert session.channel.last().payload["worklogEntry"]["text"] == "1h"

    def test_empty_comment_is_noop(self, session):
        outcome = session.metadata.add_comment("x", "   ")
        assert outcome.reason == "empty-text"
        assert session.get("x").comments == []
        assert session.channel.log == []


class TestTextEdit:

    def test_save_trims(self, session):
        session.metadata.begin_edit("x")
        outcome = session.metadata.save_edit("x", "  Pay rent and water  ")
        assert outcome.applied
        assert session.get("x").text == "Pay rent and water"
        assert session.channel.names() == ["item:edit:start", "item:edit:save"]
        assert session.channel.last().payload == {
            "id": "x", "originalText": "Pay rent", "newText": "Pay rent and water",
        }

    @pytest.mark.parametrize("text", ["", "   ", "Pay rent"])
    def test_blank_or_unchanged_cancels(self, session, text):
        outcome = session.metadata.save_edit("x", text)
        assert not outcome.applied
        assert session.get("x").text == "Pay rent"
        assert session.channel.names() == ["item:edit:cancel"]

    def test_cancel(self, session):
        session.metadata.cancel_edit("x")
        assert session.channel.last().payload == {"id": "x"}
