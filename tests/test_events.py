"""Tests for outline.events module."""

import json

from outline.events import EventChannel


class TestEventChannel:

    def test_emit_logs_and_returns_event(self):
        channel = EventChannel()
        event = channel.emit("item:add", id="a", text="A", parentId=None)
        assert channel.log == [event]
        assert event.payload == {"id": "a", "text": "A", "parentId": None}
        assert event.timestamp

    def test_subscribe_all_and_by_name(self):
        channel = EventChannel()
        everything, archives = [], []
        channel.subscribe(everything.append)
        channel.subscribe(archives.append, name="item:archive")
        channel.emit("item:add", id="a")
        channel.emit("item:archive", id="a", text="A")
        assert [e.name for e in everything] == ["item:add", "item:archive"]
        assert [e.name for e in archives] == ["item:archive"]

    def test_unsubscribe(self):
        channel = EventChannel()
        seen = []
        unsubscribe = channel.subscribe(seen.append)
        channel.emit("item:tags", id="a", tags=[])
        unsubscribe()
        unsubscribe()
        channel.emit("item:tags", id="a", tags=["x"])
        assert len(seen) == 1

    def test_permission_denied(self, caplog):
        channel = EventChannel()
        event = channel.permission_denied("a", "archive")
        assert event.name == "item:permission-denied"
        assert event.payload == {"id": "a", "action": "archive"}
        assert "archive rejected" in caplog.text

    def test_last_and_names(self):
        channel = EventChannel()
        assert channel.last() is None
        channel.emit("item:add", id="a")
        channel.emit("item:status", id="a", to="status-1")
        channel.emit("item:add", id="b")
        assert channel.names() == ["item:add", "item:status", "item:add"]
        assert channel.last("item:status").payload["to"] == "status-1"
        assert channel.last().payload["id"] == "b"
        channel.clear()
        assert channel.log == []

    def test_keep_log_off(self):
        channel = EventChannel(keep_log=False)
        seen = []
        channel.subscribe(seen.append)
        channel.emit("item:add", id="a")
        assert channel.log == []
        assert len(seen) == 1

    def test_to_json(self):
        event = EventChannel().emit("item:move", id="a", **{"from": 0}, to=2)
        assert json.loads(event.to_json()) == {"event": "item:move", "id": "a", "from": 0, "to": 2}
