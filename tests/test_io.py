"""Tests for outline.tree.io module."""

import json
from datetime import date, datetime

import pytest

from outline.lib.config import OutlineConfig, StatusLabel
from outline.lib.validate import ValidationError
from outline.tree.io import dump_items, item_from_dict, load_items, load_items_file
from outline.tree.models import NO_LABEL, Progress, StatusState

CONFIG = OutlineConfig(status_labels=[
    StatusLabel("TODO"),
    StatusLabel("DONE", True),
    StatusLabel("CANCELLED", True),
])


class TestStatusImport:

    @pytest.mark.parametrize("raw,expected", [
        ({"text": "t", "status": "TODO"}, StatusState.at(0)),
        ({"text": "t", "status": "CANCELLED"}, StatusState.at(2)),
        ({"text": "t", "status": "status-1"}, StatusState.at(1)),
        ({"text": "t", "status": "none"}, NO_LABEL),
        ({"text": "t", "noLabel": True, "status": "TODO"}, NO_LABEL),
        ({"text": "t"}, StatusState.at(0)),
        ({"text": "t", "completed": True}, StatusState.at(1)),
    ])
    def test_status_forms(self, raw, expected):
        assert item_from_dict(raw, CONFIG).status == expected

    @pytest.mark.parametrize("status", ["MAYBE", "status-7"])
    def test_unknown_status_falls_back(self, status, caplog):
        item = item_from_dict({"id": "q", "text": "t", "status": status}, CONFIG)
        assert item.status == StatusState.at(0)
        assert f"unknown status '{status}'" in caplog.text

    def test_no_labels_configured(self):
        item = item_from_dict({"text": "t", "status": "TODO"}, OutlineConfig(status_labels=[]))
        assert item.status == NO_LABEL


class TestItemImport:

    def test_fields(self):
        item = item_from_dict({
            "id": "a1",
            "text": "Renew passport",
            "editable": False,
            "priority": True,
            "due": "2026-07-01",
            "schedule": "2026-06-20T08:00",
            "assign": "kim",
            "tags": ["admin", "admin", "travel"],
            "comments": [{"text": "Photos ready", "author": "kim", "id": "c1"}],
        }, CONFIG)
        assert item.id == "a1"
        assert item.editable is False
        assert item.priority is True
        assert item.due == date(2026, 7, 1)
        assert item.schedule == datetime(2026, 6, 20, 8, 0)
        assert item.assignee == "kim"
        assert item.tags == ["admin", "travel"]
        assert item.comments[0].id == "c1"

    def test_missing_id_is_generated(self):
        assert item_from_dict({"text": "t"}, CONFIG).id


class TestLoadItems:

    def test_nested_document(self):
        tree, calculator = load_items([
            {"id": "p", "text": "Trip", "status": "TODO", "children": [
                {"id": "c1", "text": "Hotel", "status": "DONE"},
                {"id": "c2", "text": "Train", "status": "TODO"},
                {"id": "h", "text": "Notes", "status": "none"},
            ]},
        ], CONFIG)
        assert tree.children_of("p") == ["c1", "c2", "h"]
        assert tree.get("p").child_progress == Progress(1, 2)
        assert calculator.verify() == []

    def test_collapsed_flag(self):
        tree, _ = load_items([
            {"id": "p", "text": "P", "collapsed": True, "children": [{"id": "c", "text": "C"}]},
            {"id": "leaf", "text": "Leaf", "collapsed": True},
        ], CONFIG)
        assert tree.get("p").collapsed
        assert not tree.get("leaf").collapsed
        assert [i.id for _, i in tree.walk(visible_only=True)] == ["p", "leaf"]
        assert dump_items(tree)[0]["collapsed"] is True

    def test_empty_children_list_has_no_marker(self):
        tree, _ = load_items([{"id": "p", "text": "P", "children": []}], CONFIG)
        assert not tree.has_children("p")

    def test_duplicate_id(self):
        with pytest.raises(ValueError, match="Duplicate"):
            load_items([{"id": "a", "text": "A"}, {"id": "a", "text": "B"}], CONFIG)

    @pytest.mark.parametrize("data", [
        {"text": "not a list"},
        [{"id": "a"}],
        [{"text": "A", "children": [{"text": 3}]}],
        [{"text": "A", "tags": "home"}],
    ])
    def test_invalid_documents(self, data):
        with pytest.raises(ValidationError):
            load_items(data, CONFIG)

    def test_load_file(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([{"id": "a", "text": "A", "status": "DONE"}]))
        tree, _ = load_items_file(path, CONFIG)
        assert tree.is_completed("a")

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="File not found"):
            load_items_file(tmp_path / "nope.json", CONFIG)


class TestDump:

    def test_round_trip(self):
        document = [
            {"id": "p", "text": "Trip", "status": "TODO", "priority": True, "children": [
                {"id": "c", "text": "Hotel", "status": "CANCELLED", "due": "2026-07-01"},
            ]},
            {"id": "h", "text": "Notes", "status": "none"},
        ]
        tree, _ = load_items(document, CONFIG)
        dumped = dump_items(tree)

        assert dumped[0]["status"] == "TODO"
        assert dumped[0]["completed"] is False
        assert dumped[0]["priority"] is True
        assert dumped[0]["progress"] == {"done": 1, "total": 1}
        child = dumped[0]["children"][0]
        assert child["status"] == "CANCELLED"
        assert child["completed"] is True
        assert child["due"] == "2026-07-01"
        assert "children" not in child
        assert dumped[1]["noLabel"] is True

        again, _ = load_items(dumped, CONFIG)
        assert dump_items(again) == dumped
