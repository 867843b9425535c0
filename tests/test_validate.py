"""Tests for outline.lib.validate module."""

import json

import pytest

from outline.lib.validate import ValidationError, validate, validate_file, validator_for


class TestValidate:

    def test_valid_documents_pass(self):
        validate([{"text": "A", "children": [{"text": "B"}]}], "items")
        validate([{"op": "add", "id": None, "text": "x"}], "ops")
        validate({"status_labels": []}, "config")

    def test_nested_error_reports_path(self):
        with pytest.raises(ValidationError) as exc:
            validate([{"text": "A"}, {"text": "B", "children": [{"text": 3}]}], "items")
        assert exc.value.schema_name == "items"
        assert exc.value.path == "1.children.0.text"
        assert "[items]" in str(exc.value)

    def test_root_error_path(self):
        with pytest.raises(ValidationError) as exc:
            validate({"op": "add"}, "ops")
        assert exc.value.path == "(root)"

    def test_unknown_schema(self):
        with pytest.raises(ValidationError, match="Schema file not found"):
            validate({}, "nope")

    def test_validators_are_cached(self):
        assert validator_for("items") is validator_for("items")


class TestValidateFile:

    def test_returns_document(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([{"text": "A"}]))
        assert validate_file(path, "items") == [{"text": "A"}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="File not found"):
            validate_file(tmp_path / "items.json", "items")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text("[{")
        with pytest.raises(ValidationError, match="Invalid JSON"):
            validate_file(path, "items")
