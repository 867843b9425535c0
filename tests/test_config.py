"""Tests for outline.lib.config module."""

import pytest

from outline.lib.config import (
    Features,
    OutlineConfig,
    StatusLabel,
    config_from_dict,
    load_config,
)
from outline.lib.validate import ValidationError


class TestDefaults:

    def test_default_config(self):
        config = OutlineConfig()
        assert config.status_labels == [StatusLabel("TODO"), StatusLabel("DONE", True)]
        assert config.current_user == "current-user"
        assert config.assignees == []
        assert len(config.features.enabled()) == 13

    def test_empty_mapping_gives_defaults(self):
        assert config_from_dict({}) == OutlineConfig()
        assert config_from_dict(None) == OutlineConfig()

    def test_label_index(self):
        config = OutlineConfig()
        assert config.label_index("DONE") == 1
        assert config.label_index("MAYBE") is None


class TestConfigFromDict:

    def test_status_labels(self):
        config = config_from_dict({"status_labels": [
            {"label": "OPEN"},
            {"label": "CLOSED", "is_end_state": True},
            {"label": "CANCELLED", "isEndState": True},
        ]})
        assert config.status_labels == [
            StatusLabel("OPEN"),
            StatusLabel("CLOSED", True),
            StatusLabel("CANCELLED", True),
        ]

    def test_empty_label_list_is_kept(self):
        assert config_from_dict({"status_labels": []}).status_labels == []

    def test_comma_separated_names(self):
        config = config_from_dict({"assignees": "alex, sam ,, kim", "tags": ["home", "work"]})
        assert config.assignees == ["alex", "sam", "kim"]
        assert config.tags == ["home", "work"]

    def test_feature_aliases(self):
        config = config_from_dict({"features": {"dragAndDrop": False, "addButton": False, "tags": False}})
        assert config.features.drag_and_drop is False
        assert config.features.add_button is False
        assert config.features.tags is False
        assert config.features.priority is True

    def test_unknown_feature_ignored_with_warning(self, caplog):
        config = config_from_dict({"features": {"teleport": True}})
        assert config.features == Features()
        assert "Unknown feature 'teleport'" in caplog.text

    @pytest.mark.parametrize("data", [
        {"status_labels": [{"is_end_state": True}]},
        {"status_labels": [{"label": ""}]},
        {"current_user": 7},
        {"features": {"tags": "yes"}},
        {"colour": "blue"},
    ])
    def test_invalid_config_raises(self, data):
        with pytest.raises(ValidationError) as exc:
            config_from_dict(data)
        assert exc.value.schema_name == "config"


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "outline.yaml") == OutlineConfig()
        assert load_config(None) == OutlineConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "outline.yaml"
        path.write_text(
            "status_labels:\n"
            "  - label: TODO\n"
            "  - label: DOING\n"
            "  - label: DONE\n"
            "    is_end_state: true\n"
            "current_user: sam\n"
            "features:\n"
            "  archive: false\n"
        )
        config = load_config(path)
        assert [s.label for s in config.status_labels] == ["TODO", "DOING", "DONE"]
        assert config.status_labels[2].is_end_state
        assert config.current_user == "sam"
        assert config.features.archive is False

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "outline.yaml"
        path.write_text("status_labels: [unclosed\n")
        with pytest.raises(ValidationError, match="Invalid YAML"):
            load_config(path)
