"""
Configuration loaders for the outline engine.

Loads the status label list, assignee and tag vocabularies, the current user
and the feature gates from outline.yaml (or a plain mapping). Configuration
is supplied once, when a Session is built.

Features gate UI affordances only. The engine itself runs every operation
regardless of the gates; the renderer consults them to decide which buttons
and shortcuts to offer.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from outline.lib import validate
from outline.lib.constants import (
    DEFAULT_CURRENT_USER,
    DEFAULT_STATUS_LABELS,
    FEATURE_NAMES,
)

logger = logging.getLogger(__name__)

# camelCase keys accepted from widget-style configs
_FEATURE_ALIASES = {
    "addButton": "add_button",
    "dragAndDrop": "drag_and_drop",
}


@dataclass(frozen=True)
class StatusLabel:
    """One configured workflow status. Position in the list is significant."""
    label: str
    is_end_state: bool = False


@dataclass
class Features:
    """UI feature gates. All enabled by default."""
    priority: bool = True
    blocked: bool = True
    due: bool = True
    schedule: bool = True
    assign: bool = True
    tags: bool = True
    comments: bool = True
    worklog: bool = True
    archive: bool = True
    add_button: bool = True
    navigation: bool = True
    reorder: bool = True
    drag_and_drop: bool = True

    def enabled(self) -> list[str]:
        """Names of enabled features, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name)]


def _default_labels() -> list[StatusLabel]:
    return [StatusLabel(d["label"], d["is_end_state"]) for d in DEFAULT_STATUS_LABELS]


@dataclass
class OutlineConfig:
    """Engine configuration."""
    status_labels: list[StatusLabel] = field(default_factory=_default_labels)
    assignees: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    current_user: str = DEFAULT_CURRENT_USER
    features: Features = field(default_factory=Features)

    def label_index(self, label: str) -> int | None:
        """Index of the first status label with this text, or None."""
        for i, status in enumerate(self.status_labels):
            if status.label == label:
                return i
        return None


def split_names(value: Any) -> list[str]:
    """Accept either a list of names or a comma-separated string."""
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return [str(v) for v in value]


def _parse_features(raw: Mapping[str, Any]) -> Features:
    features = Features()
    for key, value in raw.items():
        name = _FEATURE_ALIASES.get(key, key)
        if name not in FEATURE_NAMES:
            logger.warning(f"[CONFIG] Unknown feature '{key}', ignoring")
            continue
        setattr(features, name, bool(value))
    return features


def config_from_dict(data: Optional[Mapping[str, Any]]) -> OutlineConfig:
    """Build OutlineConfig from a mapping, validating it first.

    Missing sections fall back to defaults.

    Raises:
        ValidationError: If the mapping doesn't match the config schema
    """
    if not data:
        return OutlineConfig()

    validate.validate(data, "config")

    config = OutlineConfig()
    if "status_labels" in data:
        config.status_labels = [
            StatusLabel(entry["label"], bool(entry.get("is_end_state", entry.get("isEndState", False))))
            for entry in data["status_labels"]
        ]
    if "assignees" in data:
        config.assignees = split_names(data["assignees"])
    if "tags" in data:
        config.tags = split_names(data["tags"])
    if "current_user" in data:
        config.current_user = data["current_user"]
    if "features" in data:
        config.features = _parse_features(data["features"])
    return config


def load_config(config_path: Optional[Path]) -> OutlineConfig:
    """Load outline.yaml and return OutlineConfig.

    If config_path is None or the file doesn't exist, returns defaults.

    Raises:
        ValidationError: If the file is not valid YAML or fails the schema
    """
    if config_path is None or not config_path.exists():
        return OutlineConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise validate.ValidationError("config", f"Invalid YAML in {config_path}: {e}") from None

    config = config_from_dict(data)
    logger.debug(
        f"[CONFIG] Loaded {config_path}: {len(config.status_labels)} status labels, "
        f"features={config.features.enabled()}"
    )
    return config
