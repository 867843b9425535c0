#!/usr/bin/env python3
"""Outline CLI entrypoint."""

import sys
import logging
import argparse
from pathlib import Path
from typing import Any

import yaml

from outline.lib import validate
from outline.lib.config import load_config
from outline.lib.types import ItemNotFound, UnknownOperation
from outline.lib.validate import ValidationError
from outline.session import Session
from outline.tree.io import dumps

logger = logging.getLogger(__name__)

# Script keys whose values name items and may use an alias set with `as:`
_ID_PARAMS = ("new_parent_id", "sibling_id")

# Operations whose Outcome names a newly created item
_CREATING_OPS = ("add", "add_after")


def render_tree(session: Session) -> list[str]:
    """Indented text lines for the visible tree. Collapsed subtrees are hidden."""
    lines = []
    for depth, item in session.walk(visible_only=True):
        label = session.tree.label_for(item)
        status = label.label if label else "-"
        line = f"{'  ' * depth}{status:<6} {item.text}"
        if item.child_progress is not None:
            line += f" [{item.child_progress.done}/{item.child_progress.total}]"
        flags = []
        if item.priority:
            flags.append("!")
        if item.blocked:
            flags.append("blocked")
        if item.assignee:
            flags.append(f"@{item.assignee}")
        flags.extend(f"#{t}" for t in item.tags)
        if not item.editable:
            flags.append("locked")
        if item.collapsed:
            flags.append(f"(+{len(session.tree.descendants(item.id))})")
        if flags:
            line += "  " + " ".join(flags)
        lines.append(line)
    return lines


def load_ops(path: Path) -> list[dict]:
    """Load and validate a YAML operation script."""
    if not path.exists():
        raise ValidationError("ops", f"File not found: {path}")
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValidationError("ops", f"Invalid YAML in {path}: {e}") from None
    data = data or []
    validate.validate(data, "ops")
    return data


def apply_ops(session: Session, ops: list[dict]) -> list[Any]:
    """Run each script step through the dispatcher. Returns the Outcomes."""
    aliases: dict[str, str] = {}
    outcomes = []
    for step in ops:
        params = dict(step)
        op = params.pop("op")
        alias = params.pop("as", None)
        item_id = params.pop("id", None)
        item_id = aliases.get(item_id, item_id)
        for key in _ID_PARAMS:
            if key in params:
                params[key] = aliases.get(params[key], params[key])

        outcome = session.dispatch(op, item_id, **params)
        if not outcome.applied:
            logger.info(f"[RUN] {op} on {item_id}: not applied ({outcome.reason})")
        if alias and outcome.applied and op in _CREATING_OPS:
            aliases[alias] = outcome.item_id
        outcomes.append(outcome)
    return outcomes


def _build_session(args) -> Session:
    config = load_config(Path(args.config) if args.config else None)
    items = validate.validate_file(Path(args.items), "items")
    return Session(config, items)


def _print_tree(session: Session, as_json: bool) -> None:
    if as_json:
        print(dumps(session.tree))
    else:
        for line in render_tree(session):
            print(line)


def cmd_show(args) -> int:
    """Print the tree."""
    try:
        session = _build_session(args)
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    _print_tree(session, args.json)

    report = session.check()
    if report["completion_violations"]:
        print(f"\nWarning: completed items with incomplete children: "
              f"{', '.join(report['completion_violations'])}", file=sys.stderr)
    return 0


def cmd_run(args) -> int:
    """Apply an operation script, printing each event as a JSON line."""
    try:
        session = _build_session(args)
        ops = load_ops(Path(args.ops))
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    session.channel.subscribe(lambda event: print(event.to_json()))
    try:
        apply_ops(session, ops)
    except (ItemNotFound, UnknownOperation, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    _print_tree(session, args.json)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(prog='outline', description='Outline engine CLI')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # outline show
    p_show = subparsers.add_parser('show', help='Render an items file')
    p_show.add_argument('items', help='Items JSON file')
    p_show.add_argument('--config', '-c', help='outline.yaml config file')
    p_show.add_argument('--json', action='store_true', help='Print the tree as JSON')
    p_show.set_defaults(func=cmd_show)

    # outline run
    p_run = subparsers.add_parser('run', help='Apply an operation script to an items file')
    p_run.add_argument('items', help='Items JSON file')
    p_run.add_argument('ops', help='Operation script (YAML list of {op, id, ...})')
    p_run.add_argument('--config', '-c', help='outline.yaml config file')
    p_run.add_argument('--json', action='store_true', help='Print the resulting tree as JSON')
    p_run.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
