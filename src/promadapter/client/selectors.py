"""
Helpers for composing Prometheus series selectors and label matchers.

    match_series("", name_matches("^container_.*"), label_neq("namespace", ""))
    -> '{__name__=~"^container_.*",namespace!=""}'
"""

from __future__ import annotations

from promadapter.client.models import Selector


def quote(value: str) -> str:
    """Double-quote a label value the way PromQL string literals expect."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _matcher(label: str, op: str, value: str) -> str:
    return f"{label}{op}{quote(value)}"


def label_eq(label: str, value: str) -> str:
    """``label="value"``"""
    return _matcher(label, "=", value)


def label_neq(label: str, value: str) -> str:
    """``label!="value"``"""
    return _matcher(label, "!=", value)


def label_matches(label: str, expr: str) -> str:
    """``label=~"expr"``"""
    return _matcher(label, "=~", expr)


def label_not_matches(label: str, expr: str) -> str:
    """``label!~"expr"``"""
    return _matcher(label, "!~", expr)


def name_matches(expr: str) -> str:
    return label_matches("__name__", expr)


def name_not_matches(expr: str) -> str:
    return label_not_matches("__name__", expr)


def match_series(name: str, *label_exprs: str) -> Selector:
    """Build a series selector from an optional metric name and matchers."""
    if not label_exprs:
        return name
    return f"{name}{{{','.join(label_exprs)}}}"
