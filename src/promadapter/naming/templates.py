"""
Label and query templates.

Templates are plain text with ``<<.Field>>`` placeholders.  The ``<<``/``>>``
delimiters keep them clear of PromQL's own braces.  Only a fixed set of
fields is available to each kind of template, and every placeholder is
checked when the template is compiled, so rendering never fails on a
misspelled name.  Mapping fields are read through a key, so
``<<.LabelValuesByName.pod>>`` renders the values matched for ``pod``.

    >>> t = Template("metrics-query", "sum(<<.Series>>{<<.LabelMatchers>>}) by (<<.GroupBy>>)", QUERY_TEMPLATE_FIELDS)
    >>> t.render({"Series": "up", "LabelMatchers": 'pod="a"', "GroupBy": "pod", "GroupBySlice": ["pod"]})
    'sum(up{pod="a"}) by (pod)'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from promadapter.core.errors import TemplateError

LEFT_DELIM = "<<"
RIGHT_DELIM = ">>"

LABEL_TEMPLATE_FIELDS = frozenset({"Group", "Resource"})
QUERY_TEMPLATE_FIELDS = frozenset({"Series", "LabelMatchers", "LabelValuesByName", "GroupBy", "GroupBySlice"})

# fields holding a mapping; they are only rendered through a key, as <<.Field.key>>
KEYED_FIELDS = frozenset({"LabelValuesByName"})

_FIELD_RE = re.compile(r"^\.([A-Za-z_][A-Za-z0-9_]*)(?:\.([A-Za-z_][A-Za-z0-9_]*))?$")


@dataclass(frozen=True)
class _Placeholder:
    field: str
    key: str | None = None


class Template:
    """A compiled ``<<.Field>>`` template restricted to ``allowed_fields``."""

    def __init__(self, name: str, text: str, allowed_fields: Iterable[str]) -> None:
        self.name = name
        self.text = text
        self.allowed_fields = frozenset(allowed_fields)
        self._parts = self._parse(text)

    def _parse(self, text: str) -> list[str | _Placeholder]:
        parts: list[str | _Placeholder] = []
        pos = 0
        while True:
            start = text.find(LEFT_DELIM, pos)
            if start < 0:
                break
            end = text.find(RIGHT_DELIM, start + len(LEFT_DELIM))
            if end < 0:
                raise TemplateError(
                    f"template {self.name!r}: unclosed action at offset {start}",
                    details={"template": text},
                )
            if start > pos:
                parts.append(text[pos:start])

            action = text[start + len(LEFT_DELIM):end].strip()
            match = _FIELD_RE.match(action)
            if match is None:
                raise TemplateError(
                    f"template {self.name!r}: unsupported action {action!r}, expected <<.Field>>",
                    details={"template": text},
                )
            field = match.group(1)
            if field not in self.allowed_fields:
                raise TemplateError(
                    f"template {self.name!r}: unknown placeholder .{field} "
                    f"(available: {', '.join(sorted(self.allowed_fields))})",
                    details={"template": text},
                )
            key = match.group(2)
            if field in KEYED_FIELDS and key is None:
                raise TemplateError(
                    f"template {self.name!r}: placeholder .{field} needs a label key, as <<.{field}.pod>>",
                    details={"template": text},
                )
            if field not in KEYED_FIELDS and key is not None:
                raise TemplateError(
                    f"template {self.name!r}: placeholder .{field} does not take a key",
                    details={"template": text},
                )
            parts.append(_Placeholder(field, key))
            pos = end + len(RIGHT_DELIM)

        if pos < len(text):
            parts.append(text[pos:])
        return parts

    @property
    def fields(self) -> frozenset[str]:
        """Fields referenced by this template."""
        return frozenset(part.field for part in self._parts if isinstance(part, _Placeholder))

    def render(self, values: Mapping[str, Any]) -> str:
        out = []
        for part in self._parts:
            if isinstance(part, _Placeholder):
                value = values[part.field]
                if part.key is not None:
                    value = value.get(part.key, ())
                out.append(_format_value(value))
            else:
                out.append(part)
        return "".join(out)

    def __repr__(self) -> str:
        return f"Template({self.name!r}, {self.text!r})"


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def label_template(text: str) -> Template:
    """Compile a resource label template (``<<.Group>>``, ``<<.Resource>>``)."""
    return Template("resource-label", text, LABEL_TEMPLATE_FIELDS)


def query_template(text: str) -> Template:
    """Compile a metrics query template."""
    return Template("metrics-query", text, QUERY_TEMPLATE_FIELDS)
