"""
Regular-expression helpers for series names.
"""

from __future__ import annotations

import re

from promadapter.config.models import RegexFilter
from promadapter.core.errors import ConfigurationError

_NAME_CHARS = re.compile(r"\w+")


def compile_pattern(raw: str, what: str) -> re.Pattern[str]:
    try:
        return re.compile(raw)
    except re.error as e:
        raise ConfigurationError(
            f"unable to compile {what} {raw!r}: {e}",
            details={"pattern": raw},
        ) from e


class ReMatcher:
    """Either positively or negatively matches a regex."""

    def __init__(self, regex: re.Pattern[str], positive: bool) -> None:
        self.regex = regex
        self.positive = positive

    @classmethod
    def from_filter(cls, cfg: RegexFilter) -> ReMatcher:
        if cfg.is_ and cfg.is_not:
            raise ConfigurationError(
                f"cannot have both an `is` ({cfg.is_!r}) and `isNot` ({cfg.is_not!r}) "
                "expression in a single filter"
            )
        if not cfg.is_ and not cfg.is_not:
            raise ConfigurationError("must have either an `is` or `isNot` expression in a filter")

        if cfg.is_:
            return cls(compile_pattern(cfg.is_, "series filter"), positive=True)
        return cls(compile_pattern(cfg.is_not, "series filter"), positive=False)

    def matches(self, value: str) -> bool:
        return (self.regex.search(value) is not None) == self.positive

    def __repr__(self) -> str:
        kind = "is" if self.positive else "isNot"
        return f"ReMatcher({kind}={self.regex.pattern!r})"


def default_substitution(regex: re.Pattern[str]) -> str | None:
    """The obvious ``as`` value for a name pattern, if there is one."""
    if regex.groups == 0:
        # no capture groups, use the whole thing
        return "$0"
    if regex.groups == 1:
        return "$1"
    return None


def expand(match: re.Match[str], template: str) -> str:
    """
    Expand ``$1``, ``${1}``, ``$name``, ``${name}`` and ``$$`` in ``template``.

    ``$name`` takes the longest run of word characters, so ``$1x`` refers
    to a group called ``1x``; use ``${1}x`` instead.  References to groups
    that do not exist or did not participate in the match expand to the
    empty string.
    """
    out: list[str] = []
    rest = template
    while True:
        before, sep, after = rest.partition("$")
        out.append(before)
        if not sep:
            break
        rest = after

        if rest.startswith("$"):
            out.append("$")
            rest = rest[1:]
            continue

        name, rest, ok = _extract_reference(rest)
        if not ok:
            out.append("$")
            continue
        out.append(_group_value(match, name))
    return "".join(out)


def _extract_reference(text: str) -> tuple[str, str, bool]:
    braced = text.startswith("{")
    body = text[1:] if braced else text
    found = _NAME_CHARS.match(body)
    if found is None:
        return "", text, False
    name = found.group(0)
    rest = body[found.end():]
    if braced:
        if not rest.startswith("}"):
            return "", text, False
        rest = rest[1:]
    return name, rest, True


def _group_value(match: re.Match[str], name: str) -> str:
    if name.isdecimal():
        index = int(name)
        if index > match.re.groups:
            return ""
        return match.group(index) or ""
    if name not in match.re.groupindex:
        return ""
    return match.group(name) or ""
