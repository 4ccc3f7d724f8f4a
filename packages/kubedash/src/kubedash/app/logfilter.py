"""Log filter expressions.

An expression is a whitespace separated list of terms::

    log:<regex>     keep lines matching <regex> (``lo:`` works too)
    !log:<regex>    drop lines matching <regex> (``!lo:``)
    <regex>         same as ``log:<regex>``
    !<regex>        same as ``!log:<regex>``

Values may be quoted with ``"`` or ``'`` to include spaces; inside quotes a
backslash escapes the quote character and is otherwise kept for the regex.
A line is shown when it matches at least one include pattern (or there are
none) and no exclude pattern.  Matching ignores escape sequences.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from kubedash.tui.ansi import strip_escapes

_TERM_RE = re.compile(
    r"""(?P<negate>!?)(?:(?:log|lo):)?"""
    r"""(?:"(?P<double>(?:[^"\\]|\\.)*)"|'(?P<single>(?:[^'\\]|\\.)*)'|(?P<bare>\S+))"""
)
_SPACE_RE = re.compile(r"\s*")


class FilterError(ValueError):
    """The expression could not be parsed."""


@dataclass(frozen=True)
class LogFilter:
    include: tuple[re.Pattern[str], ...] = ()
    exclude: tuple[re.Pattern[str], ...] = ()

    def __call__(self, line: str) -> bool:
        plain = strip_escapes(line)
        if self.include and not any(pattern.search(plain) for pattern in self.include):
            return False
        return not any(pattern.search(plain) for pattern in self.exclude)


def _compile(value: str) -> re.Pattern[str]:
    try:
        return re.compile(value)
    except re.error as e:
        raise FilterError(f"invalid pattern {value!r}: {e}") from e


def parse_filter(text: str) -> LogFilter:
    """Parse *text* into a :class:`LogFilter`; raises :class:`FilterError`."""
    include: list[re.Pattern[str]] = []
    exclude: list[re.Pattern[str]] = []
    pos = _SPACE_RE.match(text).end()  # type: ignore[union-attr]
    while pos < len(text):
        match = _TERM_RE.match(text, pos)
        if match is None:
            raise FilterError(f"cannot parse filter at {text[pos:]!r}")
        if match.group("double") is not None:
            value = match.group("double").replace('\\"', '"')
        elif match.group("single") is not None:
            value = match.group("single").replace("\\'", "'")
        else:
            value = match.group("bare")
        if not value:
            raise FilterError("empty pattern")
        (exclude if match.group("negate") else include).append(_compile(value))
        pos = _SPACE_RE.match(text, match.end()).end()  # type: ignore[union-attr]
    return LogFilter(tuple(include), tuple(exclude))
