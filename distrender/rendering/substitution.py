"""Filename transform: one sed-style substitution expression.

Expressions look like ``/pattern/replacement/flags``. Any non-alphanumeric
character may serve as the delimiter and a leading ``s`` is allowed, so
``s#\\.tt$##`` and ``/\\.tt$//`` are equivalent. Replacements may refer to
groups as ``$1``, ``${1}``, ``$&`` or ``\\1``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}

_GROUP_REF = re.compile(r"\$(?:\{(\d+)\}|(\d+)|&)")

# Escapes with the same meaning in a Perl replacement and an re template
_CONTROL_ESCAPES = frozenset("afnrt")


class OutputRegexError(ValueError):
    """Raised when a filename substitution expression is malformed."""


@dataclass(frozen=True)
class Substitution:
    """A compiled substitution applied to file names."""

    expression: str
    pattern: re.Pattern[str]
    replacement: str
    count: int = 1

    def apply(self, name: str) -> str:
        return self.pattern.sub(self.replacement, name, count=self.count)


def _split(body: str, delimiter: str) -> list[str]:
    """Split on unescaped delimiters, unescaping escaped ones."""
    parts: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            current.append(nxt if nxt == delimiter else ch + nxt)
            i += 2
            continue
        if ch == delimiter:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _convert_replacement(text: str, expression: str) -> tuple[str, list[int]]:
    """Translate a Perl replacement into ``re`` template syntax.

    ``$N``/``\\N`` group references become ``\\g<N>``; escapes ``re`` has no
    meaning for (``\\q``, ``\\$``, a bare ``\\g``) resolve to the character.
    """
    out: list[str] = []
    groups: list[int] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            if i + 1 >= len(text):
                raise OutputRegexError(f"Trailing backslash in replacement: {expression!r}")
            nxt = text[i + 1]
            if nxt.isdigit():
                digits = re.match(r"\d{1,2}", text[i + 1 :]).group(0)
                groups.append(int(digits))
                out.append(f"\\g<{int(digits)}>")
                i += 1 + len(digits)
                continue
            if nxt == "\\" or nxt in _CONTROL_ESCAPES:
                out.append(ch + nxt)
            else:
                # other escaped characters stand for themselves
                out.append(nxt)
            i += 2
            continue
        if ch == "$":
            match = _GROUP_REF.match(text, i)
            if match:
                group = int(match.group(1) or match.group(2) or 0)
                groups.append(group)
                out.append(f"\\g<{group}>")
                i = match.end()
                continue
        out.append(ch)
        i += 1

    return "".join(out), groups


def parse_substitution(expression: str) -> Substitution:
    """Parse and compile a substitution expression.

    Args:
        expression: Expression such as ``/\\.tt$//``

    Returns:
        Compiled substitution

    Raises:
        OutputRegexError: If the expression is malformed or does not compile
    """
    text = expression.strip()
    if len(text) > 1 and text[0] == "s" and not text[1].isalnum():
        text = text[1:]

    if not text:
        raise OutputRegexError("Empty substitution expression")

    delimiter = text[0]
    if delimiter.isalnum() or delimiter.isspace() or delimiter == "\\":
        raise OutputRegexError(
            f"Substitution must start with a delimiter such as '/': {expression!r}"
        )

    parts = _split(text[1:], delimiter)
    if len(parts) != 3:
        raise OutputRegexError(
            f"Substitution must have the form /pattern/replacement/flags: {expression!r}"
        )
    pattern_text, replacement_text, flag_text = parts

    flags = 0
    count = 1
    for flag in flag_text:
        if flag == "g":
            count = 0
        elif flag in _FLAGS:
            flags |= _FLAGS[flag]
        else:
            raise OutputRegexError(f"Unsupported flag {flag!r} in {expression!r}")

    try:
        pattern = re.compile(pattern_text, flags)
    except re.error as e:
        raise OutputRegexError(f"Invalid pattern in {expression!r}: {e}") from e

    replacement, groups = _convert_replacement(replacement_text, expression)
    for group in groups:
        if group > pattern.groups:
            raise OutputRegexError(
                f"Replacement refers to group {group} but the pattern has "
                f"{pattern.groups}: {expression!r}"
            )

    return Substitution(
        expression=expression, pattern=pattern, replacement=replacement, count=count
    )
