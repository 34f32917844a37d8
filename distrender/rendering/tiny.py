"""Tiny template dialect compiled onto Jinja2.

Supported directives::

    [% name %]  [% dist.version %]  [% list.0 %]
    [% IF expr %] ... [% ELSE %] ... [% END %]
    [% UNLESS expr %] ... [% ELSE %] ... [% END %]
    [% FOREACH item IN expr %] ... [% END %]

``[%-`` removes the newline and indentation preceding the tag and ``-%]``
removes the trailing whitespace and newline following it. Everything else in
the template is literal text, including any Jinja2 delimiters.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jinja2 import (
    ChainableUndefined,
    Environment,
    TemplateRuntimeError,
    TemplateSyntaxError,
    Undefined,
)

STASH = "_stash"

_TAG = re.compile(r"\[%([-+]?)\s*(.*?)\s*([-+]?)%\]", re.DOTALL)
_SEGMENT = r"(?:\d+|[A-Za-z_]\w*)"
_EXPR = re.compile(rf"[a-z_]\w*(?:\.{_SEGMENT})*")
_LOOP_VAR = re.compile(r"[a-z_]\w*")
_CONDITION = re.compile(r"(IF|UNLESS)\s+(\S+)", re.DOTALL)
_FOREACH = re.compile(r"FOREACH\s+(\S+)\s+IN\s+(\S+)", re.DOTALL)
_CHOMP_BEFORE = re.compile(r"\n[ \t]*\Z")
_CHOMP_LEADING = re.compile(r"\A[ \t]*\Z")
_CHOMP_AFTER = re.compile(r"\A[ \t]*\n")
_JINJA_OPEN = re.compile(r"\{(?=[{%#]|\Z)")


def truthy(value: Any) -> bool:
    """Truth test for conditions: undefined, ``None``, ``""`` and ``"0"`` are false."""
    if value is None or isinstance(value, Undefined):
        return False
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def _finalize(value: Any) -> Any:
    return "" if value is None else value


class TinyEnvironment(Environment):
    """Jinja2 environment with the lookup rules of the tiny dialect.

    Dotted lookups try mapping keys, then attributes, then list indices, and
    bound methods found along the way are called without arguments; a method
    that requires arguments is a render error.
    """

    def __init__(self, **options: Any) -> None:
        options.setdefault("undefined", ChainableUndefined)
        options.setdefault("autoescape", False)
        options.setdefault("finalize", _finalize)
        super().__init__(**options)
        self.filters["truthy"] = truthy

    def getitem(self, obj: Any, argument: Any) -> Any:
        value = super().getitem(obj, argument)
        if (
            isinstance(value, Undefined)
            and isinstance(argument, int)
            and isinstance(obj, Mapping)
        ):
            value = super().getitem(obj, str(argument))
        return _call_method(value)

    def getattr(self, obj: Any, attribute: str) -> Any:
        return _call_method(super().getattr(obj, attribute))


def _call_method(value: Any) -> Any:
    if not inspect.ismethod(value):
        return value
    try:
        inspect.signature(value).bind()
    except TypeError as e:
        raise TemplateRuntimeError(
            f"{value.__qualname__}() needs arguments and cannot be used in a template"
        ) from e
    return value()


@dataclass
class _Block:
    kind: str
    lineno: int
    has_else: bool = False


class _Translator:
    def __init__(self, text: str, name: str | None) -> None:
        self.text = text
        self.name = name
        self.out: list[str] = []
        self.blocks: list[_Block] = []
        self.scopes: list[tuple[str, str]] = []

    def fail(self, message: str, lineno: int) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, lineno, name=self.name)

    def expression(self, expr: str, lineno: int) -> str:
        if not _EXPR.fullmatch(expr):
            raise self.fail(f"Unknown directive or bad expression: {expr!r}", lineno)
        head, *rest = expr.split(".")
        source = f'{STASH}["{head}"]'
        for var, mangled in reversed(self.scopes):
            if var == head:
                source = mangled
                break
        for segment in rest:
            source += f"[{segment}]" if segment.isdigit() else f'["{segment}"]'
        return source

    def directive(self, body: str, lineno: int) -> str:
        condition = _CONDITION.fullmatch(body)
        if condition:
            keyword, expr = condition.groups()
            test = f"{self.expression(expr, lineno)} | truthy"
            self.blocks.append(_Block(keyword, lineno))
            if keyword == "UNLESS":
                return f"{{% if not ({test}) %}}"
            return f"{{% if {test} %}}"

        loop = _FOREACH.fullmatch(body)
        if loop:
            var, expr = loop.groups()
            if not _LOOP_VAR.fullmatch(var):
                raise self.fail(f"Bad loop variable: {var!r}", lineno)
            iterable = self.expression(expr, lineno)
            mangled = f"_loop{len(self.scopes)}_{var}"
            self.scopes.append((var, mangled))
            self.blocks.append(_Block("FOREACH", lineno))
            return f"{{% for {mangled} in {iterable} %}}"

        if body == "ELSE":
            if not self.blocks:
                raise self.fail("ELSE without IF or UNLESS", lineno)
            block = self.blocks[-1]
            if block.kind == "FOREACH":
                raise self.fail("ELSE is not allowed inside FOREACH", lineno)
            if block.has_else:
                raise self.fail(f"Second ELSE in {block.kind} block", lineno)
            block.has_else = True
            return "{% else %}"

        if body == "END":
            if not self.blocks:
                raise self.fail("END without an open block", lineno)
            block = self.blocks.pop()
            if block.kind == "FOREACH":
                self.scopes.pop()
                return "{% endfor %}"
            return "{% endif %}"

        return f"{{{{ {self.expression(body, lineno)} }}}}"

    def run(self) -> str:
        position = 0
        chomp_next = False
        for match in _TAG.finditer(self.text):
            left, body, right = match.groups()
            literal = self.text[position : match.start()]
            if chomp_next:
                literal = _CHOMP_AFTER.sub("", literal, count=1)
            if left == "-":
                literal, chomped = _CHOMP_BEFORE.subn("", literal, count=1)
                # the template start is a line start with no newline
                if not chomped and position == 0:
                    literal = _CHOMP_LEADING.sub("", literal, count=1)
            self.out.append(_escape(literal))

            lineno = self.text.count("\n", 0, match.start()) + 1
            self.out.append(self.directive(body, lineno))
            chomp_next = right == "-"
            position = match.end()

        literal = self.text[position:]
        if chomp_next:
            literal = _CHOMP_AFTER.sub("", literal, count=1)
        self.out.append(_escape(literal))

        if self.blocks:
            block = self.blocks[-1]
            raise self.fail(f"{block.kind} block is never closed with END", block.lineno)
        return "".join(self.out)


def _escape(literal: str) -> str:
    return _JINJA_OPEN.sub('{{ "{" }}', literal)


def translate(text: str, name: str | None = None) -> str:
    """Compile tiny dialect source into Jinja2 source.

    Args:
        text: Template source
        name: Template name used in error messages

    Returns:
        Jinja2 template source expecting the variables under ``_stash``

    Raises:
        TemplateSyntaxError: On unknown directives or unbalanced blocks
    """
    return _Translator(text, name).run()
