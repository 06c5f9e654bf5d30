"""A small text template engine with the action syntax of Go templates.

Supported: field access (``.A.B``), ``.``, string, number and boolean
literals, ``if``/``else``/``end``, ``range``, ``with``, ``define`` and
``template``, comments and whitespace trim markers.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

_NO_VALUE = object()
_MAX_DEPTH = 1000
_WS = " \t\r\n"

_LEXEME_RE = re.compile(
    r'(?P<ws>\s+)|(?P<str>"(?:[^"\\]|\\.)*")|(?P<raw>`[^`]*`)'
    r"|(?P<field>(?:\.[A-Za-z_]\w*)+)|(?P<dot>\.)|(?P<num>-?\d+(?:\.\d+)?)"
    r"|(?P<ident>[A-Za-z_]\w*)"
)


class TemplateError(Exception):
    """Raised when a template cannot be parsed or executed."""


@dataclass
class _Token:
    kind: str
    value: str
    offset: int


@dataclass
class _Node:
    src: str
    offset: int


@dataclass
class _Text:
    text: str


@dataclass
class _Action(_Node):
    pipe: _Token | None = None


@dataclass
class _Block(_Node):
    keyword: str = ""
    pipe: _Token | None = None
    body: list = field(default_factory=list)
    else_body: list | None = None


@dataclass
class _Call(_Node):
    name: str = ""
    pipe: _Token | None = None


class Template:
    """A named template with any templates it defines."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._text = ""
        self._templates: dict[str, list] = {}

    # -- parsing ----------------------------------------------------------------

    def parse(self, text: str) -> Template:
        """Parse the template text; returns the template itself."""
        self._text = text
        root: list = []
        stack: list[tuple[_Block | str, list]] = []
        current = root
        define_name = ""
        for item in self._lex(text):
            if isinstance(item, _Text):
                if item.text:
                    current.append(item)
                continue
            src, content, offset = item
            tokens = self._tokenize(content, offset)
            if not tokens:
                self._parse_error(offset, "missing value for command")
            head = tokens[0]
            rest = tokens[1:]
            if head.kind == "ident" and head.value in ("if", "range", "with"):
                block = _Block(src=src, offset=head.offset, keyword=head.value,
                               pipe=self._pipeline(rest, offset))
                current.append(block)
                stack.append((block, current))
                current = block.body
            elif head.kind == "ident" and head.value == "else":
                if not stack or isinstance(stack[-1][0], str):
                    self._parse_error(offset, "unexpected {{else}}")
                block = stack[-1][0]
                if block.else_body is not None:
                    self._parse_error(offset, "expected end; found {{else}}")
                block.else_body = []
                current = block.else_body
            elif head.kind == "ident" and head.value == "end":
                if not stack:
                    self._parse_error(offset, "unexpected {{end}}")
                block, parent = stack.pop()
                if isinstance(block, str):
                    self._templates[block] = current
                current = parent
            elif head.kind == "ident" and head.value == "define":
                if len(rest) != 1 or rest[0].kind not in ("str", "raw"):
                    self._parse_error(offset, "define clause requires a name")
                define_name = _literal(rest[0])
                stack.append((define_name, current))
                current = []
            elif head.kind == "ident" and head.value == "template":
                if not rest or rest[0].kind not in ("str", "raw"):
                    self._parse_error(offset, "unexpected token in template clause")
                current.append(_Call(src=src, offset=rest[0].offset,
                                     name=_literal(rest[0]),
                                     pipe=self._pipeline(rest[1:], offset, optional=True)))
            else:
                current.append(_Action(src=src, offset=head.offset,
                                       pipe=self._pipeline(tokens, offset)))
        if stack:
            self._parse_error(len(text), "unexpected EOF")
        self._templates[self.name] = root
        return self

    def _lex(self, text: str):
        pos = 0
        trim_next = False
        while True:
            start = text.find("{{", pos)
            chunk = text[pos:] if start < 0 else text[pos:start]
            if trim_next:
                chunk = chunk.lstrip(_WS)
            if start < 0:
                yield _Text(chunk)
                return
            begin = start + 2
            if begin + 1 < len(text) and text[begin] == "-" and text[begin + 1] in _WS:
                chunk = chunk.rstrip(_WS)
                begin += 1
            yield _Text(chunk)
            end = self._find_close(text, begin, start)
            content_end = end
            trim_next = False
            if end - begin >= 2 and text[end - 1] == "-" and text[end - 2] in _WS:
                trim_next = True
                content_end = end - 1
            pos = end + 2
            content = text[begin:content_end]
            stripped = content.strip(_WS)
            if stripped.startswith("/*"):
                if not stripped.endswith("*/"):
                    self._parse_error(start, "unclosed comment")
                continue
            yield ("{{" + stripped + "}}", content, begin)

    def _find_close(self, text: str, index: int, start: int) -> int:
        while index < len(text):
            ch = text[index]
            if ch in "\"`":
                index += 1
                while index < len(text) and text[index] != ch:
                    if ch == '"' and text[index] == "\\":
                        index += 1
                    index += 1
            elif text.startswith("}}", index):
                return index
            index += 1
        self._parse_error(start, "unclosed action")
        return -1

    def _tokenize(self, content: str, offset: int) -> list[_Token]:
        tokens = []
        index = 0
        while index < len(content):
            match = _LEXEME_RE.match(content, index)
            if match is None:
                self._parse_error(offset, f"unexpected {content[index]!r} in command")
            kind = match.lastgroup
            if kind != "ws":
                tokens.append(_Token(kind, match.group(), offset + index))
            index = match.end()
        return tokens

    def _pipeline(self, tokens: list[_Token], offset: int, optional: bool = False):
        if not tokens:
            if optional:
                return None
            self._parse_error(offset, "missing value for command")
        first = tokens[0]
        if first.kind == "ident" and first.value not in ("true", "false", "nil"):
            self._parse_error(offset, f'function "{first.value}" not defined')
        if len(tokens) > 1:
            self._parse_error(offset, f"can't give argument to non-function {first.value}")
        return first

    def _line_col(self, offset: int) -> tuple[int, int]:
        before = self._text[:offset]
        return before.count("\n") + 1, offset - (before.rfind("\n") + 1)

    def _parse_error(self, offset: int, message: str) -> None:
        line, _ = self._line_col(offset)
        raise TemplateError(f"template: {self.name}:{line}: {message}")

    # -- execution ----------------------------------------------------------------

    def execute(self, data: Any) -> str:
        """Render the template with ``data`` as the initial dot."""
        if self.name not in self._templates:
            raise TemplateError(f'template: {self.name}: "{self.name}" is an incomplete '
                                "or empty template")
        out: list[str] = []
        self._run(self._templates[self.name], data, out, self.name, 0)
        return "".join(out)

    def _exec_error(self, node: _Node, executing: str, message: str) -> TemplateError:
        line, col = self._line_col(node.offset)
        return TemplateError(f'template: {self.name}:{line}:{col}: executing "{executing}" '
                             f"at <{node.src}>: {message}")

    def _run(self, nodes: list, dot: Any, out: list[str], executing: str, depth: int) -> None:
        for node in nodes:
            if isinstance(node, _Text):
                out.append(node.text)
            elif isinstance(node, _Action):
                out.append(_format(self._eval(node, node.pipe, dot, executing)))
            elif isinstance(node, _Call):
                body = self._templates.get(node.name)
                if body is None:
                    raise self._exec_error(node, executing,
                                           f'template "{node.name}" not defined')
                if depth >= _MAX_DEPTH:
                    raise self._exec_error(node, executing, "exceeded maximum template depth")
                value = None if node.pipe is None else self._eval(node, node.pipe, dot, executing)
                self._run(body, value, out, node.name, depth + 1)
            else:
                self._run_block(node, dot, out, executing, depth)

    def _run_block(self, node: _Block, dot: Any, out: list[str], executing: str,
                   depth: int) -> None:
        value = self._eval(node, node.pipe, dot, executing)
        if node.keyword == "range" and _truth(value):
            if isinstance(value, dict):
                elements = [value[k] for k in sorted(value)]
            elif isinstance(value, (list, tuple)):
                elements = list(value)
            else:
                raise self._exec_error(node, executing,
                                       f"range can't iterate over {_format(value)}")
            for element in elements:
                self._run(node.body, element, out, executing, depth)
        elif node.keyword != "range" and _truth(value):
            self._run(node.body, value if node.keyword == "with" else dot, out,
                      executing, depth)
        elif node.else_body is not None:
            self._run(node.else_body, dot, out, executing, depth)

    def _eval(self, node: _Node, lexeme: _Token, dot: Any, executing: str) -> Any:
        if lexeme.kind in ("str", "raw"):
            return _literal(lexeme)
        if lexeme.kind == "num":
            return float(lexeme.value) if "." in lexeme.value else int(lexeme.value)
        if lexeme.kind == "ident":
            return {"true": True, "false": False, "nil": None}[lexeme.value]
        if lexeme.kind == "dot":
            return dot
        value = dot
        for name in lexeme.value.split(".")[1:]:
            if value is _NO_VALUE or value is None:
                return _NO_VALUE
            if isinstance(value, dict):
                value = value.get(name, _NO_VALUE)
            else:
                raise self._exec_error(node, executing, f"can't evaluate field {name} in "
                                       f"type {type(value).__name__}")
        return value


def _literal(lexeme: _Token) -> str:
    if lexeme.kind == "raw":
        return lexeme.value[1:-1]
    return json.loads(lexeme.value)


def _truth(value: Any) -> bool:
    return value is not _NO_VALUE and bool(value)


def _format(value: Any) -> str:
    if value is _NO_VALUE:
        return "<no value>"
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(v) for v in value) + "]"
    if isinstance(value, dict):
        return "map[" + " ".join(f"{k}:{_format(value[k])}" for k in sorted(value)) + "]"
    return str(value)