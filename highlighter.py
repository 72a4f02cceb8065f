"""
Syntax highlighter for the query editor and the results pane.

Turns raw text into an ordered list of coloured runs.  SQL++ text is scanned
losslessly (joining the run texts gives back the input); JSON is parsed and
pretty-printed, so its runs spell a canonical re-indentation instead; string
values and numbers keep their source text.
"""
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from json.decoder import scanstring
from json.scanner import py_make_scanner
from typing import List

from ide_theme import ColorPalette

logger = logging.getLogger(__name__)


class HighlightLanguage(Enum):
    SQL = auto()
    JSON = auto()
    PLAIN_TEXT = auto()


class Emphasis(Enum):
    NONE = auto()
    BOLD = auto()


@dataclass(frozen=True)
class Run:
    """One contiguous span of text sharing a colour and emphasis."""
    text: str
    color: str
    emphasis: Emphasis = Emphasis.NONE

    @property
    def bold(self) -> bool:
        return self.emphasis is Emphasis.BOLD


SQL_KEYWORDS = frozenset({
    'SELECT', 'FROM', 'WHERE', 'GROUP', 'BY', 'HAVING', 'ORDER', 'LIMIT', 'OFFSET',
    'JOIN', 'INNER', 'LEFT', 'RIGHT', 'FULL', 'OUTER', 'ON', 'AS', 'AND', 'OR', 'NOT',
    'IN', 'IS', 'NULL', 'ARRAY', 'FOR', 'WHEN', 'THEN', 'ELSE', 'END', 'DISTINCT', 'ANY',
    'EVERY', 'SATISFIES', 'LIKE', 'BETWEEN', 'CASE', 'LET', 'USE', 'KEYS', 'INSERT', 'UPDATE',
    'DELETE', 'UNNEST', 'META', 'TRUE', 'FALSE', 'UNION', 'ALL', 'EXCEPT', 'INTERSECT', 'UPSERT',
    'VALUES', 'RETURNING', 'EXISTS', 'PRIMARY', 'KEY', 'SET',
})


class SqlLexer:
    # =====================================================================
    # ORDER IS SEMANTIC: earlier patterns win when several could start at
    # the same position (quote > comment > identifier > number > fallback)
    # =====================================================================
    TOKEN_SPECS = [
        ('WHITESPACE', r'\s+'),
        # Backslash escapes the next char; a doubled quote is an embedded
        # quote.  A missing closing quote runs the string to end of input.
        ('STRING', r"'(?:[^'\\]|\\.|''|\\\Z)*'?"
                   r'|"(?:[^"\\]|\\.|""|\\\Z)*"?'),
        ('LINE_COMMENT', r'--[^\n]*'),
        ('BLOCK_COMMENT', r'/\*.*?(?:\*/|\Z)'),
        ('IDENTIFIER', r'[A-Za-z_][A-Za-z0-9_]*'),
        # Permissive: "1.2.3" and "1_000" are still one number
        ('NUMBER', r'-?[0-9][0-9._]*'),
        ('FALLBACK', r'.'),
    ]

    def __init__(self, source, palette: ColorPalette):
        self.source = source
        self.palette = palette
        self.pos = 0
        self.runs: List[Run] = []

    @property
    def _regex(self):
        cls = self.__class__
        if '_MASTER_REGEX' not in cls.__dict__:
            pattern_parts = [f'(?P<{name}>{regex})' for name, regex in cls.TOKEN_SPECS]
            cls._MASTER_REGEX = re.compile('|'.join(pattern_parts), re.DOTALL)
        return cls._MASTER_REGEX

    def tokenize(self) -> List[Run]:
        if not self.source:
            return [Run('', self.palette.default)]

        while self.pos < len(self.source):
            # FALLBACK matches any single character, so a match always exists
            match = self._regex.match(self.source, self.pos)
            self.pos = match.end()
            self.runs.append(self._create_run(match.lastgroup, match.group()))
        return self.runs

    def _create_run(self, kind, value):
        palette = self.palette
        if kind == 'IDENTIFIER':
            if value.upper() in SQL_KEYWORDS:
                return Run(value, palette.keyword, Emphasis.BOLD)
            return Run(value, palette.default)
        if kind == 'STRING':
            return Run(value, palette.string)
        if kind in ('LINE_COMMENT', 'BLOCK_COMMENT'):
            return Run(value, palette.comment)
        if kind == 'NUMBER':
            return Run(value, palette.number)
        return Run(value, palette.default)


# ═══════════════════════════════════════════════════════
#  JSON pretty-printer
# ═══════════════════════════════════════════════════════

class _RawNumber(str):
    """Number literal kept exactly as written in the source."""


class _RawString(str):
    """String value kept exactly as written, quotes and escapes included."""


def _scan_raw_string(source, end, strict=True):
    _, stop = scanstring(source, end, strict)
    return _RawString(source[end - 1:stop]), stop


class _RawJsonDecoder(json.JSONDecoder):
    """JSONDecoder whose string values come back as their raw source slice.

    Object keys still go through the stock scanner and are decoded.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.parse_string = _scan_raw_string
        # The C scanner ignores parse_string
        self.scan_once = py_make_scanner(self)


class _JsonObject(list):
    """Ordered (key, value) pairs; keeps duplicate keys like the source does."""


def _reject_constant(name):
    raise ValueError(f"Non-standard JSON constant: {name}")


class JsonPrinter:
    INDENT = '  '

    def __init__(self, source, palette: ColorPalette):
        self.source = source
        self.palette = palette
        self.runs: List[Run] = []

    def tokenize(self) -> List[Run]:
        try:
            document = json.loads(
                self.source,
                cls=_RawJsonDecoder,
                object_pairs_hook=_JsonObject,
                parse_int=_RawNumber,
                parse_float=_RawNumber,
                parse_constant=_reject_constant,
            )
            self._append_value(document, 0)
        except ValueError as e:
            logger.debug("JSON not highlighted, rendering as plain text: %s", e)
            return [Run(self.source, self.palette.default)]
        except RecursionError:
            logger.debug("JSON nested too deeply, rendering as plain text")
            return [Run(self.source, self.palette.default)]
        return self.runs

    def _emit(self, text, color):
        self.runs.append(Run(text, color))

    def _indent(self, level):
        if level > 0:
            self._emit(self.INDENT * level, self.palette.default)

    def _append_value(self, value, level):
        palette = self.palette
        if isinstance(value, _JsonObject):
            self._append_object(value, level)
        elif isinstance(value, list):
            self._append_array(value, level)
        elif isinstance(value, _RawNumber):
            self._emit(str(value), palette.number)
        elif isinstance(value, _RawString):
            self._emit(str(value), palette.string)
        elif value is True or value is False:
            self._emit('true' if value else 'false', palette.boolean)
        else:
            self._emit('null', palette.boolean)

    def _append_object(self, pairs, level):
        default = self.palette.default
        if not pairs:
            self._emit('{}', default)
            return
        self._emit('{\n', default)
        last = len(pairs) - 1
        for i, (key, value) in enumerate(pairs):
            self._indent(level + 1)
            self._emit(json.dumps(key, ensure_ascii=False), self.palette.property_name)
            self._emit(': ', default)
            self._append_value(value, level + 1)
            self._emit(',\n' if i < last else '\n', default)
        self._indent(level)
        self._emit('}', default)

    def _append_array(self, items, level):
        default = self.palette.default
        if not items:
            self._emit('[]', default)
            return
        self._emit('[\n', default)
        last = len(items) - 1
        for i, item in enumerate(items):
            self._indent(level + 1)
            self._append_value(item, level + 1)
            self._emit(',\n' if i < last else '\n', default)
        self._indent(level)
        self._emit(']', default)


def tokenize(text, language, palette, plain_color=None) -> List[Run]:
    """Highlight *text* in *language* using *palette*.

    Never raises.  ``plain_color`` is the colour of the single run produced
    for ``HighlightLanguage.PLAIN_TEXT`` (palette default when omitted).
    """
    text = text or ''
    if language is HighlightLanguage.SQL:
        return SqlLexer(text, palette).tokenize()
    if language is HighlightLanguage.JSON:
        return JsonPrinter(text, palette).tokenize()
    return [Run(text, plain_color or palette.default)]


def joined_text(runs) -> str:
    return ''.join(run.text for run in runs)
