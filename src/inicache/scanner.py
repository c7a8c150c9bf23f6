# -*- encoding: utf-8 -*-
# @File   : scanner.py
# @Time   : 2024/10/12 23:18:05
# @Author : Kariko Lin

"""Hand-written INI scanner, one forward pass, no backtracking.

Each `get_*` / `skip_*` function takes the text buffer and a position,
and returns the position right after what it consumed.
They never raise on malformed text: whatever can't be understood
(a key without `=`, an empty section name, pairs before any section...)
is simply dropped, and scanning goes on.

Supported forms:

    ```ini
    [Section]   ; anything after `]` is ignored
    Key = Value ; comment
    ; comment line
    Signature = "$ReactOS$"  ; quotes only stripped in string mode
    ```

The buffer ends at its first NUL (`consts.SENTINEL`), if any.
"""

import logging

from .consts import SENTINEL, IniMark
from .exceptions import IniCacheError, InvalidParameter
from .model import IniCache, IniSection

_log = logging.getLogger(__name__)

_LINE_BREAKS = ('\r', '\n')
_INLINE_SPACES = (' ', '\t', '\v', '\f')


def _at(buf: str, pos: int) -> str:
    return buf[pos] if pos < len(buf) else SENTINEL


def _skip_inline_spaces(buf: str, pos: int) -> int:
    while _at(buf, pos) in _INLINE_SPACES:
        pos += 1
    return pos


def _skip_line(buf: str, pos: int) -> int:
    """Go to the start of next line (or the end)."""
    while (ch := _at(buf, pos)) != SENTINEL and ch != '\n':
        pos += 1
    return pos if ch == SENTINEL else pos + 1


def _skip_line_end(buf: str, pos: int) -> int:
    """Discard the rest of this line, and then one `\\r`, `\\n` or both."""
    while (ch := _at(buf, pos)) != SENTINEL and ch not in _LINE_BREAKS:
        pos += 1
    if _at(buf, pos) == '\r':
        pos += 1
    if _at(buf, pos) == '\n':
        pos += 1
    return pos


def skip_whitespace(buf: str, pos: int) -> int | None:
    """Skip blanks and empty lines. `None` once the buffer is exhausted."""
    while (ch := _at(buf, pos)) != SENTINEL and ch.isspace():
        pos += 1
    return None if _at(buf, pos) == SENTINEL else pos


def skip_to_next_section(buf: str, pos: int) -> int | None:
    """Drop lines until one starting with `[`.

    Returns position of that `[`, or `None` if there is no more section.
    """
    while (ch := _at(buf, pos)) != SENTINEL:
        if ch == IniMark.SECTION_OPEN:
            return pos
        pos = _skip_line(buf, pos)
    return None


def get_section_name(buf: str, pos: int) -> tuple[int, str]:
    """`pos` should be right after the `[`.

    The name is everything up to the first `]`, which is NOT checked
    against any illegal chars. The rest of that line is dropped.
    """
    while (ch := _at(buf, pos)) != SENTINEL and ch.isspace():
        pos += 1
    start = pos
    while (ch := _at(buf, pos)) != SENTINEL and ch != IniMark.SECTION_CLOSE:
        pos += 1
    name = buf[start:pos]
    if ch == IniMark.SECTION_CLOSE:
        pos += 1
    return _skip_line(buf, pos), name


def get_key_name(buf: str, pos: int) -> tuple[int, str | None]:
    """Read a key name, skipping blank lines and `;` comment lines.

    The name ends at whitespace, `=` or `;`.
    A `;` right after the name makes the whole line a comment,
    so it is dropped and the next line is tried.

    Returns `None` as the name when the buffer is exhausted, or when
    a new section header shows up (left for the caller to parse).
    """
    while True:
        if (pos := skip_whitespace(buf, pos)) is None:
            return len(buf), None
        if _at(buf, pos) == IniMark.SECTION_OPEN:
            return pos, None

        start = pos
        while ((ch := _at(buf, pos)) != SENTINEL and not ch.isspace()
               and ch not in (IniMark.PAIRING, IniMark.COMMENT)):
            pos += 1
        if ch != IniMark.COMMENT:
            return pos, buf[start:pos]
        # comment
        while (ch := _at(buf, pos)) != SENTINEL and ch not in _LINE_BREAKS:
            pos += 1


def _get_quoted_value(buf: str, pos: int) -> tuple[int, str | None]:
    """`pos` should be right after the opening quote.
    No escapes at all: the literal ends at the very next `"`."""
    start = pos
    while (ch := _at(buf, pos)) != SENTINEL and ch != IniMark.QUOTE:
        pos += 1
    if ch == SENTINEL:
        _log.warning(
            'Unterminated quoted value at offset %d, dropped.', start - 1)
        return _skip_line(buf, start), None
    return _skip_line_end(buf, pos + 1), buf[start:pos]


def get_key_value(
    buf: str, pos: int, string_mode: bool = False
) -> tuple[int, str | None]:
    """Read `= value` after a key name.

    `None` as the value means there is no `=` on the line, and the line
    is dropped. An empty value is returned as `''`.

    In string mode, a value starting with `"` is taken verbatim up to
    the next `"`, and the rest of that line is ignored.
    Otherwise the value ends at a line break or a `;` comment,
    taken as it is (blanks before a `;` included).
    """
    pos = _skip_inline_spaces(buf, pos)
    if _at(buf, pos) != IniMark.PAIRING:
        return _skip_line_end(buf, pos), None
    pos = _skip_inline_spaces(buf, pos + 1)

    if string_mode and _at(buf, pos) == IniMark.QUOTE:
        return _get_quoted_value(buf, pos + 1)

    start = pos
    while ((ch := _at(buf, pos)) != SENTINEL
           and ch not in _LINE_BREAKS and ch != IniMark.COMMENT):
        pos += 1
    value = buf[start:pos]
    return _skip_line_end(buf, pos), value


def load_from_memory(
    buf: str,
    string_mode: bool = False,
    cache: IniCache | None = None
) -> IniCache:
    """Scan decoded INI text into `cache` (a new one by default).

    Never fails on malformed text. Offending lines, sections or keys are
    dropped (see DEBUG logs), and everything else is kept.
    """
    if not isinstance(buf, str):
        raise InvalidParameter(
            f'Expected decoded text, got {type(buf).__name__}.')
    if cache is None:
        cache = IniCache()

    section: IniSection | None = None
    pos: int | None = 0
    while pos is not None and _at(buf, pos) != SENTINEL:
        if (pos := skip_whitespace(buf, pos)) is None:
            break

        if buf[pos] == IniMark.SECTION_OPEN:
            section = None
            pos, name = get_section_name(buf, pos + 1)
            _log.debug('[%s]', name)
            try:
                section = cache.add_section(name)
            except IniCacheError as e:
                _log.debug('Section dropped: %s', e)
                pos = skip_to_next_section(buf, pos)
            continue

        if section is None:
            _log.debug('Pairs outside of sections dropped at %d.', pos)
            pos = skip_to_next_section(buf, pos)
            continue

        pos, name = get_key_name(buf, pos)
        if name is None:
            continue
        pos, value = get_key_value(buf, pos, string_mode)
        if value is None:
            _log.debug('Key "%s" without "=" dropped.', name)
            continue

        _log.debug("'%s' = '%s'", name, value)
        try:
            section.add_key(name, value)
        except IniCacheError as e:
            _log.debug('Key dropped: %s', e)
    return cache
