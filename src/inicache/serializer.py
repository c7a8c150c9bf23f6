# -*- encoding: utf-8 -*-
# @File   : serializer.py
# @Time   : 2024/10/13 01:47:22
# @Author : Kariko Lin

"""Render an `IniCache` back to canonical INI text:

    ```ini
    [Section]\\r\\n
    Key=Value\\r\\n
    \\r\\n
    [Next]\\r\\n
    ...
    ```

A blank line goes *between* sections, never after the last one.
Values are written as they are, i.e. quotes stripped when reading
in string mode are not restored.
"""

import logging
from io import StringIO

from .consts import KEY_OVERHEAD, SECTION_OVERHEAD, SECTION_SEPARATOR, IniMark
from .model import IniCache

_log = logging.getLogger(__name__)

_EOL = IniMark.LINE_END.value


def buffer_size(cache: IniCache) -> int:
    """Exact length of what `render()` produces, counted in *chars*.

    Once encoded, that is also the byte count for single-byte codecs
    (ascii, latin-1, cp1252...), but not for utf-8 text holding
    non-ASCII chars.
    """
    size = 0
    for cnt, section in enumerate(cache._nodes()):
        if cnt:
            size += SECTION_SEPARATOR
        size += len(section.name) + SECTION_OVERHEAD
        for key in section._nodes():
            size += len(key.name) + len(key.data) + KEY_OVERHEAD
    return size


def render(cache: IniCache) -> str:
    size = buffer_size(cache)
    _log.debug('Buffer size: %d', size)

    buf = StringIO()
    for cnt, section in enumerate(cache._nodes()):
        if cnt:
            buf.write(_EOL)
        buf.write(
            f'{IniMark.SECTION_OPEN.value}{section.name}'
            f'{IniMark.SECTION_CLOSE.value}{_EOL}')
        for key in section._nodes():
            buf.write(f'{key.name}{IniMark.PAIRING.value}{key.data}{_EOL}')

    ret = buf.getvalue()
    # both walk the same nodes in the same order.
    if len(ret) != size:
        raise RuntimeError(f'Rendered {len(ret)} chars, expected {size}.')
    return ret
