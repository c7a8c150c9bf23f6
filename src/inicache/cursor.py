# -*- encoding: utf-8 -*-
# @File   : cursor.py
# @Time   : 2024/10/13 15:02:47
# @Author : Kariko Lin

"""Walk the keys of one section, in order.

```python
cur = find_first_value(section)
if cur is not None:
    try:
        while True:
            name, data = cur.current
            ...
            if not find_next_value(cur):
                break
    finally:
        find_close(cur)
```

or just `with IniKeyCursor(section) as cur: for name, data in cur: ...`.

Do not add or delete keys of the section while a cursor is alive.
"""

from collections.abc import Iterator

from .abstract import SerializedComponents
from .exceptions import InvalidParameter
from .model import IniKey, IniSection


class IniKeyCursor(SerializedComponents[tuple[str, str]]):
    def __init__(self, section: IniSection) -> None:
        if not isinstance(section, IniSection):
            raise InvalidParameter(f'Not a section: {section!r}.')
        self._section: IniSection | None = section
        self._pos = 0

    def __check(self) -> IniSection:
        if self._section is None:
            raise InvalidParameter('Cursor already closed.')
        return self._section

    @property
    def key(self) -> IniKey:
        """The `IniKey` node under the cursor, e.g. as an insertion anchor."""
        nodes = self.__check()._nodes()
        if self._pos >= len(nodes):
            raise InvalidParameter('Cursor is out of entries.')
        return nodes[self._pos]

    @property
    def current(self) -> tuple[str, str]:
        key = self.key
        return key.name, key.data

    @property
    def seekable(self) -> bool:
        return (self._section is not None
                and self._pos < len(self._section._nodes()))

    def next(self) -> bool:
        nodes = self.__check()._nodes()
        if self._pos + 1 >= len(nodes):
            return False  # no more entries, stay on the last one.
        self._pos += 1
        return True

    def reset_seek(self) -> None:
        self.__check()
        self._pos = 0

    def close(self) -> None:
        self._section = None

    @property
    def closed(self) -> bool:
        return self._section is None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        if not self.seekable:
            return
        yield self.current
        while self.next():
            yield self.current

    def __str__(self) -> str:
        if self._section is None:
            return '<closed cursor>'
        return f'{self._section}#{self._pos}'


def find_first_value(section: IniSection) -> IniKeyCursor | None:
    """Open a cursor on the first key, or `None` for an empty section."""
    if not isinstance(section, IniSection):
        raise InvalidParameter(f'Not a section: {section!r}.')
    if not len(section):
        return None
    return IniKeyCursor(section)


def find_next_value(cursor: IniKeyCursor) -> bool:
    return cursor.next()


def find_close(cursor: IniKeyCursor | None) -> None:
    if cursor is not None:
        cursor.close()
