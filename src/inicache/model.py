# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/10/10 00:57:10
# @Author : Kariko Lin

"""
Basically INI Structure, cached in memory, keeping the original order.

- `IniCache` owns `IniSection`s, which own `IniKey`s. Nothing is shared.
- Section and key names are matched case-insensitively,
  but the spelling first seen is kept for output.
- Adding something that already exists never duplicates it:
  a section is simply returned, a key gets its data replaced *in place*.
"""

import logging
import warnings
from collections.abc import Iterator, Mapping, MutableMapping

from .consts import InsertionType
from .exceptions import InvalidParameter, KeyNotFound, ResourceExhausted

_log = logging.getLogger(__name__)


def _check_text(value: object, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidParameter(
            f'{what} should be a non-empty str, got {value!r}.')
    return value


def _fold(name: str) -> str:
    return name.upper()


# compared by identity, as keys are also used as anchors.
class IniKey:
    """One `name=data` pair. The name is fixed once created,
    since the owning section indexes keys by it."""
    __slots__ = ('_name', '_data')

    def __init__(self, *, name: str, data: str) -> None:
        self._name = _check_text(name, 'Key name')
        self._data = _check_text(data, 'Key data')

    @property
    def name(self) -> str:
        return self._name

    @property
    def data(self) -> str:
        return self._data

    @data.setter
    def data(self, value: str) -> None:
        self._data = _check_text(value, 'Key data')

    def __str__(self) -> str:
        return f'{self._name}={self._data}'

    def __repr__(self) -> str:
        return f'IniKey(name={self._name!r}, data={self._data!r})'


class IniSection(MutableMapping[str, str]):
    """INI 小节：有序的键值对表。

    Key names are case-insensitive, i.e. `sect['path']` and `sect['PATH']`
    hit the same `IniKey`.
    Plain item assignment always appends new keys to the tail;
    use `insert_key()` for other positions.
    """

    def __init__(self, name: str) -> None:
        self._name = _check_text(name, 'Section name')
        # ordered nodes, and a folded-name index for lookups.
        self.__keys: list[IniKey] = []
        self.__index: dict[str, IniKey] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def first_key(self) -> IniKey | None:
        return self.__keys[0] if self.__keys else None

    @property
    def last_key(self) -> IniKey | None:
        return self.__keys[-1] if self.__keys else None

    def _nodes(self) -> list[IniKey]:
        """The live node list. For cursors and the serializer only."""
        return self.__keys

    def keys_in_order(self) -> tuple[IniKey, ...]:
        return tuple(self.__keys)

    def find_key(self, name: str) -> IniKey | None:
        """Case-insensitive lookup. `None` if there is no such key."""
        if not isinstance(name, str):
            raise InvalidParameter(f'Key name should be str, got {name!r}.')
        return self.__index.get(_fold(name))

    def get_key(self, name: str) -> str:
        """Data of the key. The string is the cached one, not a copy."""
        if (key := self.find_key(name)) is None:
            raise KeyNotFound(f'[{self._name}] has no key "{name}".')
        return key.data

    def insert_key(
        self,
        anchor: IniKey | None,
        insertion: InsertionType,
        name: str,
        data: str
    ) -> IniKey:
        """Add a key, or replace the data of an existing one.

        An existing key (case-insensitive name match) keeps its position,
        whatever `insertion` says. A new one is placed by `insertion`
        relative to `anchor`:

        - `FIRST` / `LAST`: head / tail, `anchor` ignored.
        - `BEFORE`: right before `anchor`. Head if `anchor` is `None`.
        - `AFTER`: right after `anchor`. Tail if `anchor` is `None`.

        Raises:
            InvalidParameter: empty name or data, unknown insertion type,
                or an anchor not owned by this section.
                The section is left untouched.
            ResourceExhausted: the new node could not be allocated.
        """
        _check_text(name, 'Key name')
        _check_text(data, 'Key data')
        try:
            insertion = InsertionType(insertion)
        except ValueError as e:
            raise InvalidParameter(
                f'Unknown insertion type {insertion!r}.') from e

        # data checked above, so swapping it here cannot half-fail.
        # position (and so the anchor) does not matter for an update.
        if (key := self.__index.get(_fold(name))) is not None:
            key.data = data
            return key

        if anchor is not None and self.__index.get(
                _fold(getattr(anchor, 'name', ''))) is not anchor:
            raise InvalidParameter(
                f'Anchor {anchor!r} does not belong to [{self._name}].')

        try:
            key = IniKey(name=name, data=data)
        except MemoryError as e:
            raise ResourceExhausted(
                f'Unable to allocate key "{name}" in [{self._name}].') from e

        if not self.__keys:
            self.__keys.append(key)
        elif insertion is InsertionType.FIRST or (
            insertion is InsertionType.BEFORE
            and (anchor is None or anchor is self.__keys[0])
        ):
            self.__keys.insert(0, key)
        elif insertion is InsertionType.BEFORE:
            self.__keys.insert(self.__keys.index(anchor), key)
        elif insertion is InsertionType.LAST or (
            insertion is InsertionType.AFTER
            and (anchor is None or anchor is self.__keys[-1])
        ):
            self.__keys.append(key)
        else:  # AFTER, with an anchor in the middle
            self.__keys.insert(self.__keys.index(anchor) + 1, key)
        self.__index[_fold(name)] = key
        return key

    def add_key(self, name: str, data: str) -> IniKey:
        return self.insert_key(None, InsertionType.LAST, name, data)

    def __getitem__(self, key: str) -> str:
        return self.get_key(key)

    def __setitem__(self, key: str, value: str) -> None:
        self.add_key(key, value)

    def __delitem__(self, key: str) -> None:
        if (node := self.find_key(key)) is None:
            raise KeyNotFound(f'[{self._name}] has no key "{key}".')
        self.__keys.remove(node)
        del self.__index[_fold(node.name)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _fold(key) in self.__index

    def __len__(self) -> int:
        return len(self.__keys)

    def __iter__(self) -> Iterator[str]:
        return (i.name for i in self.__keys)

    def clear(self) -> None:
        self.__keys.clear()
        self.__index.clear()

    def __str__(self) -> str:
        return f'[{self._name}]'

    def __repr__(self) -> str:
        return '[%s] { .cnt = %d }' % (self._name, len(self.__keys))


class IniCache(MutableMapping[str, IniSection]):
    """INI 文件的内存缓存：有序的小节表。

    Use `add_section()` to create-or-find a section, then
    `IniSection.add_key()` / `IniSection.insert_key()` to fill it.
    Sections are serialized in the order they were first added.
    """

    def __init__(self) -> None:
        # dict keeps insertion order, keyed by folded names.
        self.__sections: dict[str, IniSection] = {}

    def add_section(self, name: str) -> IniSection:
        """Return the section named `name`, creating it at the tail
        if there is none yet (case-insensitive)."""
        _check_text(name, 'Section name')
        if (section := self.__sections.get(_fold(name))) is not None:
            return section
        try:
            section = IniSection(name)
        except MemoryError as e:
            raise ResourceExhausted(
                f'Unable to allocate section [{name}].') from e
        self.__sections[_fold(name)] = section
        return section

    def get_section(self, name: str) -> IniSection | None:
        """Case-insensitive lookup. `None` if there is no such section."""
        if not isinstance(name, str):
            raise InvalidParameter(
                f'Section name should be str, got {name!r}.')
        return self.__sections.get(_fold(name))

    def _nodes(self) -> Iterator[IniSection]:
        """For cursors and the serializer."""
        return iter(self.__sections.values())

    def __getitem__(self, key: str) -> IniSection:
        if (section := self.get_section(key)) is None:
            raise KeyNotFound(f'No section named [{key}].')
        return section

    def __setitem__(
        self,
        key: str,
        value: IniSection | Mapping[str, str]
    ) -> None:
        """Replace pairs of section `key` with a *copy* of `value`.

        The section keeps its position if it already exists.
        Nothing is touched unless every pair is valid.
        """
        if self.get_section(key) is value:
            return
        # shouldn't keep ptr to external sections, ownership is single.
        # fill a detached one first, so a bad pair raises before any change.
        staged = IniSection(key)
        for k, v in value.items():
            staged.add_key(k, v)
        pairs = list(staged.items())

        section = self.add_section(key)
        if len(section):
            warnings.warn(
                f'[{section.name}] already has {len(section)} key(s), '
                'which will be replaced.')
        section.clear()
        for k, v in pairs:
            section.add_key(k, v)

    def __delitem__(self, key: str) -> None:
        if (section := self.get_section(key)) is None:
            raise KeyNotFound(f'No section named [{key}].')
        section.clear()
        del self.__sections[_fold(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _fold(key) in self.__sections

    def __len__(self) -> int:
        return len(self.__sections)

    def __iter__(self) -> Iterator[str]:
        return (i.name for i in self.__sections.values())

    def destroy(self) -> None:
        """Release every section and every key of them."""
        for i in self.__sections.values():
            i.clear()
        self.__sections.clear()
        _log.debug('INI cache destroyed.')

    clear = destroy

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Ordered plain-dict snapshot, with original spelling."""
        return {i.name: dict(i.items()) for i in self.__sections.values()}

    def __repr__(self) -> str:
        return 'IniCache { .sections = %d }' % len(self.__sections)


def create_cache() -> IniCache:
    return IniCache()
