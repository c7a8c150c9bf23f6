# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2024/10/10 01:04:45
# @Author : Kariko Lin

"""Load an `IniCache` from, and save it to, a named resource.

Reading: open -> query size -> read it all -> decode (guess if needed)
-> append the NUL sentinel -> scan. Writing: render the whole text
first, then a single write into a truncated resource.
The resource is closed on every path. The `*_handle` / `*_by_handle`
variants do the same on a handle the caller opened, and leave it open.

There is also a YAML exporter for humans (and diff tools) to read.
"""

import logging
from typing import Any

import yaml

from .abstract import FileHandler
from .consts import SENTINEL
from .exceptions import InvalidParameter
from .model import IniCache
from .scanner import load_from_memory
from .serializer import render
from .storage import FileStorage, Storage, decode_buffer, encode_text

_log = logging.getLogger(__name__)


class IniCacheParser(FileHandler[IniCache]):
    def __init__(
        self,
        filename: str,
        encoding: str | None = None, *,
        string_mode: bool = False,
        storage: Storage | None = None
    ) -> None:
        """The keyword `string_mode` means that values may be
        `"quoted"`, with the quotes stripped when reading.

        With `encoding=None` the codec is guessed by `chardet`,
        and the guess is kept for `write()`.
        """
        super().__init__(filename, encoding)
        self._string_mode = string_mode
        self._storage = FileStorage() if storage is None else storage

    @property
    def string_mode(self) -> bool:
        return self._string_mode

    def read(self) -> IniCache:
        storage = self._storage
        handle = storage.open_for_read(self._fn)
        try:
            return self.read_handle(handle)
        finally:
            storage.close(handle)

    def read_handle(self, handle: Any) -> IniCache:
        """Load from a handle already opened by `storage`.

        The handle is left open, closing it is up to the caller.
        """
        storage = self._storage
        length = storage.query_length(handle)
        _log.debug('File size: %d', length)
        raw = storage.read_all(handle, length)

        text, self._codec = decode_buffer(raw, self._codec)
        del raw
        _log.debug('Read "%s" as %s.', self._fn, self._codec)
        return load_from_memory(text + SENTINEL, self._string_mode)

    def write(self, instance: IniCache) -> None:
        """Save to the resource, replacing whatever was there.

        Note: values are written as they are,
        quotes stripped in string mode are NOT restored.
        """
        # render before opening, a bad cache must not truncate the file.
        data = self._encode(instance)
        storage = self._storage
        handle = storage.open_for_write(self._fn, truncate=True)
        try:
            self._write_encoded(handle, data)
        finally:
            storage.close(handle)

    def write_handle(self, instance: IniCache, handle: Any) -> None:
        """Save through a handle already opened for writing by `storage`.
        The handle is left open."""
        self._write_encoded(handle, self._encode(instance))

    def _encode(self, instance: IniCache) -> bytes:
        if not isinstance(instance, IniCache):
            raise InvalidParameter(f'Not an INI cache: {instance!r}.')
        return encode_text(render(instance), self._codec)

    def _write_encoded(self, handle: Any, data: bytes) -> None:
        self._storage.write_all(handle, data)
        _log.debug('Saved %d bytes to "%s".', len(data), self._fn)

    def __str__(self) -> str:
        return "INI cache: " + super().__str__() + f"({self._codec})"


def load(
    filename: str,
    string_mode: bool = False, *,
    encoding: str | None = None,
    storage: Storage | None = None
) -> IniCache:
    return IniCacheParser(
        filename, encoding, string_mode=string_mode, storage=storage).read()


def load_by_handle(
    handle: Any,
    string_mode: bool = False, *,
    encoding: str | None = None,
    storage: Storage | None = None
) -> IniCache:
    """Like `load()`, but from an open handle of `storage`
    (a `FileStorage` by default). The handle is NOT closed."""
    return IniCacheParser(
        _handle_name(handle), encoding,
        string_mode=string_mode, storage=storage).read_handle(handle)


def save(
    cache: IniCache,
    filename: str, *,
    encoding: str | None = None,
    storage: Storage | None = None
) -> None:
    IniCacheParser(filename, encoding, storage=storage).write(cache)


def save_by_handle(
    cache: IniCache,
    handle: Any, *,
    encoding: str | None = None,
    storage: Storage | None = None
) -> None:
    """Like `save()`, but into a handle of `storage` opened for writing.
    The handle is NOT closed, nor truncated."""
    IniCacheParser(
        _handle_name(handle), encoding, storage=storage
    ).write_handle(cache, handle)


def _handle_name(handle: Any) -> str:
    # only used in logs.
    return str(getattr(handle, 'name', handle))


class IniYamlParser(FileHandler[IniCache]):
    """Dump the cache as an ordered YAML mapping:

        ```yaml
        Section:
          Key: Value
        ```

    and read it back. Empty sections become `null`.
    """

    def __init__(self, filename: str, encoding: str = 'utf-8') -> None:
        super().__init__(filename, encoding)

    def read(self) -> IniCache:
        with open(self._fn, 'r', encoding=self._codec) as fp:
            src = yaml.safe_load(fp) or {}
        if not isinstance(src, dict):
            raise InvalidParameter(
                f'"{self._fn}" is not a mapping of sections.')
        ret = IniCache()
        for decl, pairs in src.items():
            section = ret.add_section(str(decl))
            for k, v in (pairs or {}).items():
                if v is None:
                    _log.debug('[%s] %s has no value, skipped.', decl, k)
                    continue
                # may there be some pure digits considered as int
                section.add_key(str(k), str(v))
        return ret

    def write(self, instance: IniCache) -> None:
        data = {
            decl: (dict(pairs) or None) for decl, pairs in instance.items()
        }
        with open(self._fn, 'w', encoding=self._codec) as fp:
            yaml.safe_dump(
                data, fp, allow_unicode=True, sort_keys=False,
                default_flow_style=False)
