# -*- encoding: utf-8 -*-
# @File   : storage.py
# @Time   : 2024/10/13 02:30:11
# @Author : Kariko Lin

"""Where the bytes live, and how they become text.

The cache itself only knows `str`. Opening, sizing, reading and writing
a resource happen through a `Storage`, and bytes <-> str conversion
happens in `decode_buffer()` / `encode_text()`, right at this boundary.

Every `OSError` raised in here comes out as `StorageError`,
chained to the original one.
"""

import codecs
import logging
import os
from abc import ABCMeta, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from io import BytesIO, FileIO
from typing import Any

import chardet

from .consts import FALLBACK_CODEC, MIN_CODEC_CONFIDENCE
from .exceptions import InvalidParameter, StorageError

_log = logging.getLogger(__name__)


@contextmanager
def _io_guard(action: str, name: object) -> Iterator[None]:
    try:
        yield
    except StorageError:
        raise
    except OSError as e:
        raise StorageError(f'Unable to {action} "{name}": {e}') from e


class Storage(metaclass=ABCMeta):
    """Minimal byte storage the loader and saver talk to.

    Handles are opaque to callers, and should always be `close()`d.
    """
    @abstractmethod
    def open_for_read(self, name: str) -> Any:
        raise NotImplementedError

    @abstractmethod
    def query_length(self, handle: Any) -> int:
        raise NotImplementedError

    @abstractmethod
    def read_all(self, handle: Any, length: int) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def open_for_write(self, name: str, truncate: bool = True) -> Any:
        raise NotImplementedError

    @abstractmethod
    def write_all(self, handle: Any, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self, handle: Any) -> None:
        raise NotImplementedError


class FileStorage(Storage):
    """Unbuffered local files."""

    def open_for_read(self, name: str) -> FileIO:
        with _io_guard('open', name):
            return FileIO(name, 'r')

    def query_length(self, handle: FileIO) -> int:
        with _io_guard('query size of', handle.name):
            return os.fstat(handle.fileno()).st_size

    def read_all(self, handle: FileIO, length: int) -> bytes:
        buf = bytearray()
        with _io_guard('read', handle.name):
            # raw reads may come back short.
            while len(buf) < length:
                if not (chunk := handle.read(length - len(buf))):
                    break
                buf += chunk
        return bytes(buf)

    def open_for_write(self, name: str, truncate: bool = True) -> FileIO:
        with _io_guard('create', name):
            return FileIO(name, 'w' if truncate else 'a')

    def write_all(self, handle: FileIO, data: bytes) -> None:
        view = memoryview(data)
        with _io_guard('write', handle.name):
            while view:
                if not (written := handle.write(view)):
                    raise OSError('Nothing written')
                view = view[written:]

    def close(self, handle: FileIO) -> None:
        with _io_guard('close', handle.name):
            handle.close()


@dataclass(kw_only=True)
class _MemoryHandle:
    name: str
    writable: bool
    buf: BytesIO = field(default_factory=BytesIO)


class MemoryStorage(Storage):
    """Named in-memory blobs. Written data shows up on `close()`."""

    def __init__(self, blobs: dict[str, bytes] | None = None) -> None:
        self.blobs: dict[str, bytes] = dict(blobs or {})

    def open_for_read(self, name: str) -> _MemoryHandle:
        with _io_guard('open', name):
            if name not in self.blobs:
                raise FileNotFoundError(2, 'No such blob', name)
            return _MemoryHandle(
                name=name, writable=False, buf=BytesIO(self.blobs[name]))

    def query_length(self, handle: _MemoryHandle) -> int:
        return len(handle.buf.getvalue())

    def read_all(self, handle: _MemoryHandle, length: int) -> bytes:
        with _io_guard('read', handle.name):
            if handle.buf.closed:
                raise OSError(9, 'Handle already closed', handle.name)
            return handle.buf.read(length)

    def open_for_write(
        self, name: str, truncate: bool = True
    ) -> _MemoryHandle:
        handle = _MemoryHandle(name=name, writable=True)
        if not truncate:
            handle.buf.write(self.blobs.get(name, b''))
        return handle

    def write_all(self, handle: _MemoryHandle, data: bytes) -> None:
        with _io_guard('write', handle.name):
            if not handle.writable or handle.buf.closed:
                raise OSError(9, 'Handle not open for writing', handle.name)
            handle.buf.write(data)

    def close(self, handle: _MemoryHandle) -> None:
        if handle.buf.closed:
            return
        if handle.writable:
            self.blobs[handle.name] = handle.buf.getvalue()
        handle.buf.close()


def decode_buffer(raw: bytes, encoding: str | None = None) -> tuple[str, str]:
    """Decode `raw` and tell which codec did it.

    Try `encoding` first if given, then let `chardet` guess,
    and finally fall back to latin-1, which never fails.

    A utf-8 BOM is always dropped, and a guessed `ascii` is widened to
    utf-8, so that whatever gets added later can still be written back.
    """
    if encoding is not None:
        try:
            # plain utf-8 would keep the BOM as a "char" of the first line.
            if codecs.lookup(encoding).name == 'utf-8':
                return raw.decode('utf-8-sig'), encoding
            return raw.decode(encoding), encoding
        except LookupError as e:
            raise InvalidParameter(f'Unknown encoding "{encoding}".') from e
        except UnicodeDecodeError:
            _log.warning('Not a valid "%s" text, guessing codec.', encoding)

    codec = chardet.detect(raw)
    if (codec is None or not codec['encoding']
            or codec['confidence'] < MIN_CODEC_CONFIDENCE):
        codec = {'encoding': 'utf-8'}
    elif codec['encoding'].lower() == 'ascii':
        codec = {'encoding': 'utf-8'}

    # fallbacks
    try:
        return raw.decode(codec['encoding']), codec['encoding']
    except (UnicodeDecodeError, LookupError):
        _log.warning(
            'Unable to decode as "%s", falling back to %s.',
            codec['encoding'], FALLBACK_CODEC)
        return raw.decode(FALLBACK_CODEC), FALLBACK_CODEC


def encode_text(text: str, encoding: str | None = None) -> bytes:
    codec = encoding or 'utf-8'
    try:
        return text.encode(codec)
    except LookupError as e:
        raise InvalidParameter(f'Unknown encoding "{codec}".') from e
    except UnicodeEncodeError as e:
        raise InvalidParameter(
            f'The cache holds text not representable in "{codec}".') from e
