# -*- encoding: utf-8 -*-
# @File   : exceptions.py
# @Time   : 2024/10/12 21:40:02
# @Author : Kariko Lin

"""Errors raised by the INI cache.

Every error carries an `ErrorKind`, so callers may either catch the
concrete class or just switch on `err.kind`.
Lookups that simply miss (`get_section()`, `find_key()`) return `None`
rather than raising anything.
"""

from .consts import ErrorKind


class IniCacheError(Exception):
    kind: ErrorKind

    # KeyError and OSError both have their own `__str__`,
    # so do not rely on `super()` here.
    def __str__(self) -> str:
        msg = str(self.args[0]) if self.args else ''
        return f'[{self.kind.value}] {msg}'


class ResourceExhausted(IniCacheError, MemoryError):
    """A section or key node could not be allocated."""
    kind = ErrorKind.RESOURCE_EXHAUSTED


class InvalidParameter(IniCacheError, ValueError):
    """Empty (or non-str) names and values, foreign anchors,
    closed cursors and so on. Nothing is modified."""
    kind = ErrorKind.INVALID_ARGUMENT


class KeyNotFound(IniCacheError, KeyError):
    kind = ErrorKind.NOT_FOUND


class StorageError(IniCacheError, OSError):
    """Raised from the storage collaborator,
    always chained to the original `OSError`."""
    kind = ErrorKind.IO_FAILURE
