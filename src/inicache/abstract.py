# -*- encoding: utf-8 -*-
# @File   : abstract.py
# @Time   : 2024/09/08 20:22:30
# @Author : Kariko Lin

from abc import ABCMeta, abstractmethod
from typing import Generic, TypeVar

T = TypeVar('T')


class SerializedComponents(Generic[T], metaclass=ABCMeta):
    """A cursor walking an ordered container, one element a time.

    It never owns what it walks, and it is up to the caller
    not to mutate the container while a cursor is alive.
    """
    @abstractmethod
    def reset_seek(self) -> None:
        """Go back to the first element."""
        raise NotImplementedError

    @property
    @abstractmethod
    def seekable(self) -> bool:
        """Whether `current` points to an element."""
        raise NotImplementedError

    @abstractmethod
    def next(self) -> bool:
        """Step forward. `False` if there is nothing left."""
        raise NotImplementedError

    @property
    @abstractmethod
    def current(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> 'SerializedComponents[T]':
        return self

    def __exit__(self, *_) -> None:
        self.close()

    @abstractmethod
    def __str__(self) -> str:
        raise NotImplementedError


class FileHandler(Generic[T], metaclass=ABCMeta):
    """Reads `T` from, and writes `T` to, one named resource.

    `encoding=None` means "guess it when reading".
    """
    def __init__(self, filename: str, encoding: str | None = None) -> None:
        self._fn = filename
        self._codec = encoding

    @property
    def encoding(self) -> str | None:
        return self._codec

    @abstractmethod
    def read(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def write(self, instance: T) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return self._fn

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._fn!r}, {self._codec!r})'
