# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2024/10/10 01:15:56
# @Author : Kariko Lin

from enum import Enum


class InsertionType(int, Enum):
    """Where `IniSection.insert_key()` places a *new* key,
    relative to the anchor key."""
    FIRST = 0
    LAST = 1
    BEFORE = 2  # falls back to FIRST when anchor is unset or the head.
    AFTER = 3   # falls back to LAST when anchor is unset or the tail.


class ErrorKind(str, Enum):
    RESOURCE_EXHAUSTED = 'resource-exhausted'
    INVALID_ARGUMENT = 'invalid-argument'
    NOT_FOUND = 'not-found'
    IO_FAILURE = 'io-failure'


class IniMark(str, Enum):
    SECTION_OPEN = '['
    SECTION_CLOSE = ']'
    PAIRING = '='
    COMMENT = ';'
    QUOTE = '"'
    LINE_END = '\r\n'


# the scanner stops here, wherever it sits in the buffer.
SENTINEL = '\0'

# "[" + "]" + "\r\n"
SECTION_OVERHEAD = 4
# "=" + "\r\n"
KEY_OVERHEAD = 3
# blank line between two sections, never a trailing one.
SECTION_SEPARATOR = 2

# chardet guesses below this are not trusted.
MIN_CODEC_CONFIDENCE = 0.8
# every single byte maps in latin-1, so decoding never fails.
FALLBACK_CODEC = 'latin-1'
