# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/10/10 01:16:53
# @Author : Kariko Lin

"""In-memory INI cache for setup tooling.

```python
from inicache import load, save, InsertionType

cache = load('txtsetup.sif', string_mode=True)
sect = cache.add_section('SetupData')
sect.insert_key(sect.find_key('SourcePath'), InsertionType.AFTER,
                'DefaultPath', r'\\ReactOS')
save(cache, 'txtsetup.sif')
```
"""

import logging

from .consts import ErrorKind, InsertionType
from .cursor import IniKeyCursor, find_close, find_first_value, find_next_value
from .exceptions import (
    IniCacheError,
    InvalidParameter,
    KeyNotFound,
    ResourceExhausted,
    StorageError
)
from .model import IniCache, IniKey, IniSection, create_cache
from .parser import (
    IniCacheParser,
    IniYamlParser,
    load,
    load_by_handle,
    save,
    save_by_handle
)
from .scanner import load_from_memory
from .serializer import buffer_size, render
from .storage import FileStorage, MemoryStorage, Storage

__all__ = [
    'IniCache', 'IniSection', 'IniKey', 'create_cache',
    'InsertionType', 'ErrorKind',
    'IniKeyCursor', 'find_first_value', 'find_next_value', 'find_close',
    'IniCacheError', 'InvalidParameter', 'KeyNotFound',
    'ResourceExhausted', 'StorageError',
    'IniCacheParser', 'IniYamlParser', 'load', 'save',
    'load_by_handle', 'save_by_handle', 'load_from_memory',
    'buffer_size', 'render',
    'Storage', 'FileStorage', 'MemoryStorage'
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
