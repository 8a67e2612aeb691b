"""归档读取模块"""

from .walker import (
    DEFAULT_IGNORE_PATHS,
    EntryKind,
    EntryVisitor,
    ZipWalker,
    classify_entry,
    should_ignore,
    stream_zip,
)

__all__ = [
    "DEFAULT_IGNORE_PATHS",
    "EntryKind",
    "EntryVisitor",
    "ZipWalker",
    "classify_entry",
    "should_ignore",
    "stream_zip",
]
