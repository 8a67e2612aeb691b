"""
hotswap - 自更新程序的 zip 更新应用引擎

Streams a zip archive's entries and installs each file next to the running
executable (or into an explicit target directory).
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .install.installer import apply
from .archive.walker import DEFAULT_IGNORE_PATHS, ZipWalker, should_ignore, stream_zip
from .config.schema import ApplyOptions, HotswapConfig
from .errors import (
    ArchiveOpenError,
    EntryApplyError,
    EntryOpenError,
    ExecutablePathError,
    InstallError,
    UnsafeEntryError,
    UpdateError,
)
from .updater import UpdateDispatcher, apply_zip

__all__ = [
    "__version__",
    # 入口
    "apply_zip",
    "apply",
    "UpdateDispatcher",
    "ZipWalker",
    "stream_zip",
    "should_ignore",
    "DEFAULT_IGNORE_PATHS",
    # 配置
    "ApplyOptions",
    "HotswapConfig",
    # 异常
    "UpdateError",
    "ArchiveOpenError",
    "EntryOpenError",
    "EntryApplyError",
    "UnsafeEntryError",
    "ExecutablePathError",
    "InstallError",
]
