"""
更新过程中的异常定义

所有异常都带有 ``phase`` 属性，标明失败发生在哪个阶段，
调用方据此决定如何提示用户。原始异常通过 ``__cause__`` 保留。
"""

from pathlib import Path
from typing import Optional


class UpdateError(Exception):
    """更新错误基类"""
    phase = "update"


class ArchiveOpenError(UpdateError):
    """无法打开归档（不存在、不可读、不是 zip）"""
    phase = "open-archive"

    def __init__(self, message: str, archive_path: Optional[Path] = None):
        super().__init__(message)
        self.archive_path = archive_path


class EntryError(UpdateError):
    """与某个归档条目相关的错误"""

    def __init__(self, message: str, entry_name: str):
        super().__init__(message)
        self.entry_name = entry_name


class EntryOpenError(EntryError):
    """条目的解压流无法打开"""
    phase = "open-entry"


class EntryApplyError(EntryError):
    """条目处理（安装）失败"""
    phase = "apply-entry"


class UnsafeEntryError(EntryError):
    """条目路径会落到目标目录之外"""
    phase = "resolve-entry"


class ExecutablePathError(UpdateError):
    """无法确定当前可执行文件路径"""
    phase = "executable-path"


class InstallError(UpdateError):
    """单个文件写入/替换失败

    ``rollback_error`` 不为 None 时说明旧文件也没能恢复，目标位置可能已经缺失。
    """
    phase = "install"

    def __init__(self, message: str, target: Path, rollback_error: Optional[BaseException] = None):
        super().__init__(message)
        self.target = target
        self.rollback_error = rollback_error
