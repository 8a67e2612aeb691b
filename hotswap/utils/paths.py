"""
路径工具

提供可执行文件定位、归档条目路径换算等路径处理函数。
"""

import os
import re
import sys
from pathlib import Path, PurePosixPath
from typing import List, Union

# Windows 盘符前缀
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")
_DRIVE_ABSOLUTE = re.compile(r"^[A-Za-z]:[/\\]")


def expand_path(path: Union[str, Path]) -> Path:
    """扩展路径（处理环境变量和用户目录）

    Args:
        path: 原始路径

    Returns:
        Path: 扩展后的路径
    """
    if isinstance(path, str):
        path = os.path.expandvars(path)
        path = os.path.expanduser(path)

    return Path(path)


def executable_real_path() -> Path:
    """获取当前运行程序的真实路径（解析符号链接）

    冻结（PyInstaller 等打包）程序取 ``sys.executable``，
    否则取 ``sys.argv[0]``，即启动脚本本身。

    Returns:
        Path: 可执行文件的绝对路径

    Raises:
        OSError: 路径无法确定或不存在
    """
    if getattr(sys, "frozen", False):
        raw = sys.executable
    else:
        raw = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable

    if not raw:
        raise OSError("无法确定当前可执行文件路径")

    real = Path(os.path.realpath(os.path.abspath(raw)))
    if not real.exists():
        raise FileNotFoundError(f"可执行文件不存在: {real}")
    return real


def split_entry_name(name: str) -> List[str]:
    """按归档内部分隔符 ``/`` 拆分条目名，去掉空片段"""
    return [part for part in name.split("/") if part]


def _has_drive(name: str) -> bool:
    """判断条目名是否带 Windows 盘符

    ``C:/x``、``C:\\x`` 在任何平台上都视为绝对路径；``c:x`` 这类相对盘符的写法
    只在 Windows 上有意义，其他平台上是合法的文件名。
    """
    if _DRIVE_ABSOLUTE.match(name):
        return True
    return os.name == 'nt' and _DRIVE_PREFIX.match(name) is not None


def entry_destination(base: Union[str, Path], name: str) -> Path:
    """计算条目在本机上的目标路径

    归档中的条目名始终以 ``/`` 分隔，这里拆分后再用本机分隔符拼接。

    Args:
        base: 目标根目录
        name: 归档中的条目名

    Returns:
        Path: 目标路径

    Raises:
        ValueError: 条目名为空、是绝对路径或包含 ``..``
    """
    if PurePosixPath(name).is_absolute() or name.startswith("\\") or _has_drive(name):
        raise ValueError(f"不允许使用绝对路径: {name}")

    parts = split_entry_name(name)
    if not parts:
        raise ValueError(f"条目名为空: {name!r}")
    if any(part == ".." for part in name.replace("\\", "/").split("/")):
        raise ValueError(f"检测到目录穿越尝试: {name}")

    return Path(base).joinpath(*parts)


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
