"""
单文件安装

把一个字节流写到目标位置，支持替换正在运行的可执行文件：
先写入同目录下的 ``.<name>.new``，再把旧文件改名为 ``.<name>.old``，
最后把新文件改名到目标位置。改名对正在运行的程序在 Windows 和 POSIX 上都可行。
"""

import contextlib
import ctypes
import os
from pathlib import Path
from typing import BinaryIO, Optional

from ..config.schema import ApplyOptions
from ..errors import InstallError
from ..utils.logging import install_logger
from ..utils.paths import executable_real_path

CHUNK_SIZE = 256 * 1024  # 256KB 缓冲区
_FILE_ATTRIBUTE_HIDDEN = 0x02


def _sidecar_path(target: Path, suffix: str) -> Path:
    return target.with_name(f".{target.name}{suffix}")


def _discard(path: Path) -> None:
    with contextlib.suppress(OSError):
        path.unlink()


def _hide_file(path: Path) -> bool:
    """在 Windows 上把文件标记为隐藏；其他平台直接返回 False"""
    if os.name != 'nt':
        return False
    return bool(ctypes.windll.kernel32.SetFileAttributesW(str(path), _FILE_ATTRIBUTE_HIDDEN))


def _write_new_file(stream: BinaryIO, new_path: Path, mode: int) -> int:
    written = 0
    with open(new_path, 'wb') as out:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            out.write(chunk)
            written += len(chunk)
    os.chmod(new_path, mode)
    return written


def apply(stream: BinaryIO, options: Optional[ApplyOptions] = None) -> Path:
    """把 ``stream`` 的全部内容安装到 ``options.target_path``

    Args:
        stream: 可读的字节流，会被读到末尾
        options: 安装选项；``target_path`` 为空时替换当前可执行文件本身

    Returns:
        Path: 实际写入的目标路径

    Raises:
        InstallError: 写入或替换失败
    """
    options = options or ApplyOptions()
    if options.has_target:
        target = Path(options.target_path)
    else:
        try:
            target = executable_real_path()
        except OSError as e:
            raise InstallError(f"无法确定当前可执行文件路径: {e}", Path()) from e

    if target.is_dir():
        raise InstallError(f"目标路径是目录，无法写入文件: {target}", target)

    new_path = _sidecar_path(target, ".new")
    old_path = Path(options.old_save_path) if options.old_save_path else _sidecar_path(target, ".old")

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        size = _write_new_file(stream, new_path, options.target_mode)
    except Exception as e:
        _discard(new_path)
        raise InstallError(f"写入新文件失败 {target}: {e}", target) from e

    # 上一次更新可能留下了 .old（Windows 下当时无法删除）
    try:
        if old_path.exists():
            old_path.unlink()
        had_old = target.exists()
        if had_old:
            old_path.parent.mkdir(parents=True, exist_ok=True)
            os.replace(target, old_path)
    except OSError as e:
        _discard(new_path)
        raise InstallError(f"移走旧文件失败 {target}: {e}", target) from e

    try:
        os.replace(new_path, target)
    except OSError as e:
        rollback_error: Optional[OSError] = None
        if had_old:
            try:
                os.replace(old_path, target)
            except OSError as restore_error:
                rollback_error = restore_error
        _discard(new_path)
        raise InstallError(f"替换文件失败 {target}: {e}", target, rollback_error) from e

    if had_old and not options.old_save_path:
        try:
            old_path.unlink()
        except OSError as e:
            # Windows 下正在运行的程序无法删除，只能隐藏，下次更新时再清理
            if _hide_file(old_path):
                install_logger.warning(f"旧文件无法删除，已隐藏: {old_path}")
            else:
                install_logger.warning(f"旧文件无法删除: {old_path}: {e}")

    install_logger.debug(f"已安装 {target} ({size} 字节)")
    return target

