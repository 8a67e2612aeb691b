"""
归档遍历器

按归档中存储的顺序逐个遍历 zip 条目，跳过目录和被忽略的条目，
为每个需要安装的文件打开解压流并交给访问者处理。

同一时刻最多只有一个条目流处于打开状态：访问者返回（或抛出异常）后
立即关闭当前流，再前进到下一个条目，因此内存占用与归档大小无关。
"""

import zipfile
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, FrozenSet, Iterable, Iterator, Optional, Tuple, Union

from ..errors import ArchiveOpenError, EntryApplyError, EntryOpenError
from ..utils.logging import open_logger, scan_logger, skip_logger

# 平台元数据产物，任何层级出现都不安装
DEFAULT_IGNORE_PATHS: FrozenSet[str] = frozenset({".DS_Store", "__MACOSX"})

# 访问者：(条目名, 解压流) -> None，失败时抛出异常
EntryVisitor = Callable[[str, BinaryIO], None]


class EntryKind(str, Enum):
    """条目分类"""
    FILE = "file"
    DIRECTORY = "directory"
    IGNORED = "ignored"


def should_ignore(name: str, ignore_paths: Iterable[str] = DEFAULT_IGNORE_PATHS) -> bool:
    """判断条目是否应被忽略

    按 ``/`` 拆分条目名，任一片段与忽略规则精确相等（区分大小写）即忽略，
    因此规则既能匹配文件名，也能匹配任意层级的目录名。
    """
    rules = ignore_paths if isinstance(ignore_paths, (set, frozenset)) else frozenset(ignore_paths)
    return any(part in rules for part in name.split("/"))


def classify_entry(info: zipfile.ZipInfo, ignore_paths: Iterable[str] = DEFAULT_IGNORE_PATHS) -> EntryKind:
    """对单个条目分类；忽略规则优先于目录判断"""
    if should_ignore(info.filename, ignore_paths):
        return EntryKind.IGNORED
    if info.is_dir():
        return EntryKind.DIRECTORY
    return EntryKind.FILE


class ZipWalker:
    """zip 归档遍历器

    每次 ``iterate`` 调用独占一个归档句柄，无论正常结束还是出错都会关闭。
    """

    def __init__(self, archive_path: Union[str, Path], ignore_paths: Optional[Iterable[str]] = None):
        self.archive_path = Path(archive_path)
        self.ignore_paths: FrozenSet[str] = frozenset(
            DEFAULT_IGNORE_PATHS if ignore_paths is None else ignore_paths
        )

    def _open(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.archive_path, 'r')
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveOpenError(f"无法打开归档 {self.archive_path}: {e}", self.archive_path) from e

    def entries(self) -> Iterator[Tuple[zipfile.ZipInfo, EntryKind]]:
        """按存储顺序列出条目及其分类，不打开任何条目流"""
        with self._open() as zf:
            scan_logger.debug(f"扫描归档: {self.archive_path}")
            for info in zf.infolist():
                yield info, classify_entry(info, self.ignore_paths)

    def iterate(self, visitor: EntryVisitor) -> int:
        """遍历归档并对每个需要安装的文件调用访问者

        Args:
            visitor: 接收 (条目名, 解压流) 的回调；流在回调返回后即被关闭，
                回调不能保留它

        Returns:
            int: 被访问的条目数量

        Raises:
            ArchiveOpenError: 归档无法打开
            EntryOpenError: 条目流无法打开
            EntryApplyError: 访问者抛出异常（原异常保存在 ``__cause__``）
        """
        visited = 0
        with self._open() as zf:
            open_logger.debug(f"打开归档: {self.archive_path}")

            for info in zf.infolist():
                name = info.filename
                kind = classify_entry(info, self.ignore_paths)
                if kind is EntryKind.IGNORED:
                    skip_logger.debug(f"忽略条目: {name}")
                    continue
                if kind is EntryKind.DIRECTORY:
                    continue

                try:
                    stream = zf.open(info, 'r')
                except (zipfile.BadZipFile, NotImplementedError, RuntimeError, ValueError, OSError) as e:
                    raise EntryOpenError(f"无法打开条目 {name}: {e}", name) from e

                with stream:
                    try:
                        visitor(name, stream)
                    except Exception as e:
                        raise EntryApplyError(f"处理条目失败 {name}: {e}", name) from e
                visited += 1

        return visited


def stream_zip(
    archive_path: Union[str, Path],
    visitor: EntryVisitor,
    ignore_paths: Optional[Iterable[str]] = None,
) -> int:
    """便捷函数：遍历归档中需要安装的文件"""
    return ZipWalker(archive_path, ignore_paths).iterate(visitor)
