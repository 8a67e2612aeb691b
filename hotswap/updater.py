"""
更新入口

把 zip 归档中的文件逐个安装到目标目录。目标目录未指定时使用
当前可执行文件（解析符号链接后）所在的目录。

流程：``apply_zip`` -> ``ZipWalker.iterate`` -> ``UpdateDispatcher`` -> ``apply``。
第一个错误即中止整个更新，已经安装的文件不会回滚。
"""

from pathlib import Path
from typing import BinaryIO, Callable, Iterable, List, Optional, Union

from .archive.walker import DEFAULT_IGNORE_PATHS, ZipWalker
from .config.schema import ApplyOptions
from .errors import ExecutablePathError, UnsafeEntryError
from .install.installer import apply
from .utils.logging import apply_logger, done_logger
from .utils.paths import entry_destination, executable_real_path

# 安装器：(解压流, 指向具体文件的选项) -> 任意返回值，失败时抛出异常
Installer = Callable[[BinaryIO, ApplyOptions], object]
ExecutableResolver = Callable[[], Path]


class UpdateDispatcher:
    """归档条目分发器

    作为遍历器的访问者：计算条目的目标路径，派生出该条目专用的选项副本，
    再把解压流交给安装器。安装器抛出的异常原样向上传递。
    """

    def __init__(self, options: ApplyOptions, installer: Installer = apply):
        if not options.has_target:
            raise ValueError("分发器需要已确定的目标目录")
        self.options = options
        self.installer = installer
        self.applied: List[Path] = []

    def destination(self, name: str) -> Path:
        """条目在本机上的目标路径"""
        try:
            return entry_destination(self.options.target_path, name)
        except ValueError as e:
            raise UnsafeEntryError(str(e), name) from e

    def entry_options(self, name: str) -> ApplyOptions:
        """为单个条目派生选项，不修改共享的基础选项

        设置了 ``old_save_path`` 时把它当作备份目录，每个条目的旧文件
        保存到其中与条目名对应的位置，互不覆盖。
        """
        update = {"target_path": self.destination(name)}
        if self.options.old_save_path is not None:
            update["old_save_path"] = entry_destination(self.options.old_save_path, name)
        return self.options.model_copy(update=update)

    def __call__(self, name: str, stream: BinaryIO) -> None:
        entry_options = self.entry_options(name)
        apply_logger.debug(f"{name} -> {entry_options.target_path}")
        self.installer(stream, entry_options)
        self.applied.append(entry_options.target_path)


def resolve_target(
    options: ApplyOptions,
    executable_resolver: ExecutableResolver = executable_real_path,
) -> ApplyOptions:
    """确定目标目录

    ``target_path`` 已设置时原样使用，否则取当前可执行文件所在目录。

    Raises:
        ExecutablePathError: 可执行文件路径无法确定
    """
    if options.has_target:
        return options

    try:
        exe_path = executable_resolver()
    except Exception as e:
        raise ExecutablePathError(f"无法确定可执行文件路径: {e}") from e

    return options.model_copy(update={"target_path": Path(exe_path).parent})


def apply_zip(
    archive_path: Union[str, Path],
    options: Optional[ApplyOptions] = None,
    *,
    ignore_paths: Iterable[str] = DEFAULT_IGNORE_PATHS,
    installer: Installer = apply,
    executable_resolver: ExecutableResolver = executable_real_path,
) -> List[Path]:
    """把 zip 归档中的文件安装到目标目录

    Args:
        archive_path: zip 归档路径
        options: 安装选项，为 None 时使用默认选项
        ignore_paths: 忽略的路径片段
        installer: 单文件安装器
        executable_resolver: 可执行文件路径解析函数

    Returns:
        List[Path]: 按归档顺序已安装的目标路径

    Raises:
        UpdateError: 任一阶段失败（见 ``hotswap.errors``）
    """
    resolved = resolve_target(options or ApplyOptions(), executable_resolver)
    apply_logger.info(f"应用更新 {archive_path} -> {resolved.target_path}")

    dispatcher = UpdateDispatcher(resolved, installer)
    ZipWalker(archive_path, ignore_paths).iterate(dispatcher)

    done_logger.success(f"更新完成，共安装 {len(dispatcher.applied)} 个文件")
    return dispatcher.applied
