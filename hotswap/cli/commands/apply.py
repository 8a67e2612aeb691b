"""
Apply 命令实现

把 zip 更新包安装到目标目录。
"""

from pathlib import Path
from typing import BinaryIO, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ...install.installer import apply as install_file
from ...archive.walker import EntryKind, ZipWalker
from ...config import ConfigError, ConfigValidationError, HotswapConfig, load_config, merge_apply_options
from ...config.schema import ApplyOptions
from ...errors import EntryError, UpdateError
from ...updater import UpdateDispatcher, apply_zip, resolve_target
from ...utils.logging import OutputLevel, set_log_file, set_log_level


console = Console()


def apply_command(
    archive: str = typer.Argument(..., help="zip 更新包路径"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="目标目录（默认为当前可执行文件所在目录）"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径"),
    mode: Optional[str] = typer.Option(None, "--mode", help="安装文件的权限（八进制，如 0755）"),
    keep_old: Optional[str] = typer.Option(None, "--keep-old", help="被替换文件的备份目录（按条目路径保存）"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="额外忽略的路径片段，可多次指定"),
    dry_run: bool = typer.Option(False, "--dry-run", help="只显示安装计划，不写入文件"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """应用更新包

    逐个解压 zip 中的文件并安装到目标目录，遇到第一个错误即停止。

    示例:
        hotswap apply update.zip
        hotswap apply update.zip -t /opt/app
        hotswap apply update.zip -c hotswap.yaml --dry-run
    """
    if verbose:
        set_log_level(OutputLevel.DEBUG)
    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    archive_path = Path(archive)
    if not archive_path.exists():
        console.print(f"[red]更新包不存在: {archive_path}[/red]")
        raise typer.Exit(1)

    try:
        base_config = load_config(config) if config else HotswapConfig()
        options = merge_apply_options(base_config.apply, target_path=target, target_mode=mode, old_save_path=keep_old)
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"配置错误: {e}", style="red", markup=False)
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"参数错误: {e}", style="red", markup=False)
        raise typer.Exit(1)

    ignore_paths = set(base_config.ignore_paths)
    if ignore:
        ignore_paths.update(ignore)

    try:
        if dry_run:
            _show_plan(archive_path, options, ignore_paths)
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("应用更新...", total=None)

            def installer(stream: BinaryIO, entry_options: ApplyOptions) -> Path:
                progress.update(task, description=f"安装 {entry_options.target_path}")
                return install_file(stream, entry_options)

            applied = apply_zip(archive_path, options, ignore_paths=ignore_paths, installer=installer)

        console.print(f"✓ 更新完成，共安装 [green]{len(applied)}[/green] 个文件")

    except UpdateError as e:
        console.print(f"更新失败 [{e.phase}]: {e}", style="red", markup=False)
        if isinstance(e, EntryError):
            console.print(f"失败条目: {e.entry_name}", markup=False)
        console.print("[yellow]更新不是事务性的，目标目录中可能已有部分文件被替换[/yellow]")
        raise typer.Exit(1)


def _show_plan(archive_path: Path, options: ApplyOptions, ignore_paths: set) -> None:
    """打印安装计划，不打开任何条目流"""
    resolved = resolve_target(options)
    dispatcher = UpdateDispatcher(resolved)

    table = Table(title=f"安装计划 -> {resolved.target_path}")
    table.add_column("条目", style="cyan")
    table.add_column("目标路径", style="green")

    count = 0
    for info, kind in ZipWalker(archive_path, ignore_paths).entries():
        if kind is not EntryKind.FILE:
            continue
        try:
            destination = escape(str(dispatcher.destination(info.filename)))
        except UpdateError as e:
            destination = f"[red]{escape(str(e))}[/red]"
        table.add_row(escape(info.filename), destination)
        count += 1

    console.print(table)
    console.print(f"共 {count} 个文件将被安装（dry-run，未写入任何文件）")
