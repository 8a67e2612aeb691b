"""
Inspect 命令实现

列出更新包中的条目及其分类（安装 / 目录 / 忽略）。
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...archive.walker import DEFAULT_IGNORE_PATHS, EntryKind, ZipWalker
from ...errors import UpdateError
from ...utils.paths import format_size


console = Console()

_KIND_LABELS = {
    EntryKind.FILE: "[green]安装[/green]",
    EntryKind.DIRECTORY: "[dim]目录[/dim]",
    EntryKind.IGNORED: "[yellow]忽略[/yellow]",
}


def inspect_command(
    archive: str = typer.Argument(..., help="zip 更新包路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_all: bool = typer.Option(False, "--all", "-a", help="同时显示目录和被忽略的条目"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="额外忽略的路径片段，可多次指定"),
) -> None:
    """列出更新包中的条目

    示例:
        hotswap inspect update.zip
        hotswap inspect update.zip --all
        hotswap inspect update.zip --json
    """
    archive_path = Path(archive)

    if not archive_path.exists():
        console.print(f"[red]更新包不存在: {archive_path}[/red]")
        raise typer.Exit(1)

    ignore_paths = set(DEFAULT_IGNORE_PATHS)
    if ignore:
        ignore_paths.update(ignore)

    try:
        rows = [
            {
                'name': info.filename,
                'kind': kind.value,
                'size': info.file_size,
                'compressed_size': info.compress_size,
            }
            for info, kind in ZipWalker(archive_path, ignore_paths).entries()
        ]
    except UpdateError as e:
        console.print(f"检查更新包失败: {e}", style="red", markup=False)
        raise typer.Exit(1)

    if json_output:
        console.print_json(json.dumps(rows, ensure_ascii=False))
        return

    _display_entries(archive_path, rows, show_all)


def _display_entries(archive_path: Path, rows: List[dict], show_all: bool) -> None:
    """以表格形式显示条目"""
    table = Table(title=f"更新包: {archive_path.name}")
    table.add_column("条目", style="cyan")
    table.add_column("处理", no_wrap=True)
    table.add_column("大小", justify="right")

    total_files = 0
    total_size = 0
    for row in rows:
        kind = EntryKind(row['kind'])
        if kind is EntryKind.FILE:
            total_files += 1
            total_size += row['size']
        elif not show_all:
            continue
        table.add_row(escape(row["name"]), _KIND_LABELS[kind], format_size(row['size']))

    console.print(table)
    console.print(f"待安装文件: {total_files} 个，共 {format_size(total_size)}")
