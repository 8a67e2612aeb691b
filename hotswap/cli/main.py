"""
hotswap CLI 主入口

提供命令行接口，支持 apply/inspect/validate/example 等命令。
"""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from ..utils import OutputLevel, configure_logging
from .commands import apply, inspect, validate


app = typer.Typer(
    name="hotswap",
    help="hotswap - 把 zip 更新包应用到程序目录",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"hotswap v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level=OutputLevel.DEBUG if verbose else OutputLevel.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """hotswap - 把 zip 更新包应用到程序目录

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("apply", help="应用更新包")(apply.apply_command)
app.command("inspect", help="列出更新包中的条目")(inspect.inspect_command)
app.command("validate", help="验证配置文件")(validate.validate_command)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "hotswap.yaml",
        "--output", "-o",
        help="输出配置文件路径"
    )
) -> None:
    """生成示例配置文件"""
    from ..config import ConfigError, HotswapConfig, save_config
    from ..config.schema import ApplyOptions

    config = HotswapConfig(
        apply=ApplyOptions(target_path="./app", target_mode=0o755),
        ignore=[".DS_Store", "__MACOSX", "Thumbs.db"],
    )

    try:
        save_config(config, output)
    except ConfigError as e:
        console.print(f"[red]生成示例配置失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例配置文件已生成: [green]{output}[/green]")
    console.print("请根据需要修改配置文件，然后运行:")
    console.print(f"  [cyan]hotswap apply update.zip -c {output}[/cyan]")


if __name__ == "__main__":
    app()
