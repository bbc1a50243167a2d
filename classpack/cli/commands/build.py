"""
Build 命令实现

组装 classpath 的核心命令。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...config import load_config, ConfigError, ConfigValidationError
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def _format_cause_chain(exc: BaseException) -> str:
    lines = []
    current = exc
    while current is not None:
        lines.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return "\n  ↳ ".join(lines)


def build_command(
    config: str = typer.Option(..., "--config", "-c", help="配置文件路径"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="覆盖配置中的输出目录"),
    strict: bool = typer.Option(False, "--strict", help="输出文件已存在时报错"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """组装 classpath

    按配置复制或重新打包所有 JAR，并写出 classpath.txt。

    示例:
        classpack build -c classpack.yaml
        classpack build -c classpack.yaml -o build/classpath --strict
    """
    from ...build.builder import ClasspathBuilder

    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        console.print(f"[cyan]正在加载配置文件[/cyan]: {config}")
        config_obj = load_config(Path(config))

        if strict:
            config_obj.strict_create = True
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
        if total > 0 and verbose:
            percentage = (current / total) * 100
            console.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)", markup=True)

    builder = ClasspathBuilder()
    result = builder.build(config_obj, output_dir, progress_callback=progress_callback)

    if not result.success:
        console.print(f"[red]✗ 构建失败[/red]: {result.error}")
        if result.exception is not None:
            console.print(_format_cause_chain(result.exception), markup=False)
            if log_file or verbose:
                console.print("[yellow]详细错误信息:[/yellow]")
                console.print("".join(traceback.format_exception(result.exception)), markup=False)
        raise typer.Exit(1)

    console.print(f"[green]✓ classpath 组装完成[/green]: {result.manifest_path}")
    console.print(f"[blue]归档数量[/blue]: {len(result.elements)}")
    if config_obj.minify is not None:
        console.print(f"[blue]移除类[/blue]: {result.removable_units}")
