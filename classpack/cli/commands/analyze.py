"""
Analyze 命令实现

只对 classpath 做可达性分析并汇总每个归档的结果，不写出任何文件。
"""

from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...config import load_config, ConfigError, ConfigValidationError


console = Console()


def analyze_command(
    config: str = typer.Option(..., "--config", "-c", help="配置文件路径"),
    show_removable: bool = typer.Option(False, "--show-removable", help="列出所有可移除的类"),
) -> None:
    """分析类可达性

    示例:
        classpack analyze -c classpack.yaml
        classpack analyze -c classpack.yaml --show-removable
    """
    from ...build.classpath import order_artifacts
    from ...build.minifier import Minifier

    try:
        config_obj = load_config(Path(config))
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    if config_obj.minify is None:
        console.print("[yellow]配置中没有 minify 任务，无需分析[/yellow]")
        raise typer.Exit(1)

    artifacts = order_artifacts(config_obj)
    minifier = Minifier(config_obj.minify)

    try:
        result = minifier.analyze(artifact.file for artifact in artifacts)
    except Exception as e:
        console.print(f"[red]分析失败[/red]: {e}")
        raise typer.Exit(1)

    totals = Counter(unit.archive for unit in minifier.graph)
    removable = Counter(minifier.graph.get(name).archive for name in result.removable)

    table = Table(title="可达性分析")
    table.add_column("构件", style="cyan")
    table.add_column("作用", style="magenta")
    table.add_column("类总数", justify="right")
    table.add_column("可移除", justify="right", style="red")

    for artifact in artifacts:
        table.add_row(
            artifact.id,
            "minify" if minifier.accept(artifact) else "-",
            str(totals.get(artifact.file, 0)),
            str(removable.get(artifact.file, 0)),
        )

    console.print(table)
    console.print(f"入口点: {len(minifier.entry_points)} 个, 未找到: {len(result.unresolved)} 个")
    for name in result.unresolved:
        console.print(f"  [yellow]未找到[/yellow] {name}", markup=True)

    if show_removable:
        for name in sorted(result.removable):
            console.print(f"  {name}", markup=False)
