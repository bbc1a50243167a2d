"""
Validate 命令实现

校验配置文件；通过时汇总将进入 classpath 的构件及其参与的任务。
"""

import json
from pathlib import Path
from typing import Any, Dict

import typer
from rich.console import Console
from rich.table import Table

from ...config import config_loader, ConfigError, ConfigValidationError
from ...config.schema import ClasspathConfig


console = Console()


def _location(error: Dict[str, Any]) -> str:
    return ".".join(str(item) for item in error.get('loc', [])) or "(根)"


def _print_json(data: Dict[str, Any]) -> None:
    console.print(
        json.dumps(data, ensure_ascii=False, indent=2, default=str),
        markup=False, soft_wrap=True, highlight=False,
    )


def _print_summary(config: ClasspathConfig) -> None:
    from ...build.classpath import order_artifacts

    table = Table(title=f"classpath → {config.output_directory}")
    table.add_column("#", justify="right")
    table.add_column("构件", style="cyan")
    table.add_column("版本")
    table.add_column("minify", justify="center")
    table.add_column("modify", justify="center")

    for index, artifact in enumerate(order_artifacts(config)):
        table.add_row(
            str(index),
            artifact.id,
            artifact.version,
            "✓" if config.minify is not None and config.minify.accept(artifact) else "",
            "✓" if config.modify is not None and config.modify.accept(artifact) else "",
        )

    console.print(table)


def validate_command(
    config: str = typer.Option(..., "--config", "-c", help="配置文件路径"),
    json_output: bool = typer.Option(False, "--json", help="以 JSON 输出校验结果"),
) -> None:
    """校验配置文件

    示例:
        classpack validate -c classpack.yaml
        classpack validate -c classpack.yaml --json
    """
    config_path = Path(config)

    try:
        config_obj = config_loader.load_from_file(config_path)
    except ConfigValidationError as e:
        errors = e.errors
    except ConfigError as e:
        errors = [{'loc': [], 'msg': str(e), 'type': 'config_error'}]
    else:
        if json_output:
            _print_json({"file": str(config_path), "errors": [], "error_count": 0})
        else:
            console.print(f"[green]✓ {config_path.name} 校验通过[/green]")
            _print_summary(config_obj)
        return

    if json_output:
        _print_json({"file": str(config_path), "errors": errors, "error_count": len(errors)})
    else:
        table = Table(title=f"{config_path.name}: {len(errors)} 个错误")
        table.add_column("字段", style="cyan", no_wrap=True)
        table.add_column("问题", style="red")
        table.add_column("取值", style="yellow", max_width=48, overflow="ellipsis")

        for error in errors:
            value = error.get('input')
            table.add_row(_location(error), error.get('msg', ''), "-" if value is None else str(value))

        console.print(table)

    raise typer.Exit(1)
