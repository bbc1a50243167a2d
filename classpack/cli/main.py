"""
classpack CLI 主入口

提供 build/validate/analyze/example 等命令。
"""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from ..utils import configure_logging
from .commands import analyze, build, validate


app = typer.Typer(
    name="classpack",
    help="classpack - JAR classpath 组装与最小化工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"classpack v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level="DEBUG" if verbose else "INFO")


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
    """classpack - JAR classpath 组装与最小化工具"""


app.command("build", help="组装 classpath")(build.build_command)
app.command("validate", help="验证配置文件")(validate.validate_command)
app.command("analyze", help="只做可达性分析，不写出文件")(analyze.analyze_command)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "classpack.yaml",
        "--output", "-o",
        help="示例配置的写出位置"
    )
) -> None:
    """写出一份带 minify 和 modify 任务的示例配置"""
    from ..config import ConfigError, save_config
    from ..config.schema import ArtifactModel, ClasspathConfig, MinifyModel, ModifyModel, TransformerName

    config = ClasspathConfig(
        project=ArtifactModel(
            group_id="com.example",
            artifact_id="app",
            version="1.0.0",
            file="target/app-1.0.0.jar",
        ),
        dependencies=[
            ArtifactModel(
                group_id="com.example",
                artifact_id="library",
                version="2.1.0",
                file="lib/library-2.1.0.jar",
            ),
        ],
        output_directory="target/classpath",
        minify=MinifyModel(
            artifacts=["com.example:library"],
            entry_points=["com.example.Main"],
            service_entry_points=["META-INF/services/java.sql.Driver"],
        ),
        modify=ModifyModel(
            artifacts=["*:*"],
            transformers=[TransformerName.REMOVE_DEBUG_INFORMATION],
        ),
    )

    try:
        save_config(config, output)
        console.print(f"[green]✓[/green] 已写出 {output}")
        console.print("修改其中的构件坐标、文件路径和入口点后执行:")
        console.print(f"  [cyan]classpack build -c {output}[/cyan]")
    except ConfigError as e:
        console.print(f"[red]写出示例配置失败[/red]: {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
