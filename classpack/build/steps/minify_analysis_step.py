"""
最小化分析步骤模块

对整个 classpath 做可达性分析，生成成员保留判定函数。
"""

from ...utils.logging import info, success, warning, LogStage
from ..build_context import BuildContext
from ..minifier import Minifier
from .build_step import BuildStep


class MinifyAnalysisStep(BuildStep):
    """最小化分析步骤"""

    def __init__(self):
        super().__init__("analyze", "可达性分析", LogStage.ANALYZE)

    def get_progress_range(self) -> tuple[int, int]:
        return (5, 40)

    def execute(self, context: BuildContext) -> None:
        if context.config.minify is None:
            info("未配置最小化任务，跳过可达性分析", stage=LogStage.ANALYZE)
            return

        info("分析类可达性", stage=LogStage.ANALYZE)
        start, end = self.get_progress_range()
        context.report_progress(self.description, start, "构建类图...")

        minifier = Minifier(context.config.minify)
        context.minify_predicate = minifier.create_minify_predicate(
            artifact.file for artifact in context.artifacts
        )
        context.minifier = minifier

        result = minifier.result
        context.build_stats['total_units'] = len(minifier.graph)
        context.build_stats['removable_units'] = len(result.removable)

        if minifier.graph.duplicates:
            warning(f"{len(minifier.graph.duplicates)} 个类在多个归档中重复定义", stage=LogStage.ANALYZE)

        self.report_done(context, f"可移除 {len(result.removable)} 个类")
        success("可达性分析完成", stage=LogStage.ANALYZE)
