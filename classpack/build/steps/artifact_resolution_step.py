"""
构件解析步骤模块

确定 classpath 中归档的顺序并检查文件存在。
"""

from ...utils import format_size
from ...utils.logging import info, success, debug, LogStage
from ..build_context import BuildContext
from ..classpath import order_artifacts
from .build_step import BuildStep


class ArtifactResolutionStep(BuildStep):
    """构件解析步骤"""

    def __init__(self):
        super().__init__("resolve", "解析构件", LogStage.RESOLVE)

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 5)

    def execute(self, context: BuildContext) -> None:
        info("确定 classpath 顺序", stage=LogStage.RESOLVE)

        artifacts = order_artifacts(context.config)

        for artifact in artifacts:
            if not artifact.file.is_file():
                raise FileNotFoundError(f"构件文件不存在: {artifact.id} -> {artifact.file}")

        skipped = len(context.config.iter_artifacts()) - len(artifacts)
        if skipped:
            debug(f"跳过 {skipped} 个非 jar 构件", stage=LogStage.RESOLVE)

        context.artifacts = artifacts
        context.build_stats['total_archives'] = len(artifacts)
        context.build_stats['input_size'] = sum(a.file.stat().st_size for a in artifacts)

        self.report_done(context, f"共 {len(artifacts)} 个归档")

        success(f"classpath 共 {len(artifacts)} 个归档", stage=LogStage.RESOLVE)
        for index, artifact in enumerate(artifacts):
            debug(f"[{index}] {artifact.id}:{artifact.version} {artifact.file.name} "
                  f"size={format_size(artifact.file.stat().st_size)}", stage=LogStage.RESOLVE)
