"""
构建步骤基类模块

步骤只需实现 execute；run 负责把失败记录到所属日志阶段并包装为 BuildError。
"""

from abc import ABC, abstractmethod

from ...utils.logging import error, LogStage
from ..build_context import BuildContext, BuildError


class BuildStep(ABC):
    """构建步骤抽象基类"""

    def __init__(self, name: str, description: str, stage: str = LogStage.BUILD):
        self.name = name
        self.description = description
        self.stage = stage

    def run(self, context: BuildContext) -> None:
        """执行步骤

        Raises:
            BuildError: execute 抛出的任何异常，原始异常保留在 __cause__ 中
        """
        try:
            self.execute(context)
        except Exception as e:
            message = f"{self.description}失败: {e}"
            error(message, stage=self.stage)
            raise BuildError(message) from e

    def report_done(self, context: BuildContext, message: str = "") -> None:
        """把进度推进到本步骤区间的终点"""
        context.report_progress(self.description, self.get_progress_range()[1], message)

    @abstractmethod
    def execute(self, context: BuildContext) -> None:
        """执行构建步骤"""
        pass

    @abstractmethod
    def get_progress_range(self) -> tuple[int, int]:
        """获取此步骤的进度范围 (start_percent, end_percent)"""
        pass
