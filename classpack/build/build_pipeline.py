"""
构建管道模块

按顺序执行 resolve → analyze → prepare-modify → repackage → manifest 五个步骤，
任一步骤失败即终止并包装为 BuildError。
"""

import time
from pathlib import Path
from typing import List, Optional, Union

from ..config.schema import ClasspathConfig
from ..utils import format_size
from ..utils.logging import debug, info, success, error, LogStage
from .build_context import BuildContext, BuildError, ProgressCallback
from .steps.build_step import BuildStep
from .steps.artifact_resolution_step import ArtifactResolutionStep
from .steps.minify_analysis_step import MinifyAnalysisStep
from .steps.modify_preparation_step import ModifyPreparationStep
from .steps.repackaging_step import RepackagingStep
from .steps.manifest_writing_step import ManifestWritingStep
from .transform import ModifyFunction


class BuildPipeline:
    """classpath 构建管道"""

    def __init__(self):
        self._steps: List[BuildStep] = []
        self._init_default_steps()

    def _init_default_steps(self):
        self._steps = [
            ArtifactResolutionStep(),
            MinifyAnalysisStep(),
            ModifyPreparationStep(),
            RepackagingStep(),
            ManifestWritingStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """返回步骤列表的副本"""
        return self._steps.copy()

    def execute(
        self,
        config: ClasspathConfig,
        output_directory: Optional[Union[str, Path]] = None,
        progress_callback: Optional[ProgressCallback] = None,
        modify_function: Optional[ModifyFunction] = None,
    ) -> BuildContext:
        """执行构建管道

        Args:
            config: 配置对象
            output_directory: 输出目录，None 时使用配置中的 output_directory
            progress_callback: 进度回调函数
            modify_function: 外部注入的类成员修改函数

        Returns:
            BuildContext: 构建上下文，包含所有构建结果

        Raises:
            BuildError: 构建失败，原始异常保留在 __cause__ 中
        """
        context = BuildContext(
            config=config,
            output_directory=Path(output_directory or config.output_directory),
            progress_callback=progress_callback,
            modify_function=modify_function,
        )

        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始组装 classpath: {context.output_directory}", stage=LogStage.BUILD)
            debug(
                f"构建配置: minify={config.minify is not None} modify={config.modify is not None} "
                f"compression_level={config.compression_level} strict_create={config.strict_create}",
                stage=LogStage.BUILD,
            )

            for step in self._steps:
                info(f"执行步骤: {step.description}", stage=LogStage.BUILD)
                step.run(context)

            context.build_stats['end_time'] = time.time()
            build_time = context.build_stats['end_time'] - context.build_stats['start_time']

            success(f"classpath 组装成功: {context.manifest_path}", stage=LogStage.DONE)
            info(f"构建时间: {build_time:.1f}秒")
            info(f"归档数量: {context.build_stats['total_archives']}")
            if config.minify is not None:
                info(f"移除类: {context.build_stats['removable_units']} / {context.build_stats['total_units']}")
            info(f"输入大小: {format_size(context.build_stats['input_size'])}")
            info(f"输出大小: {format_size(context.build_stats['output_size'])}")

            return context

        except Exception as e:
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.BUILD)
            raise BuildError(f"构建失败: {e}") from e

    def validate_pipeline(self) -> List[str]:
        """检查各步骤的进度区间首尾相接并恰好覆盖 0-100

        Returns:
            List[str]: 问题描述，空列表表示没有问题
        """
        if not self._steps:
            return ["构建管道中没有步骤"]

        problems = []
        expected = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != expected:
                problems.append(f"{step.name}: 进度从 {start}% 开始，应接在 {expected}% 之后")
            if end <= start:
                problems.append(f"{step.name}: 进度区间 {start}%-{end}% 为空")
            expected = end

        if expected != 100:
            problems.append(f"进度在 {expected}% 处结束，而不是 100%")

        return problems
