"""
构建器主类

对外提供统一的 classpath 组装接口，内部使用构建管道。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..config.schema import ClasspathConfig
from .build_context import BuildError, ProgressCallback
from .build_pipeline import BuildPipeline
from .transform import ModifyFunction


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    manifest_path: Optional[Path] = None
    elements: List[str] = field(default_factory=list)
    build_time: Optional[float] = None
    removable_units: int = 0
    error: Optional[str] = None
    exception: Optional[BuildError] = None


class ClasspathBuilder:
    """classpath 构建器"""

    def __init__(self, modify_function: Optional[ModifyFunction] = None):
        """初始化构建器

        Args:
            modify_function: 外部注入的类成员修改函数，优先于配置中的变换器
        """
        self.modify_function = modify_function
        self.pipeline = BuildPipeline()

    def build(
        self,
        config: ClasspathConfig,
        output_directory: Optional[Union[str, Path]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildResult:
        """组装 classpath

        失败不抛出异常，而是返回 success=False 的结果，异常链保留在 exception 中。
        """
        try:
            context = self.pipeline.execute(
                config,
                output_directory,
                progress_callback=progress_callback,
                modify_function=self.modify_function,
            )
        except BuildError as e:
            return BuildResult(success=False, error=str(e), exception=e)

        return BuildResult(
            success=True,
            manifest_path=context.manifest_path,
            elements=list(context.elements),
            build_time=context.build_stats['end_time'] - context.build_stats['start_time'],
            removable_units=context.build_stats['removable_units'],
        )

    def validate_build_pipeline(self) -> List[str]:
        return self.pipeline.validate_pipeline()
