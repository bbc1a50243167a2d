"""
构建上下文模块

定义构建过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..config.schema import ArtifactModel, ClasspathConfig
from .minifier import MemberPredicate, Minifier
from .transform import ModifyFunction, Modifier

# 进度回调类型
ProgressCallback = Callable[[str, int, int, str], None]


@dataclass
class BuildContext:
    """构建上下文，包含构建过程中的共享数据"""
    config: ClasspathConfig
    output_directory: Path
    progress_callback: Optional[ProgressCallback] = None

    # 外部注入的修改函数，优先于配置中的变换器
    modify_function: Optional[ModifyFunction] = None

    # 构建过程中生成的数据
    artifacts: List[ArtifactModel] = field(default_factory=list)
    minifier: Optional[Minifier] = None
    modifier: Optional[Modifier] = None
    minify_predicate: Optional[MemberPredicate] = None
    elements: List[str] = field(default_factory=list)
    manifest_path: Optional[Path] = None

    # 统计信息
    build_stats: Dict[str, Any] = field(default_factory=lambda: {
        'start_time': 0,
        'end_time': 0,
        'total_archives': 0,
        'repackaged_archives': 0,
        'copied_archives': 0,
        'total_units': 0,
        'removable_units': 0,
        'members_dropped': 0,
        'classes_modified': 0,
        'input_size': 0,
        'output_size': 0,
    })

    def report_progress(self, stage: str, percent: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, percent, 100, message)


class BuildError(Exception):
    """构建错误"""
    pass
