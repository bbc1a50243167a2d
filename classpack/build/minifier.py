"""
最小化任务

对整个 classpath 构建类图、解析入口点并计算可移除类，
生成逐成员的保留判定函数。
"""

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..config.schema import ArtifactModel, MinifyModel
from ..utils import analyze_logger
from .archive import unit_name_for_member
from .entry_points import EntryPointResolver
from .reachability import ReachabilityResult, compute_removable
from .unit_graph import UnitGraph, UnitGraphBuilder

# 参数为归档内成员名，返回 True 表示保留
MemberPredicate = Callable[[str], bool]


class Minifier:
    """最小化任务

    每次调用 create_minify_predicate 都重新构建类图，不跨调用共享状态。
    """

    def __init__(self, task: MinifyModel):
        self.task = task
        self.resolver = EntryPointResolver.from_config(task)
        self.graph: Optional[UnitGraph] = None
        self.entry_points: List[str] = []
        self.result: Optional[ReachabilityResult] = None
        self._predicate: Optional[MemberPredicate] = None

    def accept(self, artifact: ArtifactModel) -> bool:
        return self.task.accept(artifact)

    def analyze(self, archive_paths: Iterable[Union[str, Path]]) -> ReachabilityResult:
        """构建类图并计算可移除集合

        Raises:
            ParseError: 任一归档或类文件无法解析
        """
        archive_paths = [Path(p) for p in archive_paths]

        self.graph = UnitGraphBuilder().build(archive_paths)
        self.entry_points = self.resolver.resolve(archive_paths)
        analyze_logger.info(f"入口点 {len(self.entry_points)} 个")
        for name in self.entry_points:
            analyze_logger.debug(f"入口点: {name}")

        self.result = compute_removable(self.graph, self.entry_points)
        return self.result

    def create_minify_predicate(self, archive_paths: Iterable[Union[str, Path]]) -> MemberPredicate:
        """分析 classpath 并返回成员保留判定函数"""
        result = self.analyze(archive_paths)

        def keep(member_name: str) -> bool:
            unit_name = unit_name_for_member(member_name)
            if unit_name is None:
                return True
            return not result.is_removable(unit_name)

        self._predicate = keep
        return keep

    def get_minify_predicate(self) -> MemberPredicate:
        if self._predicate is None:
            raise RuntimeError("尚未调用 create_minify_predicate")
        return self._predicate
