"""
可达性分析

从入口点出发沿引用边做广度优先遍历，图中未被访问到的类即为可移除类。
"""

from collections import deque
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Set

from ..utils import analyze_logger
from .unit_graph import UnitGraph


@dataclass
class ReachabilityResult:
    """可达性分析结果"""
    reachable: Set[str]
    removable: FrozenSet[str]
    unresolved: List[str] = field(default_factory=list)

    def is_removable(self, unit_name: str) -> bool:
        return unit_name in self.removable


def reachable_units(graph: UnitGraph, entry_points: Iterable[str]) -> Set[str]:
    """计算入口点及其传递依赖的闭包

    入口点即使不在图中也计入结果；指向图外的引用不再继续展开。
    入队时标记已访问，环不会导致重复访问。
    """
    visited: Set[str] = set()
    queue = deque()

    for name in entry_points:
        if name not in visited:
            visited.add(name)
            queue.append(name)

    while queue:
        unit = graph.get(queue.popleft())
        if unit is None:
            continue

        for reference in unit.references:
            if reference not in visited and reference in graph:
                visited.add(reference)
                queue.append(reference)

    return visited


def compute_removable(graph: UnitGraph, entry_points: Iterable[str]) -> ReachabilityResult:
    """可移除集合 = 全部类 - (入口点 ∪ 入口点的传递依赖)"""
    entry_points = list(entry_points)

    unresolved = [name for name in entry_points if name not in graph]
    for name in unresolved:
        analyze_logger.warning(f"入口点 {name} 未在 classpath 中找到")

    reachable = reachable_units(graph, entry_points)
    removable = frozenset(graph.names() - reachable)

    analyze_logger.info(
        f"可达性分析完成: 入口点 {len(entry_points)} 个, 可达 {len(graph) - len(removable)} 个类, "
        f"可移除 {len(removable)} 个类"
    )

    return ReachabilityResult(reachable=reachable, removable=removable, unresolved=unresolved)
