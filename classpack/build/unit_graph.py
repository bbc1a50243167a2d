"""
类单元图

扫描 classpath 中的每个归档，把每个 .class 成员登记为图节点，
并以类文件常量池中的引用作为出边。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from ..utils import format_size, scan_logger
from .archive import is_versioned_member, iter_class_members, open_archive, read_member
from .classfile import ParseError, class_dependencies


@dataclass
class Unit:
    """图节点：一个类"""
    name: str
    archive: Path
    references: Set[str] = field(default_factory=set)


class UnitGraph:
    """类名到 Unit 的映射，跨整个 classpath 聚合

    同名类出现在多个归档中时，先登记者生效（与 JVM 按 classpath 顺序加载一致），
    后出现的定义被忽略并记录在 duplicates 中。
    """

    def __init__(self):
        self._units: Dict[str, Unit] = {}
        self.duplicates: List[Tuple[str, Path]] = []

    def add(self, unit: Unit) -> bool:
        """登记节点，返回是否生效"""
        existing = self._units.get(unit.name)
        if existing is not None:
            self.duplicates.append((unit.name, unit.archive))
            scan_logger.warning(
                f"类 {unit.name} 重复定义于 {unit.archive.name}，沿用 {existing.archive.name} 中的定义"
            )
            return False

        self._units[unit.name] = unit
        return True

    def get(self, name: str) -> Optional[Unit]:
        return self._units.get(name)

    def names(self) -> Set[str]:
        return set(self._units)

    def edge_count(self) -> int:
        return sum(len(unit.references) for unit in self._units.values())

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units.values())


class UnitGraphBuilder:
    """类单元图构建器"""

    def __init__(self):
        self.graph = UnitGraph()
        self.scanned_bytes = 0

    def add_archive(self, archive_path: Union[str, Path]) -> int:
        """扫描单个归档并登记其中的类

        多版本 JAR 中的覆盖版本不单独成为节点，其引用并入同一归档中的基础类；
        只有覆盖版本而没有基础类时，以基础类名登记。

        Returns:
            int: 该归档中的类成员数量

        Raises:
            ParseError: 归档或类文件损坏
            OSError: 文件无法读取
        """
        archive_path = Path(archive_path)
        versioned: Dict[str, Set[str]] = {}
        count = 0

        with open_archive(archive_path) as archive:
            for member, unit_name in iter_class_members(archive):
                data = read_member(archive, member)
                self.scanned_bytes += len(data)

                try:
                    _, references = class_dependencies(data)
                except ParseError as e:
                    raise ParseError(f"{archive_path.name}!{member.filename}: {e}") from e

                references.discard(unit_name)
                count += 1

                if is_versioned_member(member.filename):
                    versioned.setdefault(unit_name, set()).update(references)
                    continue

                self.graph.add(Unit(unit_name, archive_path, references))

        for unit_name, references in versioned.items():
            unit = self.graph.get(unit_name)
            if unit is not None and unit.archive == archive_path:
                unit.references |= references
            else:
                self.graph.add(Unit(unit_name, archive_path, references))

        scan_logger.debug(f"{archive_path.name}: {count} 个类, {len(versioned)} 个多版本覆盖")
        return count

    def build(self, archive_paths: Iterable[Union[str, Path]]) -> UnitGraph:
        """按 classpath 顺序扫描所有归档"""
        for archive_path in archive_paths:
            self.add_archive(archive_path)

        scan_logger.info(
            f"类图构建完成: {len(self.graph)} 个类, {self.graph.edge_count()} 条引用, "
            f"扫描 {format_size(self.scanned_bytes)}"
        )
        return self.graph


def build_unit_graph(archive_paths: Iterable[Union[str, Path]]) -> UnitGraph:
    """便捷函数：构建类单元图"""
    return UnitGraphBuilder().build(archive_paths)
