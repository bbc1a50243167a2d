"""
入口点解析

入口点集合由三部分合并而成：
1. 配置中直接给出的类名
2. 归档内 .properties 成员的所有值
3. 归档内服务注册文件（META-INF/services/...）的每一有效行
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..config.schema import MinifyModel
from ..utils import analyze_logger, parse_properties
from .archive import open_archive, read_member
from .classfile import ParseError

TEXT_ENCODING = "utf-8"


def _unique(values: Iterable[str]) -> List[str]:
    # dict 保持插入顺序
    return list(dict.fromkeys(values))


def load_property_values(data: bytes) -> List[str]:
    """读取 .properties 内容，返回去重后的值（不含键）

    Raises:
        ParseError: 内容不是合法的 UTF-8 或含非法转义
    """
    try:
        properties = parse_properties(data.decode(TEXT_ENCODING))
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"属性文件解析失败: {e}") from e

    values = (value.strip() for value in properties.values())
    return _unique(value for value in values if value)


def load_services(data: bytes) -> List[str]:
    """读取服务注册文件，返回去重后的实现类名

    每行去掉 # 及其后的注释和首尾空白，空行忽略。

    Raises:
        ParseError: 内容不是合法的 UTF-8
    """
    try:
        text = data.decode(TEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise ParseError(f"服务注册文件解析失败: {e}") from e

    names = []
    for line in text.splitlines():
        line = line.split('#', 1)[0].strip()
        if line:
            names.append(line)

    return _unique(names)


class EntryPointResolver:
    """入口点解析器"""

    def __init__(
        self,
        entry_points: Optional[Iterable[str]] = None,
        property_entry_points: Optional[Iterable[str]] = None,
        service_entry_points: Optional[Iterable[str]] = None,
    ):
        self.entry_points = _unique(entry_points or [])
        self.property_entry_points = _unique(property_entry_points or [])
        self.service_entry_points = _unique(service_entry_points or [])

    @classmethod
    def from_config(cls, minify: MinifyModel) -> 'EntryPointResolver':
        return cls(
            entry_points=minify.entry_points,
            property_entry_points=minify.property_entry_points,
            service_entry_points=minify.service_entry_points,
        )

    def resolve_archive(self, archive_path: Union[str, Path]) -> List[str]:
        """从单个归档中读取嵌入的入口点，缺失的成员直接跳过"""
        archive_path = Path(archive_path)
        result: List[str] = []

        if not self.property_entry_points and not self.service_entry_points:
            return result

        with open_archive(archive_path) as archive:
            members = {member.filename: member for member in archive.infolist()}

            for path in self.property_entry_points:
                member = members.get(path)
                if member is None:
                    continue
                try:
                    values = load_property_values(read_member(archive, member))
                except ParseError as e:
                    raise ParseError(f"{archive_path.name}!{path}: {e}") from e
                analyze_logger.debug(f"{archive_path.name}!{path}: {len(values)} 个入口点")
                result.extend(values)

            for path in self.service_entry_points:
                member = members.get(path)
                if member is None:
                    continue
                try:
                    names = load_services(read_member(archive, member))
                except ParseError as e:
                    raise ParseError(f"{archive_path.name}!{path}: {e}") from e
                analyze_logger.debug(f"{archive_path.name}!{path}: {len(names)} 个入口点")
                result.extend(names)

        return _unique(result)

    def resolve(self, archive_paths: Iterable[Union[str, Path]]) -> List[str]:
        """合并所有来源的入口点，去重并保持首次出现的顺序"""
        result = list(self.entry_points)

        for archive_path in archive_paths:
            result.extend(self.resolve_archive(archive_path))

        return _unique(result)
