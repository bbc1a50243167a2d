"""
归档访问工具

JAR/ZIP 归档的打开、成员遍历、类成员名映射和存储方式检查。
"""

import re
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from .classfile import ParseError

CLASS_SUFFIX = ".class"

# 多版本 JAR 中按 Java 版本覆盖的成员
_VERSIONED_PREFIX = re.compile(r'META-INF/versions/\d+/')

# 仅支持原样存储和 Deflate 压缩
SUPPORTED_METHODS = {
    zipfile.ZIP_STORED: "stored",
    zipfile.ZIP_DEFLATED: "deflated",
}


class UnsupportedStorageError(Exception):
    """归档成员使用了不支持的存储方式"""

    def __init__(self, archive: str, member: str, method: int):
        super().__init__(f"{archive}!{member}: 不支持的存储方式 {method}（仅支持 stored/deflated）")
        self.archive = archive
        self.member = member
        self.method = method


def unit_name_for_member(member_name: str) -> Optional[str]:
    """把归档内路径映射为点分类名，非类成员返回 None

    META-INF/versions/<n>/ 下的覆盖版本映射到基础类名，与基础类同去同留。

    Example:
        com/example/Foo$Bar.class -> com.example.Foo$Bar
        META-INF/versions/11/com/example/Foo.class -> com.example.Foo
    """
    if member_name.endswith('/') or not member_name.endswith(CLASS_SUFFIX):
        return None
    versioned = _VERSIONED_PREFIX.match(member_name)
    if versioned is not None:
        member_name = member_name[versioned.end():]
    return member_name[:-len(CLASS_SUFFIX)].replace('/', '.')


def is_versioned_member(member_name: str) -> bool:
    return _VERSIONED_PREFIX.match(member_name) is not None


def is_class_member(member_name: str) -> bool:
    return unit_name_for_member(member_name) is not None


def check_storage_method(archive_name: str, member: zipfile.ZipInfo) -> None:
    """成员存储方式不是 stored/deflated 时抛出 UnsupportedStorageError"""
    if member.compress_type not in SUPPORTED_METHODS:
        raise UnsupportedStorageError(archive_name, member.filename, member.compress_type)


@contextmanager
def open_archive(archive_path: Union[str, Path]) -> Iterator[zipfile.ZipFile]:
    """以只读方式打开归档，容器损坏时抛出 ParseError"""
    archive_path = Path(archive_path)

    try:
        archive = zipfile.ZipFile(archive_path, 'r')
    except zipfile.BadZipFile as e:
        raise ParseError(f"无法读取归档 {archive_path}: {e}") from e

    with archive:
        yield archive


def read_member(archive: zipfile.ZipFile, member: zipfile.ZipInfo) -> bytes:
    """读取成员的解压后内容"""
    archive_name = Path(archive.filename or '<memory>').name
    check_storage_method(archive_name, member)

    try:
        return archive.read(member)
    except zipfile.BadZipFile as e:
        raise ParseError(f"{archive_name}!{member.filename}: {e}") from e


def iter_class_members(archive: zipfile.ZipFile) -> Iterator[Tuple[zipfile.ZipInfo, str]]:
    """按归档顺序遍历类成员，返回 (成员信息, 类名)"""
    for member in archive.infolist():
        unit_name = unit_name_for_member(member.filename)
        if unit_name is not None:
            yield member, unit_name
