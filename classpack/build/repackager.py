"""
归档重新打包

逐成员复制输入归档：跳过可移除的类，按需对类成员应用修改函数，
其余成员原样写出。成员顺序与输入一致，输入归档不会被修改。
"""

import errno
import shutil
import struct
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..utils import format_size, repack_logger
from .archive import check_storage_method, is_class_member, open_archive, read_member
from .minifier import MemberPredicate
from .transform import ModifyFunction, TransformError

# ZIP64 扩展字段由写出端按需重新生成
_ZIP64_EXTRA_ID = 0x0001


@dataclass
class RepackageStats:
    """单个归档的重新打包统计"""
    members_total: int = 0
    members_kept: int = 0
    members_dropped: int = 0
    classes_modified: int = 0
    input_size: int = 0
    output_size: int = 0


def _strip_zip64_extra(extra: bytes) -> bytes:
    parts = []
    pos = 0

    while pos + 4 <= len(extra):
        header_id, size = struct.unpack('<HH', extra[pos:pos + 4])
        end = pos + 4 + size
        if header_id != _ZIP64_EXTRA_ID:
            parts.append(extra[pos:end])
        pos = end

    return b''.join(parts)


def _copy_entry_info(member: zipfile.ZipInfo) -> zipfile.ZipInfo:
    """复制成员元数据；大小和 CRC 由 zipfile 写出时重新计算"""
    entry = zipfile.ZipInfo(member.filename, date_time=member.date_time)
    entry.compress_type = member.compress_type
    entry.comment = member.comment
    entry.extra = _strip_zip64_extra(member.extra)
    entry.create_system = member.create_system
    entry.external_attr = member.external_attr
    entry.internal_attr = member.internal_attr
    return entry


class ArchiveRepackager:
    """归档重新打包器"""

    def __init__(self, compression_level: Optional[int] = None, strict_create: bool = False):
        """
        Args:
            compression_level: Deflate 压缩级别（0-9），None 表示默认
            strict_create: 输出文件已存在时是否报错
        """
        self.compression_level = compression_level
        self.strict_create = strict_create

    def repackage(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        keep: Optional[MemberPredicate] = None,
        modify: Optional[ModifyFunction] = None,
    ) -> RepackageStats:
        """重新打包单个归档

        Args:
            input_path: 输入归档
            output_path: 输出归档
            keep: 成员保留判定，None 表示全部保留
            modify: 类成员修改函数，None 表示不修改

        Returns:
            RepackageStats: 统计信息

        Raises:
            UnsupportedStorageError: 成员存储方式不是 stored/deflated
            TransformError: 修改函数失败
            ParseError: 输入归档损坏
            OSError: 读写失败或输出已存在（strict_create）
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        archive_name = input_path.name
        stats = RepackageStats(input_size=input_path.stat().st_size)
        mode = 'x' if self.strict_create else 'w'

        with open_archive(input_path) as source, zipfile.ZipFile(output_path, mode) as target:
            for member in source.infolist():
                stats.members_total += 1

                if keep is not None and not keep(member.filename):
                    stats.members_dropped += 1
                    repack_logger.debug(f"{archive_name}: 移除 {member.filename}")
                    continue

                check_storage_method(archive_name, member)
                entry = _copy_entry_info(member)
                data = read_member(source, member)

                if modify is not None and is_class_member(member.filename):
                    try:
                        data = modify(data)
                    except Exception as e:
                        raise TransformError(f"{archive_name}!{member.filename}: {e}") from e
                    if not isinstance(data, (bytes, bytearray)):
                        raise TransformError(
                            f"{archive_name}!{member.filename}: 修改函数返回了 {type(data).__name__}，应为 bytes"
                        )
                    stats.classes_modified += 1

                target.writestr(entry, data, compresslevel=self.compression_level)
                stats.members_kept += 1

        stats.output_size = output_path.stat().st_size
        repack_logger.info(
            f"{archive_name} -> {output_path.name}: 保留 {stats.members_kept} 个成员, "
            f"移除 {stats.members_dropped} 个, 修改 {stats.classes_modified} 个类 "
            f"({format_size(stats.input_size)} -> {format_size(stats.output_size)})"
        )
        return stats

    def copy(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> None:
        """原样复制归档"""
        input_path = Path(input_path)
        output_path = Path(output_path)

        if self.strict_create and output_path.exists():
            raise FileExistsError(errno.EEXIST, "输出文件已存在", str(output_path))

        shutil.copyfile(input_path, output_path)
        repack_logger.info(f"{input_path.name} -> {output_path.name}: 原样复制 ({format_size(output_path.stat().st_size)})")
